"""Core rendering pipeline."""
