"""Ultiserve - serve your files over http."""

__version__ = "0.1.0"
