"""Core type definitions."""

from typing import NewType

# URL path as received from the client (e.g., "/", "/docs/guide.md")
# Distinct from filesystem Path to catch type mismatches
URLPath = NewType("URLPath", str)

# Shown in place of a canonical path that could not be resolved
UNKNOWN_PATH = "<unknown>"
