"""Rendering errors."""


class RenderError(Exception):
    """Raised when a page cannot be produced from content that was read.

    Covers template substitution and Markdown serialization failures.
    Missing files are reported with FileNotFoundError instead.
    """
