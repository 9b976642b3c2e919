"""Syntax highlighting via Pygments.

Lexers are looked up by a short token: a lexer alias ("rust", "python")
or a file extension ("rs", "py"). Output uses inline styles from a single
theme so highlighted blocks need no extra stylesheet.
"""

import logging

from pygments import highlight
from pygments.formatters import HtmlFormatter
from pygments.lexer import Lexer
from pygments.lexers import get_lexer_by_name, get_lexer_for_filename
from pygments.styles import get_style_by_name
from pygments.util import ClassNotFound

logger = logging.getLogger(__name__)

DEFAULT_THEME = "dracula"


class Highlighter:
    """Renders source text as highlighted HTML.

    Holds only read-only state after construction and can be shared
    between concurrent requests.
    """

    def __init__(self, theme: str = DEFAULT_THEME) -> None:
        """Initialize highlighter.

        Args:
            theme: Pygments style name used for every highlighted block

        Raises:
            ValueError: If the theme is unknown
        """
        try:
            get_style_by_name(theme)
        except ClassNotFound as e:
            raise ValueError(f"Unknown highlighting theme: {theme}") from e

        self._theme = theme
        self._formatter = HtmlFormatter(style=theme, noclasses=True)

    @property
    def theme(self) -> str:
        """Name of the Pygments style in use."""
        return self._theme

    def find_lexer(self, token: str) -> Lexer | None:
        """Find a lexer by alias or file extension.

        Args:
            token: Language name or extension, e.g. "rust" or "rs"

        Returns:
            Lexer instance, or None if nothing matches
        """
        if not token:
            return None

        try:
            return get_lexer_by_name(token, stripnl=False)
        except ClassNotFound:
            pass

        try:
            return get_lexer_for_filename(f"file.{token}", stripnl=False)
        except ClassNotFound:
            return None

    def highlight(self, token: str, text: str) -> str | None:
        """Highlight text with the grammar named by token.

        Args:
            token: Language name or extension
            text: Source text to highlight

        Returns:
            HTML fragment, or None when no grammar matches token
        """
        lexer = self.find_lexer(token)
        if lexer is None:
            logger.debug(f"No grammar for {token!r}")
            return None
        return highlight(text, lexer, self._formatter)
