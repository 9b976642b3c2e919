"""File classification and rendering.

Decides how a file's content is shown: HTML passes through, Markdown is
converted, other text is highlighted by extension when possible, and
anything that is not UTF-8 is handed back as raw bytes.
"""

import asyncio
from dataclasses import dataclass
from pathlib import Path

from ultiserve.core.highlight import Highlighter
from ultiserve.core.markdown import MarkdownRenderer
from ultiserve.core.paths import canonicalize

HTML_EXTENSIONS = frozenset({"html", "html5"})
MARKDOWN_EXTENSIONS = frozenset({"md", "markdown"})


@dataclass(frozen=True)
class RenderedFile:
    """A text file ready for the file template.

    ``unsafe_content`` is set when ``content`` is already HTML and must be
    embedded without escaping.
    """

    content: str
    unsafe_content: bool
    file_name: str
    raw_url: str


@dataclass(frozen=True)
class RawBinary:
    """Content that is not valid UTF-8, served as-is."""

    data: bytes


def file_extension(path: Path) -> str | None:
    """Return the extension of path without the dot, or None."""
    suffix = path.suffix
    return suffix[1:] if suffix else None


class FileRenderer:
    """Renders file contents for display.

    Extension matching is case-sensitive: "README.MD" is not treated as
    Markdown and goes through the highlighter instead.
    """

    def __init__(self, highlighter: Highlighter, markdown: MarkdownRenderer) -> None:
        self._highlighter = highlighter
        self._markdown = markdown

    async def render_file(
        self, path: Path, raw: bytes, url: str
    ) -> RenderedFile | RawBinary:
        """Render a file read from disk.

        Args:
            path: Filesystem path the bytes came from
            raw: File contents
            url: Percent-encoded request path of the file, without trailing "/"

        Returns:
            RenderedFile for text, RawBinary for anything else

        Raises:
            MarkdownError: If a Markdown file cannot be rendered
        """
        try:
            text = raw.decode("utf-8")
        except UnicodeDecodeError:
            return RawBinary(raw)

        content, unsafe_content = await asyncio.to_thread(self.render_text, path, text)

        return RenderedFile(
            content=content,
            unsafe_content=unsafe_content,
            file_name=await canonicalize(path),
            raw_url=f"{url}?raw=true",
        )

    def render_text(self, path: Path, text: str) -> tuple[str, bool]:
        """Render decoded file text.

        Args:
            path: Filesystem path, used only for its extension
            text: Decoded file contents

        Returns:
            Tuple of (body, unsafe_content flag)
        """
        ext = file_extension(path)

        if ext in HTML_EXTENSIONS:
            return text, True

        if ext in MARKDOWN_EXTENSIONS:
            return self._markdown.render(text), True

        if ext is not None:
            highlighted = self._highlighter.highlight(ext, text)
            if highlighted is not None:
                return highlighted, True

        return text, False
