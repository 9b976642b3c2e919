"""Markdown to HTML conversion with highlighted code fences.

Documents are parsed into mistune's token tree, fenced code blocks with a
known language are swapped in place for pre-rendered HTML blocks, and the
tree is then serialized by an HTML renderer using the same plugins.
"""

import logging
import re
from collections.abc import Callable
from typing import Any

import mistune

from ultiserve.core.errors import RenderError
from ultiserve.core.highlight import Highlighter

logger = logging.getLogger(__name__)

PLUGINS = ["strikethrough", "table", "url", "task_lists"]

# Keeps generated anchors apart from ids written by document authors
HEADING_ID_PREFIX = "user-content-"

_REJECTED_ANCHOR_CHARS = re.compile(r"[^\w\- ]")

Token = dict[str, Any]
Visitor = Callable[[Token], Token | None]


class MarkdownError(RenderError):
    """Raised when a parsed document cannot be serialized to HTML."""


class MarkdownRenderer:
    """Renders Markdown documents to HTML.

    Fenced code blocks whose info string names a language known to the
    highlighter are replaced with the highlighter's HTML. Raw HTML in the
    document is passed through, since highlighted blocks are HTML too.
    """

    def __init__(self, highlighter: Highlighter) -> None:
        self._highlighter = highlighter
        # Two instances share a plugin set: one yields the token tree, the
        # other owns the HTML renderer the plugins registered themselves on.
        self._parser = mistune.create_markdown(
            escape=False,
            renderer="ast",
            plugins=PLUGINS,
        )
        self._html = mistune.create_markdown(escape=False, plugins=PLUGINS)

    def render(self, source: str) -> str:
        """Render a Markdown document.

        Args:
            source: Markdown text

        Returns:
            HTML fragment

        Raises:
            MarkdownError: If serialization fails
        """
        tokens, state = self._parser.parse(source)
        anchors = _AnchorGenerator()

        def visit(token: Token) -> Token | None:
            if token["type"] == "heading":
                token.setdefault("attrs", {})["id"] = anchors.next_id(token)
                return None
            return self._highlight_fence(token)

        walk_tokens(tokens, visit)

        try:
            html = self._html.renderer(tokens, state)
        except Exception as e:
            raise MarkdownError(f"Failed to render markdown: {e}") from e

        if not isinstance(html, str):
            raise MarkdownError("Markdown renderer did not produce text")
        return html

    def _highlight_fence(self, token: Token) -> Token | None:
        """Return an HTML block replacing a highlightable fence, or None."""
        if token["type"] != "block_code" or token.get("style") != "fenced":
            return None

        info = token.get("attrs", {}).get("info")
        literal = token.get("raw")
        if not isinstance(info, str) or not isinstance(literal, str):
            return None

        words = info.split(None, 1)
        if not words:
            return None

        highlighted = self._highlighter.highlight(words[0], literal)
        if highlighted is None:
            return None
        logger.debug(f"Highlighted {words[0]} code fence")
        return {"type": "block_html", "raw": highlighted}


def walk_tokens(tokens: list[Token], visit: Visitor) -> None:
    """Visit a token tree depth-first, pre-order.

    When visit returns a token, it takes the visited token's place in its
    parent list and is not descended into. Siblings are never added,
    removed or reordered.

    Args:
        tokens: Token list, mutated in place
        visit: Callback returning a replacement token or None
    """
    for index, token in enumerate(tokens):
        replacement = visit(token)
        if replacement is not None:
            tokens[index] = replacement
            continue

        children = token.get("children")
        if isinstance(children, list):
            walk_tokens(children, visit)


def plain_text(tokens: list[Token]) -> str:
    """Concatenate the literal text of inline tokens."""
    parts: list[str] = []
    for token in tokens:
        if token["type"] in ("text", "codespan"):
            parts.append(token.get("raw", ""))
        children = token.get("children")
        if isinstance(children, list):
            parts.append(plain_text(children))
    return "".join(parts)


class _AnchorGenerator:
    """Generates unique heading anchors for one document."""

    def __init__(self) -> None:
        self._seen: set[str] = set()

    def next_id(self, heading: Token) -> str:
        text = plain_text(heading.get("children", []))
        slug = _REJECTED_ANCHOR_CHARS.sub("", text.lower()).replace(" ", "-")

        anchor = slug
        suffix = 0
        while anchor in self._seen:
            suffix += 1
            anchor = f"{slug}-{suffix}"
        self._seen.add(anchor)

        return f"{HEADING_ID_PREFIX}{anchor}"
