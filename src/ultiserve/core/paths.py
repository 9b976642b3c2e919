"""Request path resolution.

Maps URL paths onto the served root directory. Resolution is lexical:
``.`` segments are dropped and ``..`` pops the previous segment. A path
that would climb above the root is refused rather than clamped.
"""

import asyncio
from pathlib import Path

from ultiserve.core.types import UNKNOWN_PATH, URLPath


def normalize_url_path(url_path: str) -> URLPath:
    """Normalize a raw request path.

    Args:
        url_path: Path component of the request URL (already percent-decoded)

    Returns:
        Path with a single leading "/"; "/" for the root
    """
    if not url_path or url_path == "/":
        return URLPath("/")
    if not url_path.startswith("/"):
        url_path = f"/{url_path}"
    return URLPath(url_path)


def resolve_request_path(root: Path, url_path: str) -> Path:
    """Resolve a URL path to a filesystem path beneath root.

    Args:
        root: Directory being served
        url_path: Request path, e.g. "/docs/guide.md"

    Returns:
        Filesystem path inside root

    Raises:
        FileNotFoundError: If the path escapes root or cannot name a file
    """
    parts: list[str] = []
    for segment in url_path.split("/"):
        if segment in ("", "."):
            continue
        if "\x00" in segment:
            raise FileNotFoundError(f"Invalid path: {url_path!r}")
        if segment == "..":
            if not parts:
                raise FileNotFoundError(f"Path escapes root: {url_path!r}")
            parts.pop()
            continue
        parts.append(segment)

    return root.joinpath(*parts)


def _canonicalize(path: Path) -> str:
    try:
        return str(path.resolve(strict=True))
    except (OSError, RuntimeError):
        return UNKNOWN_PATH


async def canonicalize(path: Path) -> str:
    """Return the absolute, symlink-free form of path.

    Falls back to "<unknown>" when the path cannot be resolved.
    """
    return await asyncio.to_thread(_canonicalize, path)
