"""Directory listings.

Builds the data behind directory index pages. Only immediate children are
listed; the walk never recurses.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path

import aiofiles.os

from ultiserve.core.paths import canonicalize
from ultiserve.core.types import URLPath


@dataclass(frozen=True)
class Entry:
    """A single directory entry.

    Directory names carry a trailing "/" so they read as directories.
    """

    name: str
    is_dir: bool


@dataclass(frozen=True)
class DirectoryListing:
    """Contents of one directory as shown on an index page."""

    full_current_dir: str
    current_dir: str
    has_parent: bool
    files: list[Entry] = field(default_factory=list)


def _display_name(name: str) -> str:
    # Undecodable bytes in a name become U+FFFD rather than surrogates
    return os.fsencode(name).decode("utf-8", errors="replace")


async def list_directory(path: Path, request_path: URLPath) -> DirectoryListing:
    """List the immediate children of a directory.

    Entries are sorted by display name with plain codepoint comparison,
    so "B" sorts before "a" and "file10" before "file2".

    Args:
        path: Directory to list
        request_path: Normalized request path that resolved to path

    Returns:
        DirectoryListing for the index template

    Raises:
        OSError: If path is not a readable directory
    """
    names = await aiofiles.os.listdir(path)

    files: list[Entry] = []
    for name in names:
        display = _display_name(name)
        is_dir = await aiofiles.os.path.isdir(path / name)
        if is_dir:
            display += "/"
        files.append(Entry(name=display, is_dir=is_dir))

    files.sort(key=lambda entry: entry.name)

    return DirectoryListing(
        full_current_dir=await canonicalize(path),
        current_dir=request_path.rstrip("/"),
        has_parent=request_path != "/",
        files=files,
    )
