"""Shared test fixtures."""

from pathlib import Path

import pytest

from ultiserve.config import Config, HighlightConfig, ServeConfig, ServerConfig
from ultiserve.core.highlight import Highlighter

FAKE_LANGUAGES = frozenset({"rust", "python"})


class FakeHighlighter(Highlighter):
    """Highlighter that knows a fixed set of languages and records calls."""

    def __init__(self) -> None:
        super().__init__()
        self.calls: list[tuple[str, str]] = []

    def highlight(self, token: str, text: str) -> str | None:
        self.calls.append((token, text))
        if token not in FAKE_LANGUAGES:
            return None
        return fake_highlight(token)


def fake_highlight(token: str) -> str:
    return f'<div class="fake-highlight">{token}</div>'


@pytest.fixture
def root_dir(tmp_path: Path) -> Path:
    """Create the directory served in tests."""
    root = tmp_path / "site"
    root.mkdir()
    return root


@pytest.fixture
def test_config(root_dir: Path) -> Config:
    """Create a test configuration serving root_dir."""
    return Config(
        server=ServerConfig(),
        serve=ServeConfig(root_dir=root_dir),
        highlight=HighlightConfig(),
    )


@pytest.fixture(scope="session")
def highlighter() -> Highlighter:
    return Highlighter()


@pytest.fixture
def fake_highlighter() -> FakeHighlighter:
    return FakeHighlighter()
