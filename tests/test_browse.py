"""Tests for the browse endpoint."""

from pathlib import Path
from typing import Any

import jinja2
import pytest
from aiohttp import web

from ultiserve.app_keys import templates_key
from ultiserve.config import Config
from ultiserve.core.templates import TemplateRenderer
from ultiserve.server import create_app


@pytest.fixture
def app(test_config: Config) -> web.Application:
    return create_app(test_config)


class TestDirectoryListing:
    """Tests for directory requests."""

    @pytest.mark.asyncio
    async def test__root__lists_entries_in_byte_order(
        self, aiohttp_client: Any, app: web.Application, root_dir: Path
    ) -> None:
        """List root entries as links in byte order."""
        (root_dir / "notes.txt").write_text("hello")
        (root_dir / "docs").mkdir()

        client = await aiohttp_client(app)
        response = await client.get("/")

        assert response.status == 200
        assert response.content_type == "text/html"
        text = await response.text()
        assert 'href="/docs/"' in text
        assert 'href="/notes.txt"' in text
        assert text.index("docs/") < text.index("notes.txt")

    @pytest.mark.asyncio
    async def test__root__has_no_parent_link(
        self, aiohttp_client: Any, app: web.Application
    ) -> None:
        """Omit the parent link on the root listing."""
        client = await aiohttp_client(app)
        response = await client.get("/")

        assert response.status == 200
        assert "/.." not in await response.text()

    @pytest.mark.asyncio
    async def test__subdirectory__has_parent_link(
        self, aiohttp_client: Any, app: web.Application, root_dir: Path
    ) -> None:
        """Link back to the parent from a subdirectory."""
        (root_dir / "docs").mkdir()
        (root_dir / "docs" / "guide.md").write_text("# Guide")

        client = await aiohttp_client(app)
        response = await client.get("/docs/")

        assert response.status == 200
        text = await response.text()
        assert 'href="/docs/.."' in text
        assert 'href="/docs/guide.md"' in text


class TestFileRendering:
    """Tests for file requests."""

    @pytest.mark.asyncio
    async def test__markdown__renders_highlighted_fence(
        self, aiohttp_client: Any, app: web.Application, root_dir: Path
    ) -> None:
        """Render Markdown with highlighted code fences."""
        (root_dir / "a.md").write_text("# Hello\n\n```rust\nfn main(){}\n```\n")

        client = await aiohttp_client(app)
        response = await client.get("/a.md")

        assert response.status == 200
        assert response.content_type == "text/html"
        text = await response.text()
        assert '<h1 id="user-content-hello">Hello</h1>' in text
        assert '<div class="highlight"' in text
        assert "&lt;div" not in text

    @pytest.mark.asyncio
    async def test__html_file__is_embedded_unmodified(
        self, aiohttp_client: Any, app: web.Application, root_dir: Path
    ) -> None:
        """Embed HTML files without escaping or conversion."""
        content = '<p id="keep">Hello <b>world</b></p>\n'
        (root_dir / "page.html").write_text(content)

        client = await aiohttp_client(app)
        response = await client.get("/page.html")

        assert response.status == 200
        assert content in await response.text()

    @pytest.mark.asyncio
    async def test__plain_text__is_escaped(
        self, aiohttp_client: Any, app: web.Application, root_dir: Path
    ) -> None:
        """Escape plain text files in the file page."""
        (root_dir / "LICENSE").write_text("<script>alert(1)</script>")

        client = await aiohttp_client(app)
        response = await client.get("/LICENSE")

        assert response.status == 200
        text = await response.text()
        assert "&lt;script&gt;alert(1)&lt;/script&gt;" in text
        assert "<script>" not in text

    @pytest.mark.asyncio
    async def test__file_page__links_raw_view(
        self, aiohttp_client: Any, app: web.Application, root_dir: Path
    ) -> None:
        """Link the file page to its raw view."""
        (root_dir / "docs").mkdir()
        (root_dir / "docs" / "notes.txt").write_text("hello")

        client = await aiohttp_client(app)
        response = await client.get("/docs/notes.txt")

        assert response.status == 200
        assert 'href="/docs/notes.txt?raw=true"' in await response.text()

    @pytest.mark.asyncio
    async def test__reserved_characters_in_name__keep_raw_link_encoded(
        self, aiohttp_client: Any, app: web.Application, root_dir: Path
    ) -> None:
        """Keep "#" percent-encoded in the raw link so it is not read as a fragment."""
        (root_dir / "a#b.txt").write_text("hello")

        client = await aiohttp_client(app)
        listing = await (await client.get("/")).text()
        response = await client.get("/a%23b.txt")

        assert 'href="/a%23b.txt"' in listing
        assert response.status == 200
        text = await response.text()
        assert 'href="/a%23b.txt?raw=true"' in text
        assert 'href="/a#b.txt?raw=true"' not in text

    @pytest.mark.asyncio
    async def test__binary_file__returns_raw_bytes(
        self, aiohttp_client: Any, app: web.Application, root_dir: Path
    ) -> None:
        """Return non-UTF-8 files as raw bytes."""
        data = b"\x89PNG\r\n\x1a\n\xff\xfe\x00"
        (root_dir / "image.png").write_bytes(data)

        client = await aiohttp_client(app)
        response = await client.get("/image.png")

        assert response.status == 200
        assert response.content_type == "application/octet-stream"
        assert await response.read() == data


class TestRawParameter:
    """Tests for the raw query parameter."""

    @pytest.mark.asyncio
    async def test__raw_true__returns_decoded_text_verbatim(
        self, aiohttp_client: Any, app: web.Application, root_dir: Path
    ) -> None:
        """Return file text verbatim when raw=true."""
        content = "# Title\n\n```rust\nfn main(){}\n```\n<b>ü</b>\n"
        (root_dir / "a.md").write_text(content, encoding="utf-8")

        client = await aiohttp_client(app)
        response = await client.get("/a.md", params={"raw": "true"})

        assert response.status == 200
        assert response.content_type == "text/plain"
        assert await response.text() == content

    @pytest.mark.asyncio
    async def test__raw_false__renders_normally(
        self, aiohttp_client: Any, app: web.Application, root_dir: Path
    ) -> None:
        """Render the file page when raw=false."""
        (root_dir / "a.md").write_text("# Title\n")

        client = await aiohttp_client(app)
        response = await client.get("/a.md", params={"raw": "false"})

        assert response.status == 200
        assert response.content_type == "text/html"

    @pytest.mark.asyncio
    async def test__raw_on_binary_file__returns_bytes(
        self, aiohttp_client: Any, app: web.Application, root_dir: Path
    ) -> None:
        """Return raw bytes for binary files even with raw=true."""
        data = b"\xff\xfe\xfd"
        (root_dir / "blob.bin").write_bytes(data)

        client = await aiohttp_client(app)
        response = await client.get("/blob.bin", params={"raw": "true"})

        assert response.status == 200
        assert response.content_type == "application/octet-stream"
        assert await response.read() == data

    @pytest.mark.asyncio
    async def test__invalid_raw_value__returns_400(
        self, aiohttp_client: Any, app: web.Application, root_dir: Path
    ) -> None:
        """Reject unrecognized raw values with 400."""
        (root_dir / "a.md").write_text("# Title\n")

        client = await aiohttp_client(app)
        response = await client.get("/a.md", params={"raw": "maybe"})

        assert response.status == 400


class TestErrors:
    """Tests for error responses."""

    @pytest.mark.asyncio
    async def test__missing_path__returns_404(
        self, aiohttp_client: Any, app: web.Application
    ) -> None:
        """Return 404 for a path that does not exist."""
        client = await aiohttp_client(app)
        response = await client.get("/does/not/exist.md")

        assert response.status == 404

    @pytest.mark.asyncio
    async def test__template_failure__returns_500_without_details(
        self, aiohttp_client: Any, test_config: Config
    ) -> None:
        """Return 500 without leaking template details."""
        app = create_app(test_config)
        env = jinja2.Environment(
            loader=jinja2.DictLoader({"index.html": "{{ secret_variable }}"}),
            undefined=jinja2.StrictUndefined,
        )
        app[templates_key] = TemplateRenderer(env)

        client = await aiohttp_client(app)
        response = await client.get("/")

        assert response.status == 500
        assert "secret_variable" not in await response.text()
