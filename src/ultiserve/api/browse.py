"""Browse endpoint.

Maps every GET path onto the served directory: directories get an index
page, files are rendered through the file template.
"""

import logging
from pathlib import Path
from typing import Any

import aiofiles
from aiohttp import web

from ultiserve.app_keys import config_key, renderer_key, templates_key
from ultiserve.core.errors import RenderError
from ultiserve.core.listing import list_directory
from ultiserve.core.paths import normalize_url_path, resolve_request_path
from ultiserve.core.renderer import RawBinary
from ultiserve.core.templates import FILE_TEMPLATE, INDEX_TEMPLATE

logger = logging.getLogger(__name__)

_TRUE_VALUES = frozenset({"true", "1"})
_FALSE_VALUES = frozenset({"false", "0", ""})


def create_browse_routes() -> list[web.RouteDef]:
    return [
        web.get("/{path:.*}", browse),
    ]


async def browse(request: web.Request) -> web.Response:
    raw = _parse_raw(request.query.get("raw"))
    url_path = normalize_url_path(request.path)
    root_dir = request.app[config_key].serve.root_dir

    try:
        path = resolve_request_path(root_dir, url_path)
    except FileNotFoundError:
        logger.debug(f"Refused path outside root: {url_path}")
        raise web.HTTPNotFound() from None

    try:
        listing = await list_directory(path, url_path)
    except OSError:
        return await _serve_file(request, path, raw=raw)

    return _render_page(request, INDEX_TEMPLATE, listing)


async def _serve_file(request: web.Request, path: Path, *, raw: bool) -> web.Response:
    try:
        async with aiofiles.open(path, "rb") as f:
            data = await f.read()
    except OSError:
        raise web.HTTPNotFound() from None

    if raw:
        try:
            return web.Response(text=data.decode("utf-8"), content_type="text/plain")
        except UnicodeDecodeError:
            return _binary_response(data)

    renderer = request.app[renderer_key]
    # Percent-encoded path; the raw link is emitted as-is
    url = normalize_url_path(request.rel_url.raw_path).rstrip("/")
    try:
        result = await renderer.render_file(path, data, url)
    except RenderError:
        logger.exception(f"Failed to render {path}")
        raise web.HTTPInternalServerError() from None

    if isinstance(result, RawBinary):
        return _binary_response(result.data)

    return _render_page(request, FILE_TEMPLATE, result)


def _render_page(request: web.Request, template_name: str, data: Any) -> web.Response:
    templates = request.app[templates_key]
    try:
        html = templates.render(template_name, data)
    except RenderError:
        logger.exception(f"Failed to render {template_name} for {request.path}")
        raise web.HTTPInternalServerError() from None
    return web.Response(text=html, content_type="text/html")


def _binary_response(data: bytes) -> web.Response:
    return web.Response(body=data, content_type="application/octet-stream")


def _parse_raw(value: str | None) -> bool:
    """Interpret the ``raw`` query parameter.

    Raises:
        web.HTTPBadRequest: If the value is not a recognized boolean
    """
    if value is None:
        return False
    lowered = value.lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise web.HTTPBadRequest(text=f"Invalid value for raw: {value!r}")
