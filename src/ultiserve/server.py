"""aiohttp server for Ultiserve.

Application factory and route registration.
"""

import logging
import time
from collections.abc import Awaitable, Callable

from aiohttp import web

from ultiserve.api.browse import create_browse_routes
from ultiserve.app_keys import config_key, renderer_key, templates_key
from ultiserve.config import Config
from ultiserve.core.highlight import Highlighter
from ultiserve.core.markdown import MarkdownRenderer
from ultiserve.core.renderer import FileRenderer
from ultiserve.core.templates import TemplateRenderer

logger = logging.getLogger(__name__)

Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]


@web.middleware
async def timing_middleware(request: web.Request, handler: Handler) -> web.StreamResponse:
    """Log how long each request took to process."""
    start = time.perf_counter()
    try:
        return await handler(request)
    finally:
        elapsed_ms = int((time.perf_counter() - start) * 1000)
        logger.info(f"Processed request to {request.path} in {elapsed_ms}ms")


def create_app(config: Config) -> web.Application:
    """Create aiohttp application.

    Highlighter, Markdown renderer and templates are built once here and
    shared read-only by every request.

    Args:
        config: Application configuration

    Returns:
        Configured aiohttp application

    Raises:
        ValueError: If the highlighting theme is unknown
    """
    app = web.Application(middlewares=[timing_middleware])

    highlighter = Highlighter(config.highlight.theme)
    markdown = MarkdownRenderer(highlighter)

    app[config_key] = config
    app[renderer_key] = FileRenderer(highlighter, markdown)
    app[templates_key] = TemplateRenderer()

    app.router.add_routes(create_browse_routes())

    return app


def run_server(config: Config, app: web.Application | None = None) -> None:
    """Run the server.

    Args:
        config: Application configuration
        app: Application to serve; built from config when omitted
    """
    if app is None:
        app = create_app(config)
    web.run_app(app, host=config.server.host, port=config.server.port, print=None)
