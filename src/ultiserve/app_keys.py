"""Application keys for type-safe app configuration access."""

from aiohttp import web

from ultiserve.config import Config
from ultiserve.core.renderer import FileRenderer
from ultiserve.core.templates import TemplateRenderer

config_key = web.AppKey("config", Config)
renderer_key = web.AppKey("renderer", FileRenderer)
templates_key = web.AppKey("templates", TemplateRenderer)
