"""Application keys for type-safe app configuration access."""

from aiohttp import web

from docserver.config import ErrorsConfig
from docserver.core.renderer import MarkdownRenderer
from docserver.core.router import DocumentRouter
from docserver.core.templates import PageTemplates

router_key = web.AppKey("router", DocumentRouter)
renderer_key = web.AppKey("renderer", MarkdownRenderer)
templates_key = web.AppKey("templates", PageTemplates)
errors_key = web.AppKey("errors", ErrorsConfig)
