"""aiohttp server for docserver.

Application factory and startup for serving a document root.
"""

import logging
import mimetypes
import os
from pathlib import Path

from aiohttp import web

from docserver.api.documents import create_document_routes, error_pages_middleware
from docserver.app_keys import errors_key, renderer_key, router_key, templates_key
from docserver.config import Config
from docserver.core.renderer import MarkdownRenderer
from docserver.core.router import DocumentRouter
from docserver.core.templates import PageTemplates

logger = logging.getLogger(__name__)


def create_app(config: Config, *, templates: PageTemplates | None = None) -> web.Application:
    """Create aiohttp application.

    Args:
        config: Application configuration
        templates: Pre-compiled templates (loaded from config when omitted)

    Returns:
        Configured aiohttp application

    Raises:
        OSError: If a template file can't be read
        jinja2.TemplateSyntaxError: If a template is invalid
    """
    app = web.Application(middlewares=[error_pages_middleware])

    if templates is None:
        templates = PageTemplates.load(config.templates.page, config.templates.error)

    app[router_key] = DocumentRouter(config.docs.root, config.docs.filters)
    app[renderer_key] = MarkdownRenderer()
    app[templates_key] = templates
    app[errors_key] = config.errors

    app.router.add_routes(create_document_routes())

    return app


def enter_chroot(config: Config) -> Config:
    """Confine the process to the document root.

    Must run before any request is served. Returns the config rooted at "/".

    Raises:
        OSError: If chroot() fails (usually lack of privileges)
    """
    # mime.types lives outside the new root
    mimetypes.init()
    logger.info("chroot() into document root")
    os.chroot(config.docs.root)
    os.chdir("/")
    return config.with_root(Path("/"))


def run_server(config: Config) -> None:
    """Run the server.

    Args:
        config: Application configuration
    """
    templates = PageTemplates.load(config.templates.page, config.templates.error)

    logger.info(f"Document root: {config.docs.root}")
    for pattern in config.docs.filters:
        logger.info(f"Adding filter: {pattern.pattern}")

    if config.docs.chroot:
        config = enter_chroot(config)

    logger.info(f"Serving on '{config.server.host}:{config.server.port}'")
    app = create_app(config, templates=templates)
    web.run_app(app, host=config.server.host, port=config.server.port, print=None)
