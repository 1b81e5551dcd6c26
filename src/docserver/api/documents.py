"""Document endpoint.

Single catch-all route serving files from the document root, plus the
middleware that turns request failures into error pages.
"""

import logging
from collections.abc import Awaitable, Callable
from pathlib import Path

from aiohttp import web
from jinja2 import TemplateError

from docserver.app_keys import errors_key, renderer_key, router_key, templates_key
from docserver.core.errors import InternalError, NotFound, RequestError
from docserver.core.router import Redirect, ServeMarkdown, ServeRaw

logger = logging.getLogger(__name__)

Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]


def create_document_routes() -> list[web.RouteDef]:
    return [
        # Request method is not distinguished
        web.route("*", "/{path:.*}", get_document),
    ]


async def get_document(request: web.Request) -> web.StreamResponse:
    logger.info(_dump_request(request))
    router = request.app[router_key]

    outcome = router.resolve(request.path, raw="raw" in request.query)

    if isinstance(outcome, Redirect):
        logger.info(f"Redirecting -> {outcome.location}")
        raise web.HTTPFound(outcome.location)
    if isinstance(outcome, ServeMarkdown):
        return _serve_markdown(request, outcome)
    return _serve_raw(outcome)


def _serve_markdown(request: web.Request, outcome: ServeMarkdown) -> web.Response:
    logger.info(f"Serving markdown: {outcome.path}")
    source = _read_file(outcome.path)

    markup = request.app[renderer_key].render(source)
    try:
        page = request.app[templates_key].render_page(
            outcome.title,
            markup.decode("utf-8"),
        )
    except TemplateError as e:
        raise InternalError(f"{outcome.path}: page template failed: {e}") from e

    return web.Response(text=page, content_type="text/html", charset="utf-8")


def _serve_raw(outcome: ServeRaw) -> web.Response:
    logger.info(f"Serving file: {outcome.path}")
    data = _read_file(outcome.path)
    return web.Response(
        body=data,
        content_type=outcome.content_type or "application/octet-stream",
    )


def _read_file(path: str) -> bytes:
    try:
        return Path(path).read_bytes()
    except OSError as e:
        raise NotFound(f"{path}: couldn't read file ({e.strerror})") from e


def _dump_request(request: web.Request) -> str:
    return f"From: {request.remote} -> {request.method} {request.host}{request.path_qs}"


@web.middleware
async def error_pages_middleware(
    request: web.Request,
    handler: Handler,
) -> web.StreamResponse:
    """Render RequestError failures through the error template.

    The failure detail goes to the log; the client only gets the status code
    and the configured short message.
    """
    try:
        return await handler(request)
    except web.HTTPException:
        raise
    except RequestError as e:
        logger.warning(f"Error: {request.path} '{e.detail}'")
        return render_error_response(request, e.status)
    except Exception:
        logger.exception(f"Error: {request.path} unhandled failure")
        return render_error_response(request, InternalError.status)


def render_error_response(request: web.Request, status: int) -> web.Response:
    """Build the error page response, degrading to a bare status code."""
    msg = request.app[errors_key].message_for(status)
    try:
        page = request.app[templates_key].render_error(request.path, status, msg)
    except Exception:
        logger.exception(f"Error template failed for {request.path}")
        return web.Response(status=status)

    return web.Response(
        text=page,
        status=status,
        content_type="text/html",
        charset="utf-8",
    )
