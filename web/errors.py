"""
web/errors.py -- HTML exception handlers.

Every failure reaches the browser as a rendered page (or fragment), never as
JSON or a stack trace. Mapping:

  ListNotFoundError, HTTP 404, bad path params -> 404 page
  CSRFError                                    -> 403 "Forbidden"
  RateLimitExceeded                            -> 429 with Retry-After
  other HTTPException                          -> generic page with its status
  anything else                                -> logged with traceback, 500 page

Path-parameter validation failures (e.g. /app/lists/abc/edit) mean the URL
matched no real resource, so they are answered as 404 rather than 422.

Call register_error_handlers(app) once, from asgi.py.
"""

from __future__ import annotations

import logging
from http import HTTPStatus

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import HTMLResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from auth.models import CSRFError
from lists.models import ListNotFoundError
from web.templating import templates

logger = logging.getLogger("htmxtodo.web.errors")


def _phrase(status: int) -> str:
    try:
        return HTTPStatus(status).phrase
    except ValueError:
        return "Error"


def _wait_phrase(seconds: int) -> str:
    if seconds < 120:
        return f"{seconds} seconds"
    if seconds < 2 * 3600:
        return f"{seconds // 60} minutes"
    return f"{seconds // 3600} hours"


def render_not_found(request: Request) -> HTMLResponse:
    return templates.TemplateResponse(request, "errors/404.html", {}, status_code=404)


def render_generic(request: Request, status: int, message: str | None = None) -> HTMLResponse:
    return templates.TemplateResponse(
        request,
        "errors/generic.html",
        {"status": status, "message": message or _phrase(status)},
        status_code=status,
    )


async def list_not_found_handler(request: Request, exc: ListNotFoundError) -> HTMLResponse:
    return render_not_found(request)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> HTMLResponse:
    if exc.status_code == 404:
        return render_not_found(request)
    message = exc.detail if isinstance(exc.detail, str) else None
    response = render_generic(request, exc.status_code, message)
    if exc.headers:
        response.headers.update(exc.headers)
    return response


async def validation_error_handler(request: Request, exc: RequestValidationError) -> HTMLResponse:
    if any(err.get("loc", ("",))[0] == "path" for err in exc.errors()):
        return render_not_found(request)
    return render_generic(request, 422)


async def csrf_error_handler(request: Request, exc: CSRFError) -> HTMLResponse:
    logger.error("CSRF error: %s (%s %s)", exc, request.method, request.url.path)
    return render_generic(request, 403, "Forbidden")


async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> HTMLResponse:
    """Return 429 with Retry-After set to the length of the exceeded window.

    exc.limit is slowapi's Limit; its .limit is the limits RateLimitItem that
    knows the window (60 for "10/minute", 3600 for "10/hour").
    """
    retry_after = exc.limit.limit.get_expiry()
    response = render_generic(
        request,
        429,
        f"Too many attempts. Please wait {_wait_phrase(retry_after)} and try again.",
    )
    response.headers["Retry-After"] = str(retry_after)
    return response


async def server_error_handler(request: Request, exc: Exception) -> HTMLResponse:
    """Catch-all for unexpected errors.

    The traceback goes to the log only; the client gets the generic 500 page.
    """
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return templates.TemplateResponse(request, "errors/500.html", {}, status_code=500)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ListNotFoundError, list_not_found_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(CSRFError, csrf_error_handler)
    app.add_exception_handler(RateLimitExceeded, rate_limit_handler)
    app.add_exception_handler(Exception, server_error_handler)
