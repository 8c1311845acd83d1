"""
web/templating.py -- The shared Jinja2Templates instance and its globals.

Two globals are available to every template without being passed in:

  csrf_token(request)        -- value for the hidden _csrf form field
  current_identity(request)  -- the signed-in Identity or None (layout nav)

Both tolerate requests that never passed through SessionMiddleware or the
CSRF middleware (static paths, errors raised by outer middleware), returning
"" and None respectively.
"""

from __future__ import annotations

from pathlib import Path

from fastapi import Request
from fastapi.templating import Jinja2Templates

from auth.dependencies import try_get_current_identity
from auth.models import Identity
from core.constants import APP_NAME, CSRF_FORM_FIELD

templates = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))


def _csrf_token(request: Request) -> str:
    return getattr(request.state, "csrf_token", "")


def _current_identity(request: Request) -> Identity | None:
    if "session" not in request.scope:
        return None
    return try_get_current_identity(request)


templates.env.globals["csrf_token"] = _csrf_token
templates.env.globals["current_identity"] = _current_identity
templates.env.globals["csrf_field"] = CSRF_FORM_FIELD
templates.env.globals["app_name"] = APP_NAME
