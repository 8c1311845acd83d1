"""
auth/dependencies.py -- FastAPI Depends() helpers for authentication and CSRF.

try_get_current_identity() is the soft variant (returns None when anonymous);
it is also exposed to templates as a Jinja2 global so the layout can switch
between the sign-in link and the sign-out button.

verify_csrf() is attached at router level to every router that accepts
mutating requests:
    router = APIRouter(dependencies=[Depends(verify_csrf)])

Token extraction order: the _csrf form field first, so plain forms work
without JavaScript, then the X-CSRF-Token header that static/application.js
adds to htmx requests.

Layer rule: no imports from web/ or lists/. auth/dependencies.py may import
from fastapi because it is part of the dependency injection system.
"""

from __future__ import annotations

import hmac
import logging

from fastapi import Request

from auth.models import CSRFError, Identity
from auth.session import current_identity
from core.constants import CSRF_FORM_FIELD, CSRF_HEADER_NAME, CSRF_SESSION_KEY

logger = logging.getLogger("htmxtodo.auth")

_SAFE_METHODS = frozenset({"GET", "HEAD", "OPTIONS", "TRACE"})
_FORM_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


def try_get_current_identity(request: Request) -> Identity | None:
    """Return the signed-in Identity or None. Never raises."""
    return current_identity(request)


async def _submitted_token(request: Request) -> str | None:
    if request.headers.get("content-type", "").startswith(_FORM_TYPES):
        # Starlette caches the parsed form on the request, so the route's
        # own Form() parameters still see the body.
        form = await request.form()
        value = form.get(CSRF_FORM_FIELD)
        if isinstance(value, str) and value:
            return value
    return request.headers.get(CSRF_HEADER_NAME) or None


async def verify_csrf(request: Request) -> None:
    """Reject mutating requests whose token does not match the session's.

    Raises CSRFError; web/errors.py renders it as 403 Forbidden.
    """
    if request.method in _SAFE_METHODS:
        return

    expected = request.session.get(CSRF_SESSION_KEY)
    submitted = await _submitted_token(request)

    if not expected:
        raise CSRFError("no CSRF token in session")
    if not submitted:
        raise CSRFError("missing CSRF token")
    if not hmac.compare_digest(submitted.encode(), expected.encode()):
        raise CSRFError("CSRF token mismatch")
