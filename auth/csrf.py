"""
auth/csrf.py -- Anti-forgery token issuance.

Pattern: synchronizer token mirrored into a cookie. The authoritative token
lives in the signed session; a copy is written to the htmxtodo_csrf cookie so
static/application.js can read it and echo it back in the X-CSRF-Token header
on every non-GET htmx request. Plain HTML forms carry the same token in a
hidden _csrf field so they keep working without JavaScript.

The cookie is deliberately NOT httpOnly -- the browser glue has to read it.
It is SameSite=Lax and Secure in production.

Verification is a FastAPI dependency (auth.dependencies.verify_csrf) so each
router opts in explicitly. This module only mints and distributes the token.

Layer rule: no imports from api/, web/, or lists/.
"""

from __future__ import annotations

import secrets

from fastapi import Request

from core.config import get_settings
from core.constants import CSRF_COOKIE_NAME, CSRF_SESSION_KEY

# Paths that never render a form and never mutate -- no session is created
# for them, so static assets and health probes stay cookie-free.
_EXEMPT_PREFIXES = ("/static/", "/api/", "/favicon.ico")


def ensure_csrf_token(request: Request) -> str:
    """Return the session's CSRF token, minting one on first use."""
    token = request.session.get(CSRF_SESSION_KEY)
    if not token:
        token = secrets.token_urlsafe(32)
        request.session[CSRF_SESSION_KEY] = token
    return token


async def csrf_middleware(request: Request, call_next):
    """Expose the token to templates and keep the browser's cookie copy current.

    Must run inside SessionMiddleware. The token is re-read after the handler
    returns: signing in or out clears the session, and the response has to
    carry the replacement token or the next htmx request would be rejected.
    """
    if request.url.path.startswith(_EXEMPT_PREFIXES):
        return await call_next(request)

    request.state.csrf_token = ensure_csrf_token(request)
    response = await call_next(request)

    token = ensure_csrf_token(request)
    if request.cookies.get(CSRF_COOKIE_NAME) != token:
        response.set_cookie(
            CSRF_COOKIE_NAME,
            value=token,
            httponly=False,
            samesite="lax",
            secure=get_settings().cookie_secure,
            path="/",
        )
    return response
