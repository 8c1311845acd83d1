"""
auth/session.py -- Signed-in state, stored in the Starlette session.

The session itself is a signed cookie (SessionMiddleware, cookie name
htmxtodo_session_id). It holds three auth keys -- the logged-in flag, the
email, and the Cognito subject -- plus the CSRF token owned by auth/csrf.py.

log_in() clears the session before writing, so a session id planted before
sign-in never carries over into the authenticated session.

Layer rule: no imports from api/, web/, or lists/.
"""

from __future__ import annotations

import logging

from starlette.requests import Request

from auth.models import Identity
from core.constants import EMAIL_SESSION_KEY, LOGGED_IN_SESSION_KEY, SUBJECT_SESSION_KEY

logger = logging.getLogger("htmxtodo.auth.session")


def is_logged_in(request: Request) -> bool:
    return request.session.get(LOGGED_IN_SESSION_KEY) is True


def current_identity(request: Request) -> Identity | None:
    """Return the signed-in Identity, or None for anonymous requests."""
    if not is_logged_in(request):
        return None
    return Identity(
        email=request.session.get(EMAIL_SESSION_KEY, ""),
        subject=request.session.get(SUBJECT_SESSION_KEY, ""),
    )


def log_in(request: Request, identity: Identity) -> None:
    request.session.clear()
    request.session[LOGGED_IN_SESSION_KEY] = True
    request.session[EMAIL_SESSION_KEY] = identity.email
    request.session[SUBJECT_SESSION_KEY] = identity.subject
    logger.info("Signed in %s", identity.email)


def log_out(request: Request) -> None:
    email = request.session.get(EMAIL_SESSION_KEY)
    request.session.clear()
    if email:
        logger.info("Signed out %s", email)
