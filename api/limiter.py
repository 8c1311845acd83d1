"""
api/limiter.py -- Rate limiting for the forms that accept credentials.

There is exactly one Limiter: api/main.py hands it to SlowAPIMiddleware
through app.state, and web/routes.py decorates the sign-in, registration and
confirmation POSTs with limit_credentials. A second Limiter instance would
keep its own counters and its limits would never be enforced.

limit_credentials must sit BELOW @router.post. SlowAPIMiddleware skips every
route that carries a decorator limit, so the check only runs when FastAPI
calls the slowapi wrapper itself.

Counters live in process memory, keyed by client address, so each uvicorn
worker counts separately.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from core.config import get_settings

limiter = Limiter(key_func=get_remote_address, storage_uri="memory://")


def _credentials_limit() -> str:
    """LOGIN_RATE_LIMIT, read per request so a changed setting takes effect."""
    return get_settings().login_rate_limit


# Applied per route; each decorated handler gets its own counter.
limit_credentials = limiter.limit(_credentials_limit)
