"""
api/main.py -- FastAPI application entry point for HtmxTodo.

Builds the app object, its lifespan, and the middleware stack. HTML routes and
HTML error pages live in web/ and are attached by asgi.py, so this module
never imports from web/.

Run with:      uvicorn asgi:app --reload
               python main.py serve

Middleware stack (outermost to innermost):
  1. TrustedHostMiddleware -- rejects requests with unexpected Host headers
  2. GZipMiddleware        -- compresses HTML fragments and static assets
  3. log_requests          -- one log line per request with latency
  4. security_headers      -- nosniff, frame, referrer, opener policies
  5. SessionMiddleware     -- signed htmxtodo_session_id cookie
  6. csrf_middleware       -- mints the CSRF token, mirrors it into a cookie
  7. SlowAPIMiddleware     -- enforces per-route rate limits from api.limiter

Lifespan creates the ListStore and the Cognito client on startup and releases
them on shutdown.
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from slowapi.middleware import SlowAPIMiddleware
from starlette.middleware.sessions import SessionMiddleware

from api.limiter import limiter
from api.models import HealthResponse
from auth.cognito import CognitoAuth
from auth.csrf import csrf_middleware
from core.config import get_settings
from core.constants import APP_NAME, APP_VERSION, SESSION_COOKIE_NAME, SESSION_MAX_AGE
from lists.store import ListStore

_STATIC_DIR = Path(__file__).parent.parent / "static"

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("htmxtodo.api")

_settings = get_settings()


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application-level resources across the full server lifetime.

    Everything before yield runs on startup; everything after yield runs on
    shutdown. The Cognito client is created eagerly but makes no network call
    until the first sign-up or sign-in.
    """
    settings = get_settings()
    logger.info("%s %s starting up (env=%s)", APP_NAME, APP_VERSION, settings.env)

    app.state.list_store = ListStore(settings.effective_database_url)
    logger.info("List store initialized")

    if not settings.cognito_client_id or not settings.cognito_user_pool_id:
        logger.warning("COGNITO_CLIENT_ID / COGNITO_USER_POOL_ID not set -- sign-in and registration will fail")
    app.state.cognito = CognitoAuth(
        client_id=settings.cognito_client_id,
        user_pool_id=settings.cognito_user_pool_id,
        region=settings.aws_region,
    )

    yield

    app.state.list_store.close()
    logger.info("%s shutdown complete", APP_NAME)


# ---------------------------------------------------------------------------
# App instantiation
# ---------------------------------------------------------------------------

app = FastAPI(
    title=APP_NAME,
    version=APP_VERSION,
    lifespan=lifespan,
    docs_url=None,
    redoc_url=None,
    openapi_url=None,
)

# ---------------------------------------------------------------------------
# Middleware stack
#
# add_middleware() wraps the current stack, so the LAST registration is the
# OUTERMOST layer. Registered here innermost-first; see the module docstring
# for the order a request encounters them.
# ---------------------------------------------------------------------------

app.add_middleware(SlowAPIMiddleware)
app.state.limiter = limiter

# csrf_middleware reads request.session, so SessionMiddleware must wrap it.
app.middleware("http")(csrf_middleware)

app.add_middleware(
    SessionMiddleware,
    secret_key=_settings.secret_key,
    session_cookie=SESSION_COOKIE_NAME,
    max_age=SESSION_MAX_AGE,
    same_site="lax",
    https_only=_settings.cookie_secure,
)


@app.middleware("http")
async def security_headers(request: Request, call_next):
    """Set the browser hardening headers on every response."""
    response = await call_next(request)
    response.headers.setdefault("X-Content-Type-Options", "nosniff")
    response.headers.setdefault("X-Frame-Options", "SAMEORIGIN")
    response.headers.setdefault("Referrer-Policy", "no-referrer")
    response.headers.setdefault("Cross-Origin-Opener-Policy", "same-origin")
    response.headers.setdefault("X-XSS-Protection", "0")
    return response


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    ms = (time.perf_counter() - start) * 1000
    logger.info(
        "%s %s %d %.1fms %s",
        request.method,
        request.url.path,
        response.status_code,
        ms,
        request.client.host if request.client else "unknown",
    )
    return response


app.add_middleware(GZipMiddleware, minimum_size=500)
app.add_middleware(TrustedHostMiddleware, allowed_hosts=_settings.allowed_hosts)

# ---------------------------------------------------------------------------
# Static assets (htmx glue lives in static/application.js)
# ---------------------------------------------------------------------------

app.mount("/static", StaticFiles(directory=str(_STATIC_DIR)), name="static")


# ---------------------------------------------------------------------------
# Health endpoint
#
# No rate limit and no session -- probes from load balancers must not be
# throttled and must not mint cookies.
# ---------------------------------------------------------------------------


@app.get("/api/v1/health", tags=["Health"])
async def health(request: Request) -> JSONResponse:
    """Return liveness, version, and per-component status."""
    db_ok = request.app.state.list_store.ping()
    body = HealthResponse(
        status="healthy" if db_ok else "degraded",
        version=APP_VERSION,
        components={"app": "ok", "database": "ok" if db_ok else "error"},
    )
    return JSONResponse(status_code=200 if db_ok else 503, content=body.model_dump())
