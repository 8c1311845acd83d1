"""
tests/conftest.py -- Shared test fixtures for HtmxTodo integration tests.

This module provides:
  - _make_test_store(): an isolated in-memory ListStore per test
  - _patch_lifespan(): wires the test store and a mock Cognito into app.state
  - signing_key / make_id_token: a throwaway RSA key and Cognito-shaped ID tokens
  - web_client: TestClient with follow_redirects=False, anonymous
  - logged_in_client: same, already signed in through POST /login
  - csrf_headers(): the X-CSRF-Token header for the client's current cookie

Design: Named shared-memory SQLite URIs (not plain :memory:) are required
because TestClient runs route handlers in a thread pool. Plain :memory: DBs
are per-connection and would present a blank schema to each worker thread.

ENV=test and the Cognito ids must be set before any app import so
get_settings() sees them (it is cached on first call).
"""

from __future__ import annotations

import os
import time
import uuid
from collections.abc import Generator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from unittest.mock import MagicMock

# CRITICAL: set before any core/auth/web import.
os.environ.setdefault("ENV", "test")
os.environ.setdefault("COGNITO_CLIENT_ID", "test-client-id")
os.environ.setdefault("COGNITO_USER_POOL_ID", "us-east-1_TestPool")
os.environ.setdefault("AWS_REGION", "us-east-1")
# Route-level limits would trip across a test session sharing one client IP.
os.environ.setdefault("LOGIN_RATE_LIMIT", "1000/minute")

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from fastapi.testclient import TestClient
from jose import jwk, jwt

from asgi import app
from auth.cognito import CognitoAuth
from auth.tokens import issuer_for
from core.config import get_settings
from core.constants import CSRF_COOKIE_NAME, CSRF_HEADER_NAME
from lists.store import ListStore

TEST_EMAIL = "ada@example.com"
TEST_PASSWORD = "correct-horse-battery"
TEST_SUBJECT = "3f1c2a9e-0000-4000-8000-000000000001"

# ---------------------------------------------------------------------------
# Signing key and ID tokens
# ---------------------------------------------------------------------------


@dataclass
class SigningKey:
    private_pem: str
    jwks: dict


@pytest.fixture(scope="session")
def signing_key() -> SigningKey:
    """A fresh RSA key pair and the JWKS document Cognito would publish for it."""
    private_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    private_pem = private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode()
    public_pem = (
        private_key.public_key()
        .public_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )
        .decode()
    )
    public_jwk = jwk.construct(public_pem, "RS256").to_dict()
    public_jwk["kid"] = "test-key"
    public_jwk["use"] = "sig"
    return SigningKey(private_pem=private_pem, jwks={"keys": [public_jwk]})


@pytest.fixture(scope="session")
def make_id_token(signing_key: SigningKey):
    """Return a factory for signed ID tokens. Keyword args override claims."""
    settings = get_settings()

    def _make(**overrides) -> str:
        now = int(time.time())
        claims = {
            "sub": TEST_SUBJECT,
            "email": TEST_EMAIL,
            "email_verified": True,
            "aud": settings.cognito_client_id,
            "iss": issuer_for(settings.aws_region, settings.cognito_user_pool_id),
            "token_use": "id",
            "iat": now,
            "exp": now + 3600,
        }
        claims.update(overrides)
        return jwt.encode(claims, signing_key.private_pem, algorithm="RS256", headers={"kid": "test-key"})

    return _make


# ---------------------------------------------------------------------------
# Store and lifespan helpers
# ---------------------------------------------------------------------------


def _make_test_store() -> ListStore:
    """Create an isolated named shared-memory ListStore.

    The uuid suffix keeps tests from seeing each other's rows.
    """
    return ListStore(db_url=f"sqlite:///file:test_lists_{uuid.uuid4().hex}?mode=memory&cache=shared&uri=true")


def _patch_lifespan(store: ListStore, cognito: MagicMock):
    """Return an async context manager that replaces the real lifespan.

    Wires pre-created test doubles into app.state so routes never reach a
    real database file or the Cognito API.
    """

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.list_store = store
        app.state.cognito = cognito
        yield

    return test_lifespan


def _csrf_token(client: TestClient) -> str:
    """Make sure the client holds a CSRF cookie and return its value."""
    if CSRF_COOKIE_NAME not in client.cookies:
        client.get("/register")
    return client.cookies[CSRF_COOKIE_NAME]


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def cognito() -> MagicMock:
    return MagicMock(spec=CognitoAuth)


@pytest.fixture
def list_store() -> Generator[ListStore, None, None]:
    store = _make_test_store()
    yield store
    store.close()


@pytest.fixture
def web_client(
    list_store: ListStore,
    cognito: MagicMock,
    signing_key: SigningKey,
    monkeypatch: pytest.MonkeyPatch,
) -> Generator[TestClient, None, None]:
    """Yield an anonymous TestClient.

    follow_redirects=False is essential: tests assert on redirect locations,
    which are invisible once the client follows them. get_jwks is patched to
    the test key set so ID token verification runs for real, offline.
    """
    monkeypatch.setattr("web.routes.get_jwks", lambda region, pool_id: signing_key.jwks)
    app.router.lifespan_context = _patch_lifespan(list_store, cognito)
    with TestClient(app, follow_redirects=False, raise_server_exceptions=True) as client:
        yield client


@pytest.fixture
def logged_in_client(web_client: TestClient, cognito: MagicMock, make_id_token) -> TestClient:
    """The web_client after a successful POST /login."""
    cognito.authenticate.return_value = {"IdToken": make_id_token(), "AccessToken": "access"}
    resp = web_client.post(
        "/login",
        data={"email": TEST_EMAIL, "password": TEST_PASSWORD},
        headers={CSRF_HEADER_NAME: _csrf_token(web_client)},
    )
    assert resp.status_code == 302, resp.text
    return web_client


@pytest.fixture
def csrf_headers(web_client: TestClient):
    """Return a callable building the CSRF header from the client's current cookie.

    A callable rather than a dict because signing in or out rotates the token.
    """

    def _headers() -> dict[str, str]:
        return {CSRF_HEADER_NAME: _csrf_token(web_client)}

    return _headers
