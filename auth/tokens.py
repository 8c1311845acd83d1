"""
auth/tokens.py -- Verification of Cognito ID tokens.

Security design decisions:
  Cognito signs ID tokens with RS256 using keys published at the pool's
  JWKS endpoint. python-jose verifies the signature against that key set and
  checks exp, aud (our app client id), and iss (our pool). A token that fails
  any check is treated as a failed sign-in -- decode_id_token() returns None
  rather than raising, the same contract the route layer relies on elsewhere.

  token_use must be "id". An access token is signed by the same keys and
  would otherwise pass, but carries no email claim and no aud.

  The JWKS document is fetched once per (region, pool) and cached for the
  life of the process. Cognito rotates keys rarely; a restart picks up a
  rotation.

Layer rule: no imports from api/, web/, or lists/.
"""

from __future__ import annotations

import logging
from functools import lru_cache

import requests
from jose import JWTError, jwt

from auth.models import Identity

logger = logging.getLogger("htmxtodo.auth.tokens")

_ALGORITHM = "RS256"
_JWKS_TIMEOUT = 10  # seconds


def issuer_for(region: str, user_pool_id: str) -> str:
    """Return the iss claim Cognito puts in tokens for this pool."""
    return f"https://cognito-idp.{region}.amazonaws.com/{user_pool_id}"


@lru_cache(maxsize=8)
def get_jwks(region: str, user_pool_id: str) -> dict:
    """Fetch the pool's JSON Web Key Set. Raises requests.RequestException on failure."""
    url = f"{issuer_for(region, user_pool_id)}/.well-known/jwks.json"
    resp = requests.get(url, timeout=_JWKS_TIMEOUT)
    resp.raise_for_status()
    jwks = resp.json()
    logger.info("Loaded %d signing keys from %s", len(jwks.get("keys", [])), url)
    return jwks


def decode_id_token(
    token: str,
    jwks: dict,
    client_id: str,
    issuer: str,
    access_token: str | None = None,
) -> dict | None:
    """Verify a Cognito ID token and return its claims, or None on any failure.

    access_token is only needed when the ID token carries an at_hash claim;
    pass the AccessToken from the same AuthenticationResult.
    """
    try:
        claims = jwt.decode(
            token,
            jwks,
            algorithms=[_ALGORITHM],
            audience=client_id,
            issuer=issuer,
            access_token=access_token,
        )
    except JWTError as exc:
        logger.info("ID token rejected: %s", exc)
        return None
    if claims.get("token_use") != "id" or not claims.get("sub") or not claims.get("email"):
        logger.info("ID token rejected: unexpected token_use or missing sub/email")
        return None
    return claims


def identity_from_claims(claims: dict) -> Identity:
    return Identity(email=claims["email"], subject=claims["sub"])
