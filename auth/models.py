"""
auth/models.py -- Domain dataclasses and errors for authentication.

Pattern: Data class (pure data container, zero logic). The user record itself
lives in Cognito; Identity is the slice of it the app keeps in the session.

Layer rule: no imports from api/, web/, or lists/.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class Identity:
    """The signed-in user as reported by the verified Cognito ID token.

    subject is Cognito's stable user id ("sub" claim). email doubles as the
    username because the pool only allows email sign-in.
    """

    email: str
    subject: str


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class CognitoError(Exception):
    """Base class for failures reported by the Cognito user pool.

    str(exc) is the message shown to the user, so subclasses carry the
    service's own wording where it is safe to display.
    """


class RegistrationError(CognitoError):
    """SignUp or ConfirmSignUp was rejected (bad password, duplicate email, bad code)."""


class InvalidCredentialsError(CognitoError):
    """The SRP sign-in did not produce tokens."""


class CSRFError(Exception):
    """A mutating request arrived without a matching anti-forgery token."""
