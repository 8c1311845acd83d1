"""
auth/cognito.py -- Thin wrapper over the Cognito user pool API.

The pool and its server-side app client are provisioned by infra/. The client
enables exactly one auth flow, USER_SRP_AUTH, so sign-in goes through
pycognito's AWSSRP helper, which performs the SRP handshake against the same
boto3 client used for SignUp/ConfirmSignUp.

Every botocore ClientError is translated into a CognitoError subclass here so
route handlers never import botocore. Registration errors keep Cognito's own
message (it explains password policy violations and duplicate emails);
sign-in errors are collapsed into a fixed message so the response does not
reveal whether an email is registered.

Layer rule: no imports from api/, web/, or lists/.
"""

from __future__ import annotations

import logging

import boto3
from botocore.exceptions import ClientError
from pycognito.aws_srp import AWSSRP
from pycognito.exceptions import WarrantException

from auth.models import InvalidCredentialsError, RegistrationError

logger = logging.getLogger("htmxtodo.auth.cognito")

_BAD_CREDENTIALS = "Incorrect email or password."
_NOT_CONFIRMED = "Please confirm your email address before signing in."


def _error_code(exc: ClientError) -> str:
    return exc.response.get("Error", {}).get("Code", "")


def _error_message(exc: ClientError) -> str:
    return exc.response.get("Error", {}).get("Message", "") or str(exc)


class CognitoAuth:
    """Sign-up, confirmation, and SRP sign-in against one user pool client.

    Usage:
        cognito = CognitoAuth(client_id="abc", user_pool_id="us-east-1_XYZ", region="us-east-1")
        cognito.sign_up("a@example.com", "hunter2hunter2", ip_address="203.0.113.7")
        cognito.confirm_sign_up("a@example.com", "123456")
        tokens = cognito.authenticate("a@example.com", "hunter2hunter2")
        tokens["IdToken"]

    client may be injected (tests pass a MagicMock or a botocore Stubber).
    """

    def __init__(self, client_id: str, user_pool_id: str, region: str, client=None) -> None:
        self.client_id = client_id
        self.user_pool_id = user_pool_id
        self.region = region
        self._client = client if client is not None else boto3.client("cognito-idp", region_name=region)

    def sign_up(self, email: str, password: str, ip_address: str | None = None) -> None:
        """Register a new user with email as the username.

        Raises RegistrationError with Cognito's message on any rejection.
        """
        params: dict = {
            "ClientId": self.client_id,
            "Username": email,
            "Password": password,
            "UserAttributes": [{"Name": "email", "Value": email}],
        }
        if ip_address:
            params["UserContextData"] = {"IpAddress": ip_address}
        try:
            self._client.sign_up(**params)
        except ClientError as exc:
            logger.info("SignUp rejected for %s: %s", email, _error_code(exc))
            raise RegistrationError(_error_message(exc)) from exc
        logger.info("SignUp accepted for %s", email)

    def confirm_sign_up(self, email: str, code: str) -> None:
        """Confirm a registration with the code Cognito emailed to the user."""
        try:
            self._client.confirm_sign_up(
                ClientId=self.client_id,
                Username=email,
                ConfirmationCode=code,
            )
        except ClientError as exc:
            logger.info("ConfirmSignUp rejected for %s: %s", email, _error_code(exc))
            raise RegistrationError(_error_message(exc)) from exc

    def authenticate(self, email: str, password: str) -> dict:
        """Run the SRP flow and return Cognito's AuthenticationResult.

        The returned dict holds IdToken, AccessToken, RefreshToken, and
        ExpiresIn. Raises InvalidCredentialsError when Cognito refuses the
        credentials, the user is unconfirmed, or a challenge (new password,
        MFA) would be required.
        """
        srp = AWSSRP(
            username=email,
            password=password,
            pool_id=self.user_pool_id,
            client_id=self.client_id,
            client=self._client,
        )
        try:
            response = srp.authenticate_user()
        except ClientError as exc:
            code = _error_code(exc)
            logger.info("SRP sign-in rejected for %s: %s", email, code)
            if code == "UserNotConfirmedException":
                raise InvalidCredentialsError(_NOT_CONFIRMED) from exc
            raise InvalidCredentialsError(_BAD_CREDENTIALS) from exc
        except WarrantException as exc:
            logger.info("SRP sign-in for %s stopped at challenge: %s", email, type(exc).__name__)
            raise InvalidCredentialsError(_BAD_CREDENTIALS) from exc

        result = response.get("AuthenticationResult")
        if not result or "IdToken" not in result:
            raise InvalidCredentialsError(_BAD_CREDENTIALS)
        return result
