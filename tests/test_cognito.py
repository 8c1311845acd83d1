"""
tests/test_cognito.py -- Unit tests for the CognitoAuth wrapper.

The boto3 client is a MagicMock and pycognito's AWSSRP is patched, so no
request leaves the process. Errors are real botocore ClientErrors built from
the response shape Cognito returns.
"""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest
from botocore.exceptions import ClientError
from pycognito.exceptions import ForceChangePasswordException

from auth.cognito import CognitoAuth
from auth.models import InvalidCredentialsError, RegistrationError


def _client_error(code: str, message: str, operation: str) -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": message}}, operation)


@pytest.fixture
def client() -> MagicMock:
    return MagicMock()


@pytest.fixture
def auth(client) -> CognitoAuth:
    return CognitoAuth(client_id="client-123", user_pool_id="us-east-1_Pool", region="us-east-1", client=client)


class TestSignUp:
    def test_sends_email_attribute_and_ip(self, auth, client):
        auth.sign_up("ada@example.com", "correct-horse-battery", ip_address="203.0.113.7")
        client.sign_up.assert_called_once_with(
            ClientId="client-123",
            Username="ada@example.com",
            Password="correct-horse-battery",
            UserAttributes=[{"Name": "email", "Value": "ada@example.com"}],
            UserContextData={"IpAddress": "203.0.113.7"},
        )

    def test_ip_is_optional(self, auth, client):
        auth.sign_up("ada@example.com", "correct-horse-battery")
        assert "UserContextData" not in client.sign_up.call_args.kwargs

    def test_rejection_keeps_service_message(self, auth, client):
        client.sign_up.side_effect = _client_error(
            "InvalidPasswordException",
            "Password did not conform with policy: Password must have uppercase characters",
            "SignUp",
        )
        with pytest.raises(RegistrationError, match="Password must have uppercase characters"):
            auth.sign_up("ada@example.com", "lowercase-only")


class TestConfirmSignUp:
    def test_passes_code(self, auth, client):
        auth.confirm_sign_up("ada@example.com", "123456")
        client.confirm_sign_up.assert_called_once_with(
            ClientId="client-123",
            Username="ada@example.com",
            ConfirmationCode="123456",
        )

    def test_bad_code_raises(self, auth, client):
        client.confirm_sign_up.side_effect = _client_error(
            "CodeMismatchException", "Invalid verification code provided, please try again.", "ConfirmSignUp"
        )
        with pytest.raises(RegistrationError, match="Invalid verification code"):
            auth.confirm_sign_up("ada@example.com", "000000")


class TestAuthenticate:
    def test_returns_authentication_result(self, auth, client):
        result = {"IdToken": "id", "AccessToken": "access", "RefreshToken": "refresh", "ExpiresIn": 3600}
        with patch("auth.cognito.AWSSRP") as srp_cls:
            srp_cls.return_value.authenticate_user.return_value = {"AuthenticationResult": result}
            assert auth.authenticate("ada@example.com", "correct-horse-battery") == result
        srp_cls.assert_called_once_with(
            username="ada@example.com",
            password="correct-horse-battery",
            pool_id="us-east-1_Pool",
            client_id="client-123",
            client=client,
        )

    def test_wrong_password_is_generic(self, auth):
        with patch("auth.cognito.AWSSRP") as srp_cls:
            srp_cls.return_value.authenticate_user.side_effect = _client_error(
                "NotAuthorizedException", "Incorrect username or password.", "RespondToAuthChallenge"
            )
            with pytest.raises(InvalidCredentialsError, match="Incorrect email or password."):
                auth.authenticate("ada@example.com", "wrong")

    def test_unknown_user_is_indistinguishable(self, auth):
        with patch("auth.cognito.AWSSRP") as srp_cls:
            srp_cls.return_value.authenticate_user.side_effect = _client_error(
                "UserNotFoundException", "User does not exist.", "InitiateAuth"
            )
            with pytest.raises(InvalidCredentialsError, match="Incorrect email or password."):
                auth.authenticate("nobody@example.com", "whatever")

    def test_unconfirmed_user_is_told_to_confirm(self, auth):
        with patch("auth.cognito.AWSSRP") as srp_cls:
            srp_cls.return_value.authenticate_user.side_effect = _client_error(
                "UserNotConfirmedException", "User is not confirmed.", "RespondToAuthChallenge"
            )
            with pytest.raises(InvalidCredentialsError, match="confirm your email"):
                auth.authenticate("ada@example.com", "correct-horse-battery")

    def test_challenge_is_a_failed_sign_in(self, auth):
        with patch("auth.cognito.AWSSRP") as srp_cls:
            srp_cls.return_value.authenticate_user.side_effect = ForceChangePasswordException("change it")
            with pytest.raises(InvalidCredentialsError):
                auth.authenticate("ada@example.com", "correct-horse-battery")

    def test_response_without_tokens_is_a_failed_sign_in(self, auth):
        with patch("auth.cognito.AWSSRP") as srp_cls:
            srp_cls.return_value.authenticate_user.return_value = {"ChallengeName": "SMS_MFA"}
            with pytest.raises(InvalidCredentialsError):
                auth.authenticate("ada@example.com", "correct-horse-battery")
