"""Tests for the Firebase Auth REST client with a fake HTTP session."""

import pytest
import requests

from finsight.services.auth import AuthError, AuthSession, FirebaseAuthService
from finsight.services.auth.firebase_auth import (
    ANONYMOUS_FAILED_MESSAGE,
    INVALID_CREDENTIALS_MESSAGE,
    INVALID_EMAIL_MESSAGE,
    RESET_FAILED_MESSAGE,
    UNEXPECTED_MESSAGE,
)


class FakeResponse:
    def __init__(self, status_code, body):
        self.status_code = status_code
        self._body = body

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        if self._body is None:
            raise ValueError("No JSON")
        return self._body


class FakeSession:
    """Replays queued responses and records requests."""

    def __init__(self, *responses, error=None):
        self.responses = list(responses)
        self.error = error
        self.calls = []

    def post(self, url, params=None, json=None, timeout=None):
        self.calls.append({"url": url, "params": params, "json": json, "timeout": timeout})
        if self.error:
            raise self.error
        return self.responses.pop(0)


def firebase_error(code, status=400):
    return FakeResponse(status, {"error": {"code": status, "message": code}})


def service(session):
    return FirebaseAuthService(api_key="test-key", session=session, timeout=5)


SIGN_IN_BODY = {
    "localId": "uid-123",
    "idToken": "token",
    "refreshToken": "refresh",
    "email": "me@example.com",
    "expiresIn": "3600",
}


class TestEmailSignIn:
    def test_success(self):
        session = FakeSession(FakeResponse(200, SIGN_IN_BODY))
        result = service(session).sign_in_with_email(" me@example.com ", "secret")

        assert isinstance(result, AuthSession)
        assert result.user_id == "uid-123"
        assert result.display_name == "me@example.com"
        assert not result.is_anonymous
        call = session.calls[0]
        assert call["url"].endswith("accounts:signInWithPassword")
        assert call["params"] == {"key": "test-key"}
        assert call["json"]["email"] == "me@example.com"
        assert call["timeout"] == 5

    @pytest.mark.parametrize("code", [
        "INVALID_LOGIN_CREDENTIALS",
        "EMAIL_NOT_FOUND",
        "INVALID_PASSWORD",
        "USER_DISABLED",
        "INVALID_EMAIL",
    ])
    def test_credential_errors_share_one_message(self, code):
        with pytest.raises(AuthError) as exc:
            service(FakeSession(firebase_error(code))).sign_in_with_email("a@b.c", "x")
        assert exc.value.user_message == INVALID_CREDENTIALS_MESSAGE
        assert exc.value.code == code

    def test_other_errors_are_unexpected(self):
        response = firebase_error("TOO_MANY_ATTEMPTS_TRY_LATER : Access to this account has been disabled")
        with pytest.raises(AuthError) as exc:
            service(FakeSession(response)).sign_in_with_email("a@b.c", "x")
        assert exc.value.user_message == UNEXPECTED_MESSAGE
        assert exc.value.code == "TOO_MANY_ATTEMPTS_TRY_LATER"

    def test_non_json_error_uses_status(self):
        with pytest.raises(AuthError) as exc:
            service(FakeSession(FakeResponse(503, None))).sign_in_with_email("a@b.c", "x")
        assert exc.value.code == "HTTP_503"

    def test_network_failure(self):
        session = FakeSession(error=requests.ConnectionError("down"))
        with pytest.raises(AuthError) as exc:
            service(session).sign_in_with_email("a@b.c", "x")
        assert exc.value.code == "NETWORK_ERROR"
        assert exc.value.user_message == UNEXPECTED_MESSAGE


class TestAnonymousSignIn:
    def test_success(self):
        body = {"localId": "anon-1", "idToken": "t", "expiresIn": "3600"}
        result = service(FakeSession(FakeResponse(200, body))).sign_in_anonymously()
        assert result.is_anonymous
        assert result.display_name == "Guest"

    def test_failure(self):
        with pytest.raises(AuthError) as exc:
            service(FakeSession(firebase_error("ADMIN_ONLY_OPERATION"))).sign_in_anonymously()
        assert exc.value.user_message == ANONYMOUS_FAILED_MESSAGE


class TestPasswordReset:
    def test_success(self):
        session = FakeSession(FakeResponse(200, {"email": "me@example.com"}))
        service(session).send_password_reset("me@example.com")
        assert session.calls[0]["json"] == {"requestType": "PASSWORD_RESET", "email": "me@example.com"}

    def test_unknown_email_is_silent(self):
        service(FakeSession(firebase_error("EMAIL_NOT_FOUND"))).send_password_reset("who@example.com")

    def test_invalid_email(self):
        with pytest.raises(AuthError) as exc:
            service(FakeSession(firebase_error("INVALID_EMAIL"))).send_password_reset("nope")
        assert exc.value.user_message == INVALID_EMAIL_MESSAGE

    def test_other_failure(self):
        with pytest.raises(AuthError) as exc:
            service(FakeSession(firebase_error("QUOTA_EXCEEDED", status=429))).send_password_reset("a@b.c")
        assert exc.value.user_message == RESET_FAILED_MESSAGE


def test_sign_out_makes_no_request():
    session = FakeSession()
    service(session).sign_out(AuthSession(user_id="u", id_token="t"))
    assert session.calls == []
