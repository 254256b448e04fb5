"""
Firebase Authentication Service

Talks to the Firebase Auth REST API (Identity Toolkit) for email and
anonymous sign-in and password-reset emails.

DESIGN DECISION: Error messages shown to the user never reveal whether
an account exists. Unknown email and wrong password produce the same
message, and a reset request for an unknown email reports success.
"""

from typing import Optional

import requests
from pydantic import BaseModel, Field

from finsight.config import get_settings

IDENTITY_TOOLKIT_URL = "https://identitytoolkit.googleapis.com/v1"

INVALID_CREDENTIALS_MESSAGE = "Invalid email or password. Please try again."
INVALID_EMAIL_MESSAGE = "The email address is not valid."
ANONYMOUS_FAILED_MESSAGE = "Could not sign in anonymously."
UNEXPECTED_MESSAGE = "An unexpected error occurred."
RESET_FAILED_MESSAGE = "An unexpected error occurred. Please try again."

# Firebase error codes that all mean "these credentials don't work"
CREDENTIAL_ERROR_CODES = frozenset({
    "INVALID_LOGIN_CREDENTIALS",
    "EMAIL_NOT_FOUND",
    "INVALID_PASSWORD",
    "USER_DISABLED",
})


class AuthError(Exception):
    """Authentication failed. user_message is safe to display."""

    def __init__(self, user_message: str, code: Optional[str] = None):
        super().__init__(user_message)
        self.user_message = user_message
        self.code = code


class AuthSession(BaseModel):
    """The signed-in user for the current UI session."""

    user_id: str = Field(..., min_length=1)
    id_token: str
    refresh_token: str = ""
    email: Optional[str] = None
    is_anonymous: bool = False
    expires_in: int = Field(default=3600, description="Token lifetime in seconds")

    @property
    def display_name(self) -> str:
        return self.email or "Guest"


class FirebaseAuthService:
    """
    Firebase Auth REST client.

    Usage:
        auth = FirebaseAuthService()
        session = auth.sign_in_with_email("me@example.com", "secret")
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
    ):
        """
        Initialize the auth client.

        Args:
            api_key: Firebase web API key; read from settings if omitted
            session: HTTP session, injectable for tests
            timeout: Request timeout in seconds
        """
        if api_key is None or timeout is None:
            firebase = get_settings().firebase
            api_key = api_key or firebase.web_api_key
            timeout = timeout or firebase.auth_timeout_seconds
        self._api_key = api_key
        self._timeout = timeout
        self._session = session or requests.Session()

    def _post(self, endpoint: str, payload: dict) -> dict:
        """
        POST to an Identity Toolkit endpoint.

        Raises:
            AuthError: With the Firebase error code, message not yet mapped
        """
        try:
            response = self._session.post(
                f"{IDENTITY_TOOLKIT_URL}/{endpoint}",
                params={"key": self._api_key},
                json=payload,
                timeout=self._timeout,
            )
        except requests.RequestException as e:
            raise AuthError(UNEXPECTED_MESSAGE, code="NETWORK_ERROR") from e

        try:
            body = response.json()
        except ValueError:
            body = {}

        if response.ok:
            return body

        # e.g. "TOO_MANY_ATTEMPTS_TRY_LATER : Access to this account..."
        raw = body.get("error", {}).get("message", "") if isinstance(body, dict) else ""
        code = raw.split(":")[0].strip() or f"HTTP_{response.status_code}"
        raise AuthError(UNEXPECTED_MESSAGE, code=code)

    @staticmethod
    def _session_from(body: dict, anonymous: bool) -> AuthSession:
        return AuthSession(
            user_id=body["localId"],
            id_token=body["idToken"],
            refresh_token=body.get("refreshToken", ""),
            email=body.get("email") or None,
            is_anonymous=anonymous,
            expires_in=int(body.get("expiresIn", 3600)),
        )

    def sign_in_with_email(self, email: str, password: str) -> AuthSession:
        """
        Sign in with email and password.

        Raises:
            AuthError: With a generic message for any credential problem
        """
        try:
            body = self._post(
                "accounts:signInWithPassword",
                {"email": email.strip(), "password": password, "returnSecureToken": True},
            )
        except AuthError as e:
            if e.code in CREDENTIAL_ERROR_CODES or e.code == "INVALID_EMAIL":
                raise AuthError(INVALID_CREDENTIALS_MESSAGE, code=e.code) from e
            raise
        return self._session_from(body, anonymous=False)

    def sign_in_anonymously(self) -> AuthSession:
        try:
            body = self._post("accounts:signUp", {"returnSecureToken": True})
        except AuthError as e:
            raise AuthError(ANONYMOUS_FAILED_MESSAGE, code=e.code) from e
        return self._session_from(body, anonymous=True)

    def send_password_reset(self, email: str) -> None:
        """
        Request a password-reset email.

        An unknown email is treated as success.

        Raises:
            AuthError: For a malformed email or a service failure
        """
        try:
            self._post(
                "accounts:sendOobCode",
                {"requestType": "PASSWORD_RESET", "email": email.strip()},
            )
        except AuthError as e:
            if e.code == "EMAIL_NOT_FOUND":
                return
            if e.code == "INVALID_EMAIL":
                raise AuthError(INVALID_EMAIL_MESSAGE, code=e.code) from e
            raise AuthError(RESET_FAILED_MESSAGE, code=e.code) from e

    def sign_out(self, session: Optional[AuthSession]) -> None:
        """
        End the session.

        ID tokens are short-lived bearer tokens; signing out only drops
        the client's copy. Nothing is sent to Firebase.
        """
        return None
