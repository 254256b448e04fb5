"""Authentication service package."""

from finsight.services.auth.firebase_auth import (
    AuthError,
    AuthSession,
    FirebaseAuthService,
)

__all__ = [
    "AuthError",
    "AuthSession",
    "FirebaseAuthService",
]
