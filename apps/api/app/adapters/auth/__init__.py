"""Identity verifiers: Firebase Auth in production, deterministic test tokens locally."""

from .base import DEFAULT_ROLE, AuthVerificationError, TokenVerifier, build_principal
from .firebase_auth import FirebaseTokenVerifier
from .mock_auth import MOCK_PHOTO_URL_TEMPLATE, MockTokenVerifier

__all__ = [
    "AuthVerificationError",
    "DEFAULT_ROLE",
    "FirebaseTokenVerifier",
    "MOCK_PHOTO_URL_TEMPLATE",
    "MockTokenVerifier",
    "TokenVerifier",
    "build_principal",
]
