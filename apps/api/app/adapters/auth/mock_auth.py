"""Mock identity verifier for local development and tests."""

from app.adapters.auth.base import AuthVerificationError, TokenVerifier, build_principal
from app.schemas.auth import AuthPrincipal

MOCK_PHOTO_URL_TEMPLATE = "https://example.test/avatars/{user_id}.png"


class MockTokenVerifier(TokenVerifier):
    """Accepts deterministic test tokens only.

    Expected token format:
    - ``test:<user_id>``
    - ``test:<user_id>:<role>``

    The identity's photo URL is derived from the user id so that
    photo back-fill can be exercised without a real provider.
    """

    def verify_token(self, token: str) -> AuthPrincipal:
        parts = token.split(":")
        if len(parts) not in (2, 3) or parts[0] != "test":
            raise AuthVerificationError("Invalid bearer token")

        user_id = parts[1]
        return build_principal(
            user_id,
            role=parts[2] if len(parts) == 3 else None,
            photo_url=MOCK_PHOTO_URL_TEMPLATE.format(user_id=user_id.strip()),
        )


__all__ = ["MOCK_PHOTO_URL_TEMPLATE", "MockTokenVerifier"]
