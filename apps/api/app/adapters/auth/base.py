"""Identity provider interfaces and the identity shape every provider produces."""

from abc import ABC, abstractmethod

from app.schemas.auth import AuthPrincipal
from app.schemas.user import TanamUserRoleType

# Identities without a role claim act as authors, the least privileged Tanam role.
DEFAULT_ROLE = TanamUserRoleType.AUTHOR.value


class AuthVerificationError(Exception):
    """Raised when an ID token cannot be verified or normalized."""


class TokenVerifier(ABC):
    """Provider-neutral ID token verification interface.

    Implementations verify the token with their provider and hand the claims
    to :func:`build_principal`, so every provider yields the same identity.
    """

    @abstractmethod
    def verify_token(self, token: str) -> AuthPrincipal:
        """Verify token and return the authenticated identity."""


def build_principal(user_id: str | None, *, role: str | None = None, photo_url: str | None = None) -> AuthPrincipal:
    """Normalize provider claims into an :class:`AuthPrincipal`.

    A missing role becomes :data:`DEFAULT_ROLE`; a blank photo URL becomes
    ``None`` so the stored profile photo stays the only fallback source.
    """
    user_id = (user_id or "").strip()
    if not user_id:
        raise AuthVerificationError("Bearer token missing user identity")

    role = DEFAULT_ROLE if role is None else role.strip()
    if not role:
        raise AuthVerificationError("Bearer token missing role")
    if not any(role == known.value for known in TanamUserRoleType):
        raise AuthVerificationError("Bearer token carries an unknown role")

    return AuthPrincipal(user_id=user_id, role=role, photo_url=(photo_url or "").strip() or None)


__all__ = ["AuthVerificationError", "DEFAULT_ROLE", "TokenVerifier", "build_principal"]
