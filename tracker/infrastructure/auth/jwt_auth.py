"""
JWT authentication provider.

Tokens are issued by the identity provider; only the signature and claims
are checked here.
"""

from __future__ import annotations

from jose import JWTError

from tracker.core.config import Settings
from tracker.core.exceptions import AuthenticationError
from tracker.core.security import decode_access_token
from tracker.interfaces.auth_provider import IAuthProvider, User


class JwtAuthProvider(IAuthProvider):
    """Auth provider with HMAC JWT validation."""

    def __init__(self, settings: Settings):
        if not settings.JWT_SECRET:
            raise ValueError("JWT_SECRET must be set for jwt auth")
        self._settings = settings

    async def verify_token(self, token: str) -> User:
        try:
            claims = decode_access_token(token, self._settings)
        except JWTError as exc:
            raise AuthenticationError(f"Invalid token: {exc}") from exc
        subject = claims.get("sub")
        if not subject:
            raise AuthenticationError("Missing subject")
        return User(
            id=str(subject),
            email=claims.get(self._settings.JWT_EMAIL_CLAIM),
            display_name=claims.get(self._settings.JWT_NAME_CLAIM),
        )
