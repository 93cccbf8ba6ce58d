"""
Mock authentication provider for local development.
"""

from tracker.core.exceptions import AuthenticationError
from tracker.interfaces.auth_provider import IAuthProvider, User


class MockAuthProvider(IAuthProvider):
    """Mock auth provider that treats the bearer token as the user ID."""

    async def verify_token(self, token: str) -> User:
        if not token.strip():
            raise AuthenticationError("Empty token")
        return User(id=token)
