"""
Identity endpoints.

Sign-in itself happens at the identity provider; the tracker only reports
who the bearer token belongs to.
"""

from fastapi import APIRouter

from tracker.api.deps import CurrentUser
from tracker.interfaces.auth_provider import User

router = APIRouter()


@router.get("/me", response_model=User)
async def get_me(user: CurrentUser) -> User:
    """Return the authenticated user."""
    return user
