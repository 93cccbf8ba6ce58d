"""
Token helpers for JWT-based sessions.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

from jose import jwt

from tracker.core.config import Settings

_ALGORITHM = "HS256"


def create_access_token(
    user_id: str,
    settings: Settings,
    email: str | None = None,
    display_name: str | None = None,
    expires_minutes: int | None = None,
) -> str:
    """Create a signed JWT identifying a user."""
    now = datetime.now(timezone.utc)
    expires = now + timedelta(minutes=expires_minutes or settings.JWT_EXPIRE_MINUTES)
    payload: dict[str, Any] = {
        "sub": user_id,
        "iat": int(now.timestamp()),
        "exp": int(expires.timestamp()),
    }
    if email:
        payload[settings.JWT_EMAIL_CLAIM] = email
    if display_name:
        payload[settings.JWT_NAME_CLAIM] = display_name
    if settings.JWT_ISSUER:
        payload["iss"] = settings.JWT_ISSUER
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=_ALGORITHM)


def decode_access_token(token: str, settings: Settings) -> dict[str, Any]:
    """Decode and verify a JWT created by ``create_access_token``."""
    options = {"verify_iss": bool(settings.JWT_ISSUER)}
    return jwt.decode(
        token,
        settings.JWT_SECRET,
        algorithms=[_ALGORITHM],
        issuer=settings.JWT_ISSUER or None,
        options=options,
    )
