"""JWT utilities.

Tokens are issued by the external auth provider; the API only verifies them
and reads the ``sub`` claim as the acting user id.
"""

from datetime import datetime, timedelta, timezone
from typing import Any

from jose import JWTError, jwt

from rapid_responder.core.config import settings


def create_access_token(subject: str, extra: dict[str, Any] | None = None) -> str:
    """Create a JWT access token for a user id."""
    now = datetime.now(timezone.utc)
    expire = now + timedelta(minutes=settings.jwt_expire_minutes)
    payload = {
        "sub": str(subject),
        "exp": expire,
        "iat": now,
    }
    if extra:
        payload.update(extra)
    return jwt.encode(
        payload,
        settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
    )


def decode_access_token(token: str) -> dict[str, Any] | None:
    """Decode and validate a JWT. Returns payload or None if invalid."""
    try:
        return jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
        )
    except JWTError:
        return None


def user_id_from_token(token: str) -> str | None:
    """Return the ``sub`` claim of a valid token, or None."""
    payload = decode_access_token(token)
    if not payload or not payload.get("sub"):
        return None
    return str(payload["sub"])
