from datetime import UTC, datetime, timedelta
from typing import Optional
from uuid import UUID

from jose import JWTError, jwt

from config import ApplicationConfig


def generate_jwt(
    user_id: UUID, email: str, refresh_token_id: UUID, expires_delta: Optional[timedelta] = None
) -> str:
    """
    Generate JWT access token

    Args:
        user_id: User UUID
        email: User email
        refresh_token_id: Refresh token row the access token was minted from
        expires_delta: Token lifetime, ACCESS_TOKEN_TTL_SECONDS by default

    Returns:
        JWT token string (HS256)
    """
    if expires_delta is None:
        expires_delta = timedelta(seconds=ApplicationConfig.ACCESS_TOKEN_TTL_SECONDS)
    now = datetime.now(UTC)
    payload = {
        "sub": str(user_id),
        "email": email,
        "session_id": str(refresh_token_id),
        "exp": now + expires_delta,
        "iat": now,
    }
    return jwt.encode(payload, ApplicationConfig.JWT_SECRET, algorithm="HS256")


def verify_jwt(token: str) -> Optional[dict]:
    """
    Verify and decode JWT token

    Args:
        token: JWT token string

    Returns:
        Decoded payload dict or None if invalid or expired
    """
    try:
        payload = jwt.decode(
            token, ApplicationConfig.JWT_SECRET, algorithms=["HS256"]
        )
        return payload
    except JWTError:
        return None
