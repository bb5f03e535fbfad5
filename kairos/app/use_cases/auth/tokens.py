"""
Session issuing helpers shared by the auth use cases.

Refresh tokens have the shape "<row id>.<secret>"; only the bcrypt hash of
the secret is stored.
"""

import secrets
import time
from datetime import timedelta
from typing import Optional, Tuple
from uuid import UUID

import bcrypt

from config import ApplicationConfig
from kairos.api.utils.jwt import generate_jwt
from kairos.app.services.unit_of_work import UnitOfWork
from kairos.domain.base import utcnow
from kairos.domain.entities import RefreshToken, User
from kairos.domain.session import AuthUser, Session


def hash_secret(secret: str) -> str:
    return bcrypt.hashpw(secret.encode("utf-8"), bcrypt.gensalt(12)).decode("utf-8")


def split_refresh_token(refresh_token: str) -> Optional[Tuple[UUID, str]]:
    """Return (row id, secret) or None when the token is malformed"""
    row_id, sep, secret = refresh_token.partition(".")
    if not sep or not secret:
        return None
    try:
        return UUID(row_id), secret
    except ValueError:
        return None


def build_session(user: User, token_row: RefreshToken, secret: str) -> Session:
    ttl = ApplicationConfig.ACCESS_TOKEN_TTL_SECONDS
    access_token = generate_jwt(
        user.id, user.email, token_row.id, expires_delta=timedelta(seconds=ttl)
    )
    return Session(
        access_token=access_token,
        refresh_token=f"{token_row.id}.{secret}",
        expires_at=int(time.time()) + ttl,
        user=AuthUser(
            id=user.id,
            email=user.email,
            user_metadata={"display_name": user.display_name} if user.display_name else {},
        ),
    )


async def issue_session(uow: UnitOfWork, user: User) -> Session:
    """Create a refresh token row for user and mint a session from it"""
    secret = secrets.token_urlsafe(32)
    token_row = RefreshToken(
        user_id=user.id,
        token_hash=hash_secret(secret),
        expires_at=utcnow() + timedelta(days=ApplicationConfig.REFRESH_TOKEN_TTL_DAYS),
    )
    token_row = await uow.refresh_tokens.create(token_row)
    return build_session(user, token_row, secret)
