"""
Refresh Session Use Case

Rotates a refresh token and mints a new access token.
"""

import secrets
from datetime import timedelta

import bcrypt

from config import ApplicationConfig
from kairos.app.services.unit_of_work import UnitOfWork
from kairos.domain.base import utcnow
from kairos.domain.session import Session
from kairos.libs.result import Error, Result, Return

from .tokens import build_session, hash_secret, split_refresh_token


class RefreshSessionUseCase:
    """
    Use case for refreshing a session.

    Business Rules:
    - Refresh token rotation: old secret invalidated, new secret issued
    - Row must not be revoked or expired
    - Hash verification using bcrypt (constant-time)
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, refresh_token: str) -> Result[Session]:
        parts = split_refresh_token(refresh_token)
        if parts is None:
            return Return.err(Error("INVALID_TOKEN", "Invalid refresh token"))
        token_id, secret = parts

        async with self.uow:
            token_row = await self.uow.refresh_tokens.get_by_id(token_id)
            if token_row is None or not bcrypt.checkpw(
                secret.encode(), token_row.token_hash.encode()
            ):
                return Return.err(Error("INVALID_TOKEN", "Invalid refresh token"))

            if token_row.revoked:
                return Return.err(Error("SESSION_REVOKED", "Session has been revoked"))

            if token_row.expires_at < utcnow():
                return Return.err(Error("SESSION_EXPIRED", "Session has expired"))

            user = await self.uow.users.get_by_id(token_row.user_id)
            if user is None:
                return Return.err(Error("USER_NOT_FOUND", "User not found"))

            # Token rotation
            new_secret = secrets.token_urlsafe(32)
            token_row.token_hash = hash_secret(new_secret)
            token_row.expires_at = utcnow() + timedelta(
                days=ApplicationConfig.REFRESH_TOKEN_TTL_DAYS
            )
            token_row = await self.uow.refresh_tokens.update(token_row)

            await self.uow.commit()

            return Return.ok(build_session(user, token_row, new_secret))
