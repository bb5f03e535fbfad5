from typing import Optional
from uuid import UUID

from sqlmodel import select, update
from sqlmodel.ext.asyncio.session import AsyncSession

from kairos.app.repositories.refresh_token_repository import IRefreshTokenRepository
from kairos.domain.base import utcnow
from kairos.domain.entities import RefreshToken


class RefreshTokenRepository(IRefreshTokenRepository):
    """Refresh token repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, token_id: UUID) -> Optional[RefreshToken]:
        """Get refresh token row by ID"""
        stmt = select(RefreshToken).where(RefreshToken.id == token_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def create(self, token: RefreshToken) -> RefreshToken:
        """Create a new refresh token row"""
        self.session.add(token)
        await self.session.flush()
        await self.session.refresh(token)
        return token

    async def update(self, token: RefreshToken) -> RefreshToken:
        """Update existing refresh token row"""
        self.session.add(token)
        await self.session.flush()
        await self.session.refresh(token)
        return token

    async def revoke_all_by_user_id(self, user_id: UUID) -> int:
        """Revoke all active refresh tokens for a user"""
        stmt = (
            update(RefreshToken)
            .where(RefreshToken.user_id == user_id, RefreshToken.revoked == False)
            .values(revoked=True, revoked_at=utcnow())
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount

    async def revoke_all_except(self, user_id: UUID, token_id: UUID) -> int:
        """Revoke all refresh tokens for a user except the specified one"""
        stmt = (
            update(RefreshToken)
            .where(
                RefreshToken.user_id == user_id,
                RefreshToken.id != token_id,
                RefreshToken.revoked == False,
            )
            .values(revoked=True, revoked_at=utcnow())
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount

    async def revoke_by_id(self, token_id: UUID) -> bool:
        """Revoke a specific refresh token by ID"""
        stmt = (
            update(RefreshToken)
            .where(RefreshToken.id == token_id, RefreshToken.revoked == False)
            .values(revoked=True, revoked_at=utcnow())
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount > 0
