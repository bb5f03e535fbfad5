from typing import Optional
from uuid import UUID

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from kairos.app.repositories.profile_repository import IProfileRepository
from kairos.domain.entities import Profile


class ProfileRepository(IProfileRepository):
    """Profile repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_user_id(self, user_id: UUID) -> Optional[Profile]:
        """Get profile by user ID"""
        stmt = select(Profile).where(Profile.user_id == user_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def create(self, profile: Profile) -> Profile:
        """Create a new profile"""
        self.session.add(profile)
        await self.session.flush()
        await self.session.refresh(profile)
        return profile

    async def update(self, profile: Profile) -> Profile:
        """Update existing profile"""
        self.session.add(profile)
        await self.session.flush()
        await self.session.refresh(profile)
        return profile
