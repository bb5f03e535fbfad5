from typing import Optional
from uuid import UUID

from kairos.app.services.unit_of_work import UnitOfWork
from kairos.domain.base import utcnow
from kairos.domain.entities import Profile


async def stamp_profile(
    uow: UnitOfWork, user_id: UUID, organization_id: Optional[UUID]
) -> Profile:
    """Point the user's profile at organization_id, creating the profile if missing"""
    profile = await uow.profiles.get_by_user_id(user_id)
    if profile is None:
        return await uow.profiles.create(
            Profile(user_id=user_id, organization_id=organization_id)
        )
    profile.organization_id = organization_id
    profile.updated_at = utcnow()
    return await uow.profiles.update(profile)
