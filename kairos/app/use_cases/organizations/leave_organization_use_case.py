"""
Leave Organization Use Case

Deactivates the user's membership; rows are never hard-deleted.
"""

from uuid import UUID

from kairos.app.services.unit_of_work import UnitOfWork
from kairos.libs.result import Error, Result, Return

from .dtos import MembershipInfo
from .profiles import stamp_profile


class LeaveOrganizationUseCase:
    """
    Use case for leaving an organization.

    Business Rules:
    - Membership is deactivated (is_active=False), not deleted
    - A profile stamp pointing at the organization is cleared
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, user_id: UUID, organization_id: UUID) -> Result[MembershipInfo]:
        async with self.uow:
            membership = await self.uow.memberships.get_by_user_and_organization(
                user_id, organization_id
            )
            if membership is None or not membership.is_active:
                return Return.err(
                    Error("NOT_A_MEMBER", "User is not a member of this organization")
                )

            membership.is_active = False
            membership = await self.uow.memberships.update(membership)
            membership_info = MembershipInfo.model_validate(membership)

            profile = await self.uow.profiles.get_by_user_id(user_id)
            if profile is not None and profile.organization_id == organization_id:
                await stamp_profile(self.uow, user_id, None)

            await self.uow.commit()

            return Return.ok(membership_info)
