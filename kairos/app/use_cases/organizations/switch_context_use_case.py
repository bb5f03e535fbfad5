"""
Switch Context Use Case

Makes another organization the user's active one.
"""

from uuid import UUID

from kairos.app.services.unit_of_work import UnitOfWork
from kairos.libs.result import Error, Result, Return

from .dtos import MembershipInfo
from .profiles import stamp_profile


class SwitchContextUseCase:
    """
    Use case for switching the active organization.

    Business Rules:
    - User must hold an active membership in the target organization
    - Only the profile stamp changes; memberships are untouched
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
                    Error("NOT_A_MEMBER", "User is not a member of the target organization")
                )
            membership_info = MembershipInfo.model_validate(membership)

            await stamp_profile(self.uow, user_id, organization_id)
            await self.uow.commit()

            return Return.ok(membership_info)
