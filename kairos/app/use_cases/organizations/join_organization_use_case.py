"""
Join Organization Use Case

Adds the caller to an existing organization as a regular member.
"""

from uuid import UUID

from kairos.app.services.unit_of_work import UnitOfWork
from kairos.domain.base import utcnow
from kairos.domain.entities import MembershipRole, OrganizationMembership
from kairos.libs.result import Error, Result, Return

from .dtos import MembershipInfo, OrganizationJoined
from .profiles import stamp_profile


class JoinOrganizationUseCase:
    """
    Use case for joining an organization.

    Business Rules:
    - Organization must exist
    - Already-active members are rejected
    - A previously deactivated membership is reactivated as member
    - Membership insert and profile stamp commit separately, no rollback
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, user_id: UUID, organization_id: UUID) -> Result[OrganizationJoined]:
        async with self.uow:
            organization = await self.uow.organizations.get_by_id(organization_id)
            if organization is None:
                return Return.err(
                    Error("ORGANIZATION_NOT_FOUND", "Organization not found")
                )

            existing = await self.uow.memberships.get_by_user_and_organization(
                user_id, organization_id
            )
            if existing is not None and existing.is_active:
                return Return.err(
                    Error("ALREADY_A_MEMBER", "User is already a member of this organization")
                )

            if existing is not None:
                existing.is_active = True
                existing.role = MembershipRole.member
                existing.joined_at = utcnow()
                membership = await self.uow.memberships.update(existing)
            else:
                membership = await self.uow.memberships.create(
                    OrganizationMembership(
                        organization_id=organization_id,
                        user_id=user_id,
                        role=MembershipRole.member,
                        is_active=True,
                    )
                )
            await self.uow.commit()
            membership_info = MembershipInfo.model_validate(membership)

            await stamp_profile(self.uow, user_id, organization_id)
            await self.uow.commit()

            return Return.ok(
                OrganizationJoined(
                    organization_id=organization_id, membership=membership_info
                )
            )
