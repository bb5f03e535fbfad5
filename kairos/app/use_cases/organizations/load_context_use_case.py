"""
Load Organization Context Use Case

Read path of the organization context: membership, organization, module
permissions. Each step runs in its own unit of work so one failing step
does not poison the others.
"""

from typing import List, Optional
from uuid import UUID

from kairos.app.services.unit_of_work import UnitOfWork
from kairos.libs.result import Error, Result, Return

from .dtos import ContextInfo, MembershipInfo, ModulePermissionInfo, OrganizationInfo


class LoadOrganizationContextUseCase:
    """
    Use case for resolving the current user's tenant context.

    Business Rules:
    - The active membership is the user's active row for the organization
      stamped on their profile; without a stamp, the most recently joined
      active membership
    - No active membership means "no active context", not a failure
    - Organization and permissions are looked up by the membership's
      organization_id
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def resolve_membership(self, user_id: UUID) -> Result[MembershipInfo]:
        """
        Resolve the single active membership for a user.

        Returns:
            Result with MembershipInfo, or Error(NO_ACTIVE_CONTEXT)
        """
        async with self.uow:
            memberships = await self.uow.memberships.get_active_by_user_id(user_id)
            if not memberships:
                return Return.err(
                    Error("NO_ACTIVE_CONTEXT", "User has no active organization")
                )

            profile = await self.uow.profiles.get_by_user_id(user_id)
            active = None
            if profile is not None and profile.organization_id is not None:
                for m in memberships:
                    if m.organization_id == profile.organization_id:
                        active = m
                        break

            # Profile stamp missing or stale: fall back to most recent
            if active is None:
                active = memberships[0]

            return Return.ok(MembershipInfo.model_validate(active))

    async def resolve_organization(self, organization_id: UUID) -> Result[OrganizationInfo]:
        async with self.uow:
            organization = await self.uow.organizations.get_by_id(organization_id)
            if organization is None:
                return Return.err(
                    Error("ORGANIZATION_NOT_FOUND", "Organization not found")
                )
            return Return.ok(OrganizationInfo.model_validate(organization))

    async def resolve_module_permissions(
        self, organization_id: UUID
    ) -> Result[List[ModulePermissionInfo]]:
        async with self.uow:
            permissions = await self.uow.module_permissions.get_by_organization_id(
                organization_id
            )
            return Return.ok(
                [ModulePermissionInfo.model_validate(p) for p in permissions]
            )

    async def list_contexts(
        self, user_id: UUID, current_organization_id: Optional[UUID] = None
    ) -> Result[List[ContextInfo]]:
        """List every organization the user holds an active membership in"""
        async with self.uow:
            memberships = await self.uow.memberships.get_active_by_user_id(user_id)
            organizations = await self.uow.organizations.get_by_ids(
                [m.organization_id for m in memberships]
            )
            by_id = {o.id: o for o in organizations}

            contexts = []
            for m in memberships:
                organization = by_id.get(m.organization_id)
                if organization is None:
                    continue
                contexts.append(
                    ContextInfo(
                        organization_id=organization.id,
                        organization_name=organization.name,
                        organization_type=organization.type,
                        role=m.role,
                        is_current=organization.id == current_organization_id,
                    )
                )
            return Return.ok(contexts)
