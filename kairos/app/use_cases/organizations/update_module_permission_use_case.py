"""
Update Module Permission Use Case

Enables or disables one module for an organization.
"""

from typing import Any, Dict, Optional
from uuid import UUID

from kairos.app.services.unit_of_work import UnitOfWork
from kairos.domain.entities import MembershipRole, ModuleName, ModulePermission
from kairos.libs.result import Error, Result, Return

from .dtos import ModulePermissionInfo


class UpdateModulePermissionUseCase:
    """
    Use case for toggling a module.

    Business Rules:
    - Caller must hold an active admin membership in the organization
    - Upserts on (organization_id, module_name)
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self,
        user_id: UUID,
        organization_id: UUID,
        module_name: ModuleName,
        is_enabled: bool,
        settings: Optional[Dict[str, Any]] = None,
    ) -> Result[ModulePermissionInfo]:
        async with self.uow:
            membership = await self.uow.memberships.get_by_user_and_organization(
                user_id, organization_id
            )
            if (
                membership is None
                or not membership.is_active
                or membership.role != MembershipRole.admin
            ):
                return Return.err(
                    Error("FORBIDDEN", "Only admins can change module permissions")
                )

            permission = await self.uow.module_permissions.upsert(
                ModulePermission(
                    organization_id=organization_id,
                    module_name=module_name,
                    is_enabled=is_enabled,
                    settings=settings or {},
                )
            )
            await self.uow.commit()

            return Return.ok(ModulePermissionInfo.model_validate(permission))
