"""
Create Organization Use Case

Creates an organization with its creator as admin and seeds default modules.
"""

import logging

from kairos.app.services.unit_of_work import UnitOfWork
from kairos.domain.entities import (
    MembershipRole,
    ModulePermission,
    Organization,
    OrganizationMembership,
)
from kairos.libs.result import Error, Result, Return

from .defaults import default_modules_for
from .profiles import stamp_profile
from .dtos import (
    CreateGroupCommand,
    MembershipInfo,
    ModulePermissionInfo,
    OrganizationCreated,
    OrganizationInfo,
)

logger = logging.getLogger(__name__)


class CreateOrganizationUseCase:
    """
    Create Organization Use Case

    Business Logic:
    1. Insert the organization (commit)
    2. Insert an admin membership for the creator (commit)
    3. Insert the module permissions, all enabled (commit)
    4. Stamp the creator's profile with the new organization (commit)

    Each step commits on its own. A failure in a later step leaves the
    earlier rows in place; nothing is rolled back.
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, command: CreateGroupCommand) -> Result[OrganizationCreated]:
        name = command.name.strip()
        if not name:
            return Return.err(Error("INVALID_NAME", "Organization name is required"))

        modules = command.modules or default_modules_for(command.type)

        async with self.uow:
            organization = await self.uow.organizations.create(
                Organization(
                    name=name,
                    description=command.description,
                    type=command.type,
                    created_by=command.user_id,
                )
            )
            await self.uow.commit()
            organization_info = OrganizationInfo.model_validate(organization)
            logger.info(f"Organization created: {organization.id}")

            membership = await self.uow.memberships.create(
                OrganizationMembership(
                    organization_id=organization.id,
                    user_id=command.user_id,
                    role=MembershipRole.admin,
                    is_active=True,
                )
            )
            await self.uow.commit()
            membership_info = MembershipInfo.model_validate(membership)

            # Duplicates would violate (organization_id, module_name)
            unique_modules = list(dict.fromkeys(modules))
            permissions = await self.uow.module_permissions.create_many(
                [
                    ModulePermission(
                        organization_id=organization.id,
                        module_name=module,
                        is_enabled=True,
                    )
                    for module in unique_modules
                ]
            )
            await self.uow.commit()
            permission_infos = [
                ModulePermissionInfo.model_validate(p) for p in permissions
            ]

            await stamp_profile(self.uow, command.user_id, organization.id)
            await self.uow.commit()

            return Return.ok(
                OrganizationCreated(
                    organization=organization_info,
                    membership=membership_info,
                    modules=permission_infos,
                )
            )
