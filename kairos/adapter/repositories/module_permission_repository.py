from typing import List, Optional
from uuid import UUID

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from kairos.app.repositories.module_permission_repository import (
    IModulePermissionRepository,
)
from kairos.domain.base import utcnow
from kairos.domain.entities import ModuleName, ModulePermission


class ModulePermissionRepository(IModulePermissionRepository):
    """Module permission repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_organization_id(self, organization_id: UUID) -> List[ModulePermission]:
        """Get all module permissions for an organization"""
        stmt = select(ModulePermission).where(
            ModulePermission.organization_id == organization_id
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_by_organization_and_module(
        self, organization_id: UUID, module_name: ModuleName
    ) -> Optional[ModulePermission]:
        """Get one module permission row"""
        stmt = select(ModulePermission).where(
            ModulePermission.organization_id == organization_id,
            ModulePermission.module_name == module_name,
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def create_many(self, permissions: List[ModulePermission]) -> List[ModulePermission]:
        """Insert several permission rows"""
        self.session.add_all(permissions)
        await self.session.flush()
        for permission in permissions:
            await self.session.refresh(permission)
        return permissions

    async def upsert(self, permission: ModulePermission) -> ModulePermission:
        """Insert or update on (organization_id, module_name)"""
        existing = await self.get_by_organization_and_module(
            permission.organization_id, permission.module_name
        )
        if existing is None:
            self.session.add(permission)
            target = permission
        else:
            existing.is_enabled = permission.is_enabled
            if permission.settings:
                existing.settings = permission.settings
            existing.updated_at = utcnow()
            self.session.add(existing)
            target = existing
        await self.session.flush()
        await self.session.refresh(target)
        return target
