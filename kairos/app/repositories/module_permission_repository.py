from abc import ABC, abstractmethod
from typing import List, Optional
from uuid import UUID

from kairos.domain.entities import ModuleName, ModulePermission


class IModulePermissionRepository(ABC):
    """Module permission repository interface - application layer"""

    @abstractmethod
    async def get_by_organization_id(self, organization_id: UUID) -> List[ModulePermission]:
        """Get all module permissions for an organization"""
        pass

    @abstractmethod
    async def get_by_organization_and_module(
        self, organization_id: UUID, module_name: ModuleName
    ) -> Optional[ModulePermission]:
        """Get one module permission row"""
        pass

    @abstractmethod
    async def create_many(self, permissions: List[ModulePermission]) -> List[ModulePermission]:
        """Insert several permission rows"""
        pass

    @abstractmethod
    async def upsert(self, permission: ModulePermission) -> ModulePermission:
        """Insert or update on (organization_id, module_name)"""
        pass
