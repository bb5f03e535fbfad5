from abc import ABC, abstractmethod

from kairos.app.repositories.membership_repository import IMembershipRepository
from kairos.app.repositories.module_permission_repository import IModulePermissionRepository
from kairos.app.repositories.organization_repository import IOrganizationRepository
from kairos.app.repositories.profile_repository import IProfileRepository
from kairos.app.repositories.refresh_token_repository import IRefreshTokenRepository
from kairos.app.repositories.user_repository import IUserRepository


class UnitOfWork(ABC):
    """Abstract UnitOfWork - defines repository access and transaction management"""

    # Repository properties (initialized in __aenter__)
    users: IUserRepository
    refresh_tokens: IRefreshTokenRepository
    organizations: IOrganizationRepository
    memberships: IMembershipRepository
    module_permissions: IModulePermissionRepository
    profiles: IProfileRepository

    @abstractmethod
    async def __aenter__(self):
        pass

    @abstractmethod
    async def __aexit__(self, *args):
        pass

    @abstractmethod
    async def commit(self):
        pass

    @abstractmethod
    async def rollback(self):
        pass
