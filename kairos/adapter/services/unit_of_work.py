from typing import Callable

from sqlmodel.ext.asyncio.session import AsyncSession

from kairos.adapter.repositories.membership_repository import MembershipRepository
from kairos.adapter.repositories.module_permission_repository import (
    ModulePermissionRepository,
)
from kairos.adapter.repositories.organization_repository import OrganizationRepository
from kairos.adapter.repositories.profile_repository import ProfileRepository
from kairos.adapter.repositories.refresh_token_repository import RefreshTokenRepository
from kairos.adapter.repositories.user_repository import UserRepository
from kairos.app.services.unit_of_work import UnitOfWork


class SqlAlchemyUnitOfWork(UnitOfWork):
    """
    SQLAlchemy implementation of UnitOfWork pattern.

    A session is opened on every `async with` and closed on exit, so one
    instance can be reused across the long-lived client components.
    """

    def __init__(self, session_factory: Callable[[], AsyncSession]):
        self.session_factory = session_factory
        self.session = None

    async def __aenter__(self):
        self.session = self.session_factory()
        # Initialize all repositories with the session
        self.users = UserRepository(self.session)
        self.refresh_tokens = RefreshTokenRepository(self.session)
        self.organizations = OrganizationRepository(self.session)
        self.memberships = MembershipRepository(self.session)
        self.module_permissions = ModulePermissionRepository(self.session)
        self.profiles = ProfileRepository(self.session)
        return self

    async def __aexit__(self, *args):
        try:
            await self.rollback()
        finally:
            await self.session.close()
            self.session = None

    async def commit(self):
        await self.session.commit()

    async def rollback(self):
        await self.session.rollback()
