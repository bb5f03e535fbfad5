from unittest.mock import AsyncMock, MagicMock

import pytest


@pytest.fixture
def mock_uow():
    """Mock UnitOfWork with all repositories"""
    uow = MagicMock()
    uow.__aenter__ = AsyncMock(return_value=uow)
    uow.__aexit__ = AsyncMock(return_value=False)  # Must return False to not suppress exceptions
    uow.commit = AsyncMock()
    uow.rollback = AsyncMock()

    uow.users = MagicMock()
    uow.users.get_by_id = AsyncMock()
    uow.users.get_by_email = AsyncMock()
    uow.users.create = AsyncMock(side_effect=lambda user: user)
    uow.users.update = AsyncMock(side_effect=lambda user: user)

    uow.refresh_tokens = MagicMock()
    uow.refresh_tokens.get_by_id = AsyncMock()
    uow.refresh_tokens.create = AsyncMock(side_effect=lambda token: token)
    uow.refresh_tokens.update = AsyncMock(side_effect=lambda token: token)
    uow.refresh_tokens.revoke_all_by_user_id = AsyncMock(return_value=0)
    uow.refresh_tokens.revoke_all_except = AsyncMock(return_value=0)
    uow.refresh_tokens.revoke_by_id = AsyncMock(return_value=True)

    uow.organizations = MagicMock()
    uow.organizations.get_by_id = AsyncMock()
    uow.organizations.get_by_ids = AsyncMock(return_value=[])
    uow.organizations.create = AsyncMock(side_effect=lambda org: org)
    uow.organizations.update = AsyncMock(side_effect=lambda org: org)

    uow.memberships = MagicMock()
    uow.memberships.get_by_user_and_organization = AsyncMock(return_value=None)
    uow.memberships.get_active_by_user_id = AsyncMock(return_value=[])
    uow.memberships.create = AsyncMock(side_effect=lambda m: m)
    uow.memberships.update = AsyncMock(side_effect=lambda m: m)

    uow.module_permissions = MagicMock()
    uow.module_permissions.get_by_organization_id = AsyncMock(return_value=[])
    uow.module_permissions.get_by_organization_and_module = AsyncMock(return_value=None)
    uow.module_permissions.create_many = AsyncMock(side_effect=lambda rows: rows)
    uow.module_permissions.upsert = AsyncMock(side_effect=lambda row: row)

    uow.profiles = MagicMock()
    uow.profiles.get_by_user_id = AsyncMock(return_value=None)
    uow.profiles.create = AsyncMock(side_effect=lambda p: p)
    uow.profiles.update = AsyncMock(side_effect=lambda p: p)

    return uow
