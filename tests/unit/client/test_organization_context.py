import asyncio
from uuid import uuid4

import pytest

from kairos.adapter.shell_navigator import ShellNavigator
from kairos.adapter.storage.memory_storage import MemoryStorage
from kairos.client.errors import AuthorizationError, OrganizationContextError
from kairos.client.organization_context import OrganizationContextResolver
from kairos.client.session_store import SessionStore
from kairos.domain.entities import AuthChangeEvent, MembershipRole, ModuleName
from tests.unit.client.fakes import FakeIdentityProvider, make_session
from tests.unit.factories import make_membership, make_organization, make_permission


def recorder(calls, label, value):
    async def record(*args):
        calls.append(label)
        return value

    return record


async def resolved_store(session):
    identity = FakeIdentityProvider(session)
    store = SessionStore(identity, [MemoryStorage()], ShellNavigator(), timeout_seconds=5)
    store.start()
    await store.wait_until_resolved()
    return identity, store


def seed_context(mock_uow, user_id, role=MembershipRole.member, permissions=None):
    organization = make_organization(name="Acme Corp")
    membership = make_membership(user_id, organization.id, role=role)
    mock_uow.memberships.get_active_by_user_id.return_value = [membership]
    mock_uow.organizations.get_by_id.return_value = organization
    mock_uow.organizations.get_by_ids.return_value = [organization]
    mock_uow.module_permissions.get_by_organization_id.return_value = (
        permissions(organization.id) if permissions else []
    )
    return organization, membership


async def loaded_resolver(mock_uow, session):
    identity, store = await resolved_store(session)
    resolver = OrganizationContextResolver(store, lambda: mock_uow)
    resolver.start()
    await resolver.wait_until_loaded()
    return identity, store, resolver


@pytest.mark.asyncio
async def test_loads_membership_then_organization_then_permissions(mock_uow):
    """Restored session: context is fetched in dependency order"""
    session = make_session()
    organization = make_organization()
    membership = make_membership(session.user.id, organization.id)
    permissions = [
        make_permission(organization.id, ModuleName.tasks),
        make_permission(organization.id, ModuleName.money, is_enabled=False),
    ]
    calls = []
    mock_uow.memberships.get_active_by_user_id.side_effect = recorder(
        calls, "membership", [membership]
    )
    mock_uow.organizations.get_by_id.side_effect = recorder(
        calls, "organization", organization
    )
    mock_uow.module_permissions.get_by_organization_id.side_effect = recorder(
        calls, "permissions", permissions
    )

    _, store, resolver = await loaded_resolver(mock_uow, session)

    assert calls[:3] == ["membership", "organization", "permissions"]
    assert resolver.loading is False
    assert resolver.membership.id == membership.id
    assert resolver.organization.id == organization.id
    assert resolver.has_module_access("tasks") is True
    assert resolver.has_module_access(ModuleName.money) is False
    resolver.close()
    store.close()


@pytest.mark.asyncio
async def test_nothing_is_fetched_before_the_store_resolves(mock_uow):
    identity = FakeIdentityProvider(hold=True)
    store = SessionStore(identity, [MemoryStorage()], ShellNavigator(), timeout_seconds=5)
    store.start()
    resolver = OrganizationContextResolver(store, lambda: mock_uow)

    resolver.start()
    await asyncio.sleep(0.01)

    mock_uow.memberships.get_active_by_user_id.assert_not_called()
    assert resolver.loading is True
    resolver.close()
    store.close()
    identity.release()


@pytest.mark.asyncio
async def test_has_module_access(mock_uow):
    session = make_session()
    seed_context(
        mock_uow,
        session.user.id,
        permissions=lambda org_id: [
            make_permission(org_id, ModuleName.tasks),
            make_permission(org_id, ModuleName.money, is_enabled=False),
        ],
    )

    _, store, resolver = await loaded_resolver(mock_uow, session)

    assert resolver.has_module_access(ModuleName.tasks) is True
    assert resolver.has_module_access("money") is False
    assert resolver.has_module_access("crypto") is False
    assert resolver.has_module_access("not-a-module") is False
    assert resolver.snapshot().enabled_modules == [ModuleName.tasks]
    resolver.close()
    store.close()


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "role,expected",
    [
        (MembershipRole.admin, True),
        (MembershipRole.member, False),
        (MembershipRole.viewer, False),
    ],
)
async def test_is_admin_follows_role(mock_uow, role, expected):
    session = make_session()
    seed_context(mock_uow, session.user.id, role=role)

    _, store, resolver = await loaded_resolver(mock_uow, session)

    assert resolver.is_admin() is expected
    resolver.close()
    store.close()


@pytest.mark.asyncio
async def test_no_membership_is_an_empty_context(mock_uow):
    session = make_session()
    mock_uow.memberships.get_active_by_user_id.return_value = []

    _, store, resolver = await loaded_resolver(mock_uow, session)

    assert resolver.membership is None
    assert resolver.organization is None
    assert resolver.is_admin() is False
    assert resolver.error is None
    assert resolver.loading is False
    mock_uow.organizations.get_by_id.assert_not_called()
    resolver.close()
    store.close()


@pytest.mark.asyncio
async def test_read_failures_are_absorbed(mock_uow):
    session = make_session()
    mock_uow.memberships.get_active_by_user_id.side_effect = ConnectionError("offline")

    _, store, resolver = await loaded_resolver(mock_uow, session)

    assert resolver.loading is False
    assert resolver.membership is None
    assert resolver.error == "Failed to load membership details"
    resolver.close()
    store.close()


@pytest.mark.asyncio
async def test_missing_organization_keeps_membership(mock_uow):
    session = make_session()
    _, membership = seed_context(mock_uow, session.user.id)
    mock_uow.organizations.get_by_id.return_value = None

    _, store, resolver = await loaded_resolver(mock_uow, session)

    assert resolver.membership.id == membership.id
    assert resolver.organization is None
    assert resolver.error == "Failed to load workspace details"
    resolver.close()
    store.close()


@pytest.mark.asyncio
async def test_permission_failure_yields_empty_list(mock_uow):
    session = make_session()
    seed_context(mock_uow, session.user.id)
    mock_uow.module_permissions.get_by_organization_id.side_effect = ConnectionError("offline")

    _, store, resolver = await loaded_resolver(mock_uow, session)

    assert resolver.organization is not None
    assert resolver.module_permissions == []
    resolver.close()
    store.close()


@pytest.mark.asyncio
async def test_sign_out_event_clears_context(mock_uow):
    session = make_session()
    seed_context(mock_uow, session.user.id)
    identity, store, resolver = await loaded_resolver(mock_uow, session)

    identity.emit(AuthChangeEvent.SIGNED_OUT, None)

    assert resolver.membership is None
    assert resolver.organization is None
    assert resolver.loading is False
    resolver.close()
    store.close()


@pytest.mark.asyncio
async def test_token_refresh_for_same_user_does_not_reload(mock_uow):
    session = make_session()
    seed_context(mock_uow, session.user.id)
    identity, store, resolver = await loaded_resolver(mock_uow, session)
    mock_uow.memberships.get_active_by_user_id.reset_mock()

    identity.emit(
        AuthChangeEvent.TOKEN_REFRESHED, make_session(user_id=session.user.id)
    )
    await resolver.wait_until_loaded()

    mock_uow.memberships.get_active_by_user_id.assert_not_called()
    resolver.close()
    store.close()


@pytest.mark.asyncio
async def test_close_drops_in_flight_load(mock_uow):
    session = make_session()
    organization = make_organization()
    gate = asyncio.Event()

    async def slow_memberships(user_id):
        await gate.wait()
        return [make_membership(session.user.id, organization.id)]

    mock_uow.memberships.get_active_by_user_id.side_effect = slow_memberships
    mock_uow.organizations.get_by_id.return_value = organization

    _, store = await resolved_store(session)
    resolver = OrganizationContextResolver(store, lambda: mock_uow)
    resolver.start()
    await asyncio.sleep(0)

    resolver.close()
    gate.set()
    await asyncio.sleep(0.01)

    assert resolver.membership is None
    assert resolver.organization is None
    store.close()


# ============================================================================
# Write side
# ============================================================================


@pytest.mark.asyncio
async def test_non_admin_cannot_update_module_permission(mock_uow):
    """Rejected before any I/O; local permissions untouched"""
    session = make_session()
    seed_context(
        mock_uow,
        session.user.id,
        role=MembershipRole.member,
        permissions=lambda org_id: [make_permission(org_id, ModuleName.money)],
    )
    _, store, resolver = await loaded_resolver(mock_uow, session)
    mock_uow.memberships.get_by_user_and_organization.reset_mock()

    with pytest.raises(AuthorizationError) as exc_info:
        await resolver.update_module_permission("money", False)

    assert exc_info.value.base_error.code == "FORBIDDEN"
    mock_uow.memberships.get_by_user_and_organization.assert_not_called()
    mock_uow.module_permissions.upsert.assert_not_called()
    assert resolver.has_module_access("money") is True
    resolver.close()
    store.close()


@pytest.mark.asyncio
async def test_admin_updates_module_permission_locally(mock_uow):
    session = make_session()
    organization, membership = seed_context(
        mock_uow,
        session.user.id,
        role=MembershipRole.admin,
        permissions=lambda org_id: [make_permission(org_id, ModuleName.money)],
    )
    mock_uow.memberships.get_by_user_and_organization.return_value = membership
    _, store, resolver = await loaded_resolver(mock_uow, session)

    updated = await resolver.update_module_permission(ModuleName.money, False)

    assert updated.is_enabled is False
    assert resolver.has_module_access("money") is False

    added = await resolver.update_module_permission("crypto", True)
    assert added.module_name == ModuleName.crypto
    assert resolver.has_module_access("crypto") is True
    resolver.close()
    store.close()


@pytest.mark.asyncio
async def test_failed_module_update_reverts_local_mirror(mock_uow):
    session = make_session()
    _, membership = seed_context(
        mock_uow,
        session.user.id,
        role=MembershipRole.admin,
        permissions=lambda org_id: [make_permission(org_id, ModuleName.money)],
    )
    mock_uow.memberships.get_by_user_and_organization.return_value = membership
    mock_uow.module_permissions.upsert.side_effect = ConnectionError("offline")
    _, store, resolver = await loaded_resolver(mock_uow, session)

    with pytest.raises(ConnectionError):
        await resolver.update_module_permission("money", False)

    assert resolver.has_module_access("money") is True
    resolver.close()
    store.close()


@pytest.mark.asyncio
async def test_unknown_module_is_rejected(mock_uow):
    session = make_session()
    seed_context(mock_uow, session.user.id, role=MembershipRole.admin)
    _, store, resolver = await loaded_resolver(mock_uow, session)

    with pytest.raises(OrganizationContextError) as exc_info:
        await resolver.update_module_permission("teleport", True)

    assert exc_info.value.base_error.code == "UNKNOWN_MODULE"
    mock_uow.module_permissions.upsert.assert_not_called()
    resolver.close()
    store.close()


@pytest.mark.asyncio
async def test_create_organization_reloads_context(mock_uow):
    session = make_session()
    mock_uow.memberships.get_active_by_user_id.return_value = []
    _, store, resolver = await loaded_resolver(mock_uow, session)
    assert resolver.membership is None

    created = []

    async def create_organization(organization):
        created.append(organization)
        mock_uow.organizations.get_by_id.return_value = organization
        return organization

    async def create_membership(membership):
        mock_uow.memberships.get_active_by_user_id.return_value = [membership]
        return membership

    mock_uow.organizations.create.side_effect = create_organization
    mock_uow.memberships.create.side_effect = create_membership

    result = await resolver.create_organization("Acme", "desc")

    assert result.organization.name == "Acme"
    assert result.membership.role == MembershipRole.admin
    assert resolver.organization.id == created[0].id
    assert resolver.is_admin() is True
    resolver.close()
    store.close()


@pytest.mark.asyncio
async def test_write_without_user_raises(mock_uow):
    identity = FakeIdentityProvider(None)
    store = SessionStore(identity, [MemoryStorage()], ShellNavigator(), timeout_seconds=5)
    store.start()
    await store.wait_until_resolved()
    resolver = OrganizationContextResolver(store, lambda: mock_uow)

    with pytest.raises(OrganizationContextError) as exc_info:
        await resolver.join_organization(uuid4())

    assert exc_info.value.base_error.code == "NOT_AUTHENTICATED"
    store.close()


@pytest.mark.asyncio
async def test_join_error_is_raised(mock_uow):
    session = make_session()
    mock_uow.organizations.get_by_id.return_value = None
    _, store, resolver = await loaded_resolver(mock_uow, session)

    with pytest.raises(OrganizationContextError) as exc_info:
        await resolver.join_organization(uuid4())

    assert exc_info.value.base_error.code == "ORGANIZATION_NOT_FOUND"
    resolver.close()
    store.close()


@pytest.mark.asyncio
@pytest.mark.parametrize("write_fails", [True, False])
async def test_module_update_finishing_after_user_switch_leaves_new_context_alone(
    mock_uow, write_fails
):
    session = make_session()
    _, membership_a = seed_context(
        mock_uow,
        session.user.id,
        role=MembershipRole.admin,
        permissions=lambda org_id: [make_permission(org_id, ModuleName.money)],
    )
    mock_uow.memberships.get_by_user_and_organization.return_value = membership_a
    gate = asyncio.Event()

    async def gated_upsert(row):
        await gate.wait()
        if write_fails:
            raise ConnectionError("offline")
        return row

    mock_uow.module_permissions.upsert.side_effect = gated_upsert
    identity, store, resolver = await loaded_resolver(mock_uow, session)

    update = asyncio.get_running_loop().create_task(
        resolver.update_module_permission("money", False)
    )
    await asyncio.sleep(0.01)

    # Another user signs in while the write is in flight
    other = make_session(email="other@b.co")
    organization_b, _ = seed_context(
        mock_uow,
        other.user.id,
        permissions=lambda org_id: [make_permission(org_id, ModuleName.tasks)],
    )
    identity.emit(AuthChangeEvent.SIGNED_IN, other)
    await resolver.wait_until_loaded()
    assert resolver.organization.id == organization_b.id

    gate.set()
    if write_fails:
        with pytest.raises(ConnectionError):
            await update
    else:
        await update

    assert {p.organization_id for p in resolver.module_permissions} == {organization_b.id}
    assert resolver.has_module_access("tasks") is True
    assert resolver.has_module_access("money") is False
    resolver.close()
    store.close()


@pytest.mark.asyncio
async def test_wait_until_loaded_covers_explicit_refresh(mock_uow):
    session = make_session()
    seed_context(mock_uow, session.user.id)
    _, store, resolver = await loaded_resolver(mock_uow, session)

    gate = asyncio.Event()
    organization, membership = seed_context(mock_uow, session.user.id)

    async def gated_memberships(user_id):
        await gate.wait()
        return [membership]

    mock_uow.memberships.get_active_by_user_id.side_effect = gated_memberships
    loop = asyncio.get_running_loop()
    refresh = loop.create_task(resolver.refresh())
    await asyncio.sleep(0.01)

    waiter = loop.create_task(resolver.wait_until_loaded())
    await asyncio.sleep(0.01)
    assert resolver.loading is True
    assert waiter.done() is False

    gate.set()
    await waiter
    await refresh

    assert resolver.loading is False
    assert resolver.organization.id == organization.id
    resolver.close()
    store.close()
