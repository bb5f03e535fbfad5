from uuid import uuid4

import pytest

from kairos.app.use_cases.organizations import LoadOrganizationContextUseCase
from kairos.domain.entities import MembershipRole, ModuleName
from tests.unit.factories import (
    make_membership,
    make_organization,
    make_permission,
    make_profile,
)


@pytest.mark.asyncio
async def test_no_membership_means_no_active_context(mock_uow):
    result = await LoadOrganizationContextUseCase(mock_uow).resolve_membership(uuid4())

    assert result.is_err()
    assert result.error.code == "NO_ACTIVE_CONTEXT"


@pytest.mark.asyncio
async def test_most_recent_membership_without_profile_stamp(mock_uow):
    user_id = uuid4()
    newest = make_membership(user_id, uuid4())
    older = make_membership(user_id, uuid4())
    mock_uow.memberships.get_active_by_user_id.return_value = [newest, older]

    result = await LoadOrganizationContextUseCase(mock_uow).resolve_membership(user_id)

    assert result.is_ok()
    assert result.value.id == newest.id


@pytest.mark.asyncio
async def test_profile_stamp_selects_membership(mock_uow):
    user_id = uuid4()
    newest = make_membership(user_id, uuid4())
    stamped = make_membership(user_id, uuid4(), role=MembershipRole.admin)
    mock_uow.memberships.get_active_by_user_id.return_value = [newest, stamped]
    mock_uow.profiles.get_by_user_id.return_value = make_profile(
        user_id, stamped.organization_id
    )

    result = await LoadOrganizationContextUseCase(mock_uow).resolve_membership(user_id)

    assert result.is_ok()
    assert result.value.organization_id == stamped.organization_id
    assert result.value.role == MembershipRole.admin


@pytest.mark.asyncio
async def test_stale_profile_stamp_falls_back_to_most_recent(mock_uow):
    user_id = uuid4()
    newest = make_membership(user_id, uuid4())
    mock_uow.memberships.get_active_by_user_id.return_value = [newest]
    mock_uow.profiles.get_by_user_id.return_value = make_profile(user_id, uuid4())

    result = await LoadOrganizationContextUseCase(mock_uow).resolve_membership(user_id)

    assert result.is_ok()
    assert result.value.id == newest.id


@pytest.mark.asyncio
async def test_resolve_organization_not_found(mock_uow):
    mock_uow.organizations.get_by_id.return_value = None

    result = await LoadOrganizationContextUseCase(mock_uow).resolve_organization(uuid4())

    assert result.is_err()
    assert result.error.code == "ORGANIZATION_NOT_FOUND"


@pytest.mark.asyncio
async def test_resolve_module_permissions(mock_uow):
    organization_id = uuid4()
    mock_uow.module_permissions.get_by_organization_id.return_value = [
        make_permission(organization_id, ModuleName.tasks),
        make_permission(organization_id, ModuleName.money, is_enabled=False),
    ]

    result = await LoadOrganizationContextUseCase(mock_uow).resolve_module_permissions(
        organization_id
    )

    assert result.is_ok()
    assert [(p.module_name, p.is_enabled) for p in result.value] == [
        (ModuleName.tasks, True),
        (ModuleName.money, False),
    ]


@pytest.mark.asyncio
async def test_list_contexts_marks_current(mock_uow):
    user_id = uuid4()
    acme = make_organization(name="Acme Corp")
    family = make_organization(name="The Smiths")
    mock_uow.memberships.get_active_by_user_id.return_value = [
        make_membership(user_id, acme.id, role=MembershipRole.admin),
        make_membership(user_id, family.id),
    ]
    mock_uow.organizations.get_by_ids.return_value = [acme, family]

    result = await LoadOrganizationContextUseCase(mock_uow).list_contexts(user_id, family.id)

    assert result.is_ok()
    contexts = {c.organization_name: c for c in result.value}
    assert contexts["Acme Corp"].is_current is False
    assert contexts["Acme Corp"].role == MembershipRole.admin
    assert contexts["The Smiths"].is_current is True
