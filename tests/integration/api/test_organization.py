from uuid import uuid4

import pytest
from httpx import AsyncClient

from kairos.app.use_cases.organizations import default_modules_for
from kairos.domain.entities import OrganizationType
from tests.integration.helpers import create_organization, sign_out, sign_up


@pytest.mark.asyncio
async def test_create_organization(client: AsyncClient):
    """Creator is the single admin, default modules enabled, profile stamped"""
    await sign_up(client, "admin@acme.com")

    created = await create_organization(client, "Acme", description="desc")

    assert created["organization"]["name"] == "Acme"
    assert created["organization"]["description"] == "desc"
    assert created["membership"]["role"] == "admin"
    assert len(created["modules"]) == len(default_modules_for(OrganizationType.organization))

    context = (await client.get("/organization")).json()
    assert context["organization"]["id"] == created["organization"]["id"]
    assert context["membership"]["role"] == "admin"
    assert context["is_admin"] is True
    assert context["loading"] is False
    assert sorted(context["enabled_modules"]) == sorted(
        m.value for m in default_modules_for(OrganizationType.organization)
    )


@pytest.mark.asyncio
async def test_create_group_with_type_and_modules(client: AsyncClient):
    await sign_up(client, "kai@kairos.app")

    created = await create_organization(
        client, "The Smiths", type="family", modules=["today", "money"]
    )

    assert created["organization"]["type"] == "family"
    assert [m["module_name"] for m in created["modules"]] == ["today", "money"]


@pytest.mark.asyncio
async def test_create_organization_requires_user(client: AsyncClient):
    await client.get("/auth/session", params={"wait": True})

    response = await client.post("/organizations", json={"name": "Acme"})

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "NOT_AUTHENTICATED"


@pytest.mark.asyncio
async def test_create_organization_blank_name(client: AsyncClient):
    await sign_up(client, "kai@kairos.app")

    response = await client.post("/organizations", json={"name": "   "})

    assert response.status_code == 422
    assert response.json()["error"]["code"] == "INVALID_NAME"


@pytest.mark.asyncio
async def test_admin_toggles_module(client: AsyncClient):
    await sign_up(client, "admin@acme.com")
    await create_organization(client, "Acme")

    response = await client.put("/organization/modules/money", json={"is_enabled": False})

    assert response.status_code == 200
    assert response.json()["is_enabled"] is False
    context = (await client.get("/organization")).json()
    assert "money" not in context["enabled_modules"]

    response = await client.put("/organization/modules/fitness", json={"is_enabled": True})
    assert response.status_code == 200
    context = (await client.get("/organization")).json()
    assert "fitness" in context["enabled_modules"]


@pytest.mark.asyncio
async def test_member_cannot_toggle_module(client: AsyncClient):
    await sign_up(client, "admin@acme.com")
    created = await create_organization(client, "Acme")
    organization_id = created["organization"]["id"]
    await sign_out(client)

    await sign_up(client, "member@acme.com")
    response = await client.post(f"/organizations/{organization_id}/join")
    assert response.status_code == 201
    assert response.json()["membership"]["role"] == "member"

    context = (await client.get("/organization")).json()
    assert context["organization"]["id"] == organization_id
    assert context["is_admin"] is False

    response = await client.put("/organization/modules/money", json={"is_enabled": False})

    assert response.status_code == 403
    assert response.json()["error"]["code"] == "FORBIDDEN"
    context = (await client.get("/organization")).json()
    assert "money" in context["enabled_modules"]


@pytest.mark.asyncio
async def test_unknown_module_name(client: AsyncClient):
    await sign_up(client, "admin@acme.com")
    await create_organization(client, "Acme")

    response = await client.put("/organization/modules/teleport", json={"is_enabled": True})

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_join_unknown_organization(client: AsyncClient):
    await sign_up(client, "kai@kairos.app")

    response = await client.post(f"/organizations/{uuid4()}/join")

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "ORGANIZATION_NOT_FOUND"


@pytest.mark.asyncio
async def test_join_twice(client: AsyncClient):
    await sign_up(client, "admin@acme.com")
    created = await create_organization(client, "Acme")

    response = await client.post(f"/organizations/{created['organization']['id']}/join")

    assert response.status_code == 409
    assert response.json()["error"]["code"] == "ALREADY_A_MEMBER"


@pytest.mark.asyncio
async def test_list_and_switch_contexts(client: AsyncClient):
    await sign_up(client, "kai@kairos.app")
    first = await create_organization(client, "Acme")
    await create_organization(client, "The Smiths", type="family")

    contexts = (await client.get("/organization/contexts")).json()
    assert {c["organization_name"]: c["is_current"] for c in contexts} == {
        "Acme": False,
        "The Smiths": True,
    }

    response = await client.post(
        "/organization/switch", json={"organization_id": first["organization"]["id"]}
    )

    assert response.status_code == 200
    context = (await client.get("/organization")).json()
    assert context["organization"]["name"] == "Acme"


@pytest.mark.asyncio
async def test_switch_to_foreign_organization(client: AsyncClient):
    await sign_up(client, "kai@kairos.app")

    response = await client.post(
        "/organization/switch", json={"organization_id": str(uuid4())}
    )

    assert response.status_code == 403
    assert response.json()["error"]["code"] == "NOT_A_MEMBER"


@pytest.mark.asyncio
async def test_leave_organization(client: AsyncClient):
    await sign_up(client, "kai@kairos.app")
    await create_organization(client, "Acme")

    response = await client.post("/organization/leave")

    assert response.status_code == 200
    assert response.json()["is_active"] is False
    context = (await client.get("/organization")).json()
    assert context["organization"] is None
    assert context["membership"] is None


@pytest.mark.asyncio
async def test_leave_without_context(client: AsyncClient):
    await sign_up(client, "kai@kairos.app")

    response = await client.post("/organization/leave")

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "NO_ACTIVE_CONTEXT"


@pytest.mark.asyncio
async def test_branding_defaults_to_empty(client: AsyncClient):
    await sign_up(client, "kai@kairos.app")
    await create_organization(client, "Acme")

    response = await client.get("/organization/branding")

    assert response.status_code == 200
    assert response.json() == {"variables": {}}


@pytest.mark.asyncio
async def test_organization_context_redirects_without_user(client: AsyncClient):
    await client.get("/auth/session", params={"wait": True})

    response = await client.get("/organization")

    assert response.status_code == 303
    assert response.headers["location"] == "/"
