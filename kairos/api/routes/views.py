from fastapi import APIRouter, Depends

from kairos.api.utils.guard_response import render_guard_decision
from kairos.client.provider import KairosProvider
from kairos.client.route_guard import GuardDecision, GuardOutcome
from kairos.depends import get_provider, route_admission

router = APIRouter(tags=["Views"])


@router.get("/")
async def landing(provider: KairosProvider = Depends(get_provider)):
    """Public landing route; denied protected views redirect here"""
    store = provider.session_store
    return {"route": "/", "signed_in": store.user is not None, "loading": store.loading}


@router.get("/dashboard")
async def dashboard(
    decision: GuardDecision = Depends(route_admission),
    provider: KairosProvider = Depends(get_provider),
):
    """Protected dashboard: user plus the modules enabled in their organization"""
    if decision.outcome != GuardOutcome.admitted:
        return render_guard_decision(decision)

    organization = provider.organization
    await organization.wait_until_loaded()
    snapshot = organization.snapshot()
    return {
        "user": provider.session_store.user.model_dump(mode="json"),
        "organization": snapshot.organization.name if snapshot.organization else None,
        "needs_onboarding": snapshot.membership is None,
        "modules": [m.value for m in snapshot.enabled_modules],
        "is_admin": snapshot.is_admin,
    }


@router.get("/diagnostics")
async def diagnostics(provider: KairosProvider = Depends(get_provider)):
    """Loading diagnostic: authentication and organization checks with elapsed time"""
    store = provider.session_store
    organization = provider.organization

    if store.loading:
        auth_check = ("loading", "Checking authentication...")
    elif store.user is not None:
        auth_check = ("success", f"Authenticated as {store.user.email}")
    else:
        auth_check = ("error", "Not authenticated")

    if organization.loading:
        org_check = ("loading", "Loading organization...")
    elif organization.organization is not None:
        org_check = ("success", f"Loaded: {organization.organization.name}")
    else:
        org_check = ("error", organization.error or "No active context")

    return {
        "elapsed_seconds": provider.route_guard.waiting_view.elapsed_seconds,
        "checks": [
            {"label": "Authentication", "status": auth_check[0], "message": auth_check[1]},
            {"label": "Organization Context", "status": org_check[0], "message": org_check[1]},
        ],
    }
