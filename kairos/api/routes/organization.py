from typing import Dict, List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from kairos.api.error import ClientError, ServerError
from kairos.api.utils.guard_response import render_guard_decision
from kairos.app.use_cases.organizations import (
    ContextInfo,
    MembershipInfo,
    ModulePermissionInfo,
    OrganizationCreated,
    OrganizationJoined,
)
from kairos.client.branding import theme_variables
from kairos.client.errors import OrganizationContextError
from kairos.client.organization_context import (
    OrganizationContextResolver,
    OrganizationContextSnapshot,
)
from kairos.client.route_guard import GuardDecision, GuardOutcome
from kairos.depends import get_organization_context, route_admission
from kairos.domain.entities import ModuleName, OrganizationType

router = APIRouter(tags=["Organization"])

ERROR_STATUS = {
    "NOT_AUTHENTICATED": status.HTTP_401_UNAUTHORIZED,
    "FORBIDDEN": status.HTTP_403_FORBIDDEN,
    "NOT_A_MEMBER": status.HTTP_403_FORBIDDEN,
    "ORGANIZATION_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "NO_ACTIVE_CONTEXT": status.HTTP_404_NOT_FOUND,
    "ALREADY_A_MEMBER": status.HTTP_409_CONFLICT,
    "INVALID_NAME": status.HTTP_422_UNPROCESSABLE_ENTITY,
    "UNKNOWN_MODULE": status.HTTP_422_UNPROCESSABLE_ENTITY,
}


def raise_for_context_error(exc: OrganizationContextError):
    status_code = ERROR_STATUS.get(exc.base_error.code)
    if status_code is None:
        raise ServerError(exc.base_error)
    raise ClientError(exc.base_error, status_code=status_code)


class CreateOrganizationRequest(BaseModel):
    """Create organization HTTP request payload"""

    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    type: OrganizationType = OrganizationType.organization
    modules: Optional[List[ModuleName]] = None


class UpdateModulePermissionRequest(BaseModel):
    is_enabled: bool


class SwitchContextRequest(BaseModel):
    organization_id: UUID


class BrandingResponse(BaseModel):
    variables: Dict[str, str]


@router.get("/organization", response_model=OrganizationContextSnapshot)
async def get_organization(
    decision: GuardDecision = Depends(route_admission),
    organization: OrganizationContextResolver = Depends(get_organization_context),
):
    """
    Current organization context

    Protected view: renders the waiting view while the session is being
    checked and redirects to the public route without a user.
    """
    if decision.outcome != GuardOutcome.admitted:
        return render_guard_decision(decision)
    await organization.wait_until_loaded()
    return organization.snapshot()


@router.get("/organization/contexts", response_model=List[ContextInfo])
async def list_contexts(
    organization: OrganizationContextResolver = Depends(get_organization_context),
):
    await organization.wait_until_loaded()
    return organization.contexts


@router.post(
    "/organizations",
    status_code=status.HTTP_201_CREATED,
    response_model=OrganizationCreated,
)
async def create_organization(
    request: CreateOrganizationRequest,
    organization: OrganizationContextResolver = Depends(get_organization_context),
):
    """
    Create Organization

    The caller becomes admin; default modules for the type are enabled
    unless an explicit module list is given.

    Raises:
        - 401 Unauthorized: No signed-in user
        - 422 Unprocessable Entity: Invalid name
    """
    try:
        if request.type == OrganizationType.organization and request.modules is None:
            return await organization.create_organization(request.name, request.description)
        return await organization.create_group(
            request.name, request.type, request.description, request.modules
        )
    except OrganizationContextError as exc:
        raise_for_context_error(exc)


@router.post(
    "/organizations/{organization_id}/join",
    status_code=status.HTTP_201_CREATED,
    response_model=OrganizationJoined,
)
async def join_organization(
    organization_id: UUID,
    organization: OrganizationContextResolver = Depends(get_organization_context),
):
    """
    Join Organization

    Raises:
        - 401 Unauthorized: No signed-in user
        - 404 Not Found: Organization does not exist
        - 409 Conflict: Already a member
    """
    try:
        return await organization.join_organization(organization_id)
    except OrganizationContextError as exc:
        raise_for_context_error(exc)


@router.put(
    "/organization/modules/{module_name}", response_model=ModulePermissionInfo
)
async def update_module_permission(
    module_name: ModuleName,
    request: UpdateModulePermissionRequest,
    organization: OrganizationContextResolver = Depends(get_organization_context),
):
    """
    Toggle a module for the current organization

    Raises:
        - 403 Forbidden: Caller is not an admin
    """
    await organization.wait_until_loaded()
    try:
        return await organization.update_module_permission(module_name, request.is_enabled)
    except OrganizationContextError as exc:
        raise_for_context_error(exc)


@router.post("/organization/switch", response_model=MembershipInfo)
async def switch_context(
    request: SwitchContextRequest,
    organization: OrganizationContextResolver = Depends(get_organization_context),
):
    """
    Switch the active organization

    Raises:
        - 403 Forbidden: Not a member of the target organization
    """
    try:
        return await organization.switch_context(request.organization_id)
    except OrganizationContextError as exc:
        raise_for_context_error(exc)


@router.post("/organization/leave", response_model=MembershipInfo)
async def leave_organization(
    organization: OrganizationContextResolver = Depends(get_organization_context),
):
    """Deactivate the membership in the current organization"""
    await organization.wait_until_loaded()
    try:
        return await organization.leave_organization()
    except OrganizationContextError as exc:
        raise_for_context_error(exc)


@router.get("/organization/branding", response_model=BrandingResponse)
async def get_branding(
    organization: OrganizationContextResolver = Depends(get_organization_context),
):
    await organization.wait_until_loaded()
    settings = organization.organization.settings if organization.organization else None
    return BrandingResponse(variables=theme_variables(settings))
