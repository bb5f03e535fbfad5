"""
Organization Use Case DTOs (Data Transfer Objects)

Snapshots built inside a unit of work so they stay valid after the session
closes.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from kairos.domain.entities import MembershipRole, ModuleName, OrganizationType


# ============================================================================
# Snapshots
# ============================================================================


class MembershipInfo(BaseModel):
    """Membership row as held by the client"""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    organization_id: UUID
    user_id: UUID
    role: MembershipRole
    is_active: bool
    joined_at: datetime


class OrganizationInfo(BaseModel):
    """Organization row as held by the client"""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    description: Optional[str] = None
    type: OrganizationType
    logo_url: Optional[str] = None
    settings: Dict[str, Any] = Field(default_factory=dict)
    created_by: Optional[UUID] = None
    created_at: datetime
    updated_at: datetime


class ModulePermissionInfo(BaseModel):
    """Module permission row as held by the client"""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    organization_id: UUID
    module_name: ModuleName
    is_enabled: bool
    settings: Dict[str, Any] = Field(default_factory=dict)


class ContextInfo(BaseModel):
    """One organization the user can switch into"""

    organization_id: UUID
    organization_name: str
    organization_type: OrganizationType
    role: MembershipRole
    is_current: bool = False


# ============================================================================
# Commands / Responses
# ============================================================================


class CreateGroupCommand(BaseModel):
    """Create an organization of any type"""

    user_id: UUID
    name: str = Field(..., min_length=1, max_length=255)
    type: OrganizationType = OrganizationType.organization
    description: Optional[str] = None
    modules: Optional[List[ModuleName]] = None


class OrganizationCreated(BaseModel):
    """Response for create group use case"""

    organization: OrganizationInfo
    membership: MembershipInfo
    modules: List[ModulePermissionInfo]


class OrganizationJoined(BaseModel):
    """Response for join organization use case"""

    organization_id: UUID
    membership: MembershipInfo
