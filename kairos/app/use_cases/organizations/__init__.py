"""
Organization Use Cases

Tenant context read path and membership/permission writes.
"""

from .load_context_use_case import LoadOrganizationContextUseCase
from .create_organization_use_case import CreateOrganizationUseCase
from .join_organization_use_case import JoinOrganizationUseCase
from .update_module_permission_use_case import UpdateModulePermissionUseCase
from .switch_context_use_case import SwitchContextUseCase
from .leave_organization_use_case import LeaveOrganizationUseCase
from .defaults import DEFAULT_MODULES_BY_TYPE, default_modules_for
from .dtos import (
    ContextInfo,
    CreateGroupCommand,
    MembershipInfo,
    ModulePermissionInfo,
    OrganizationCreated,
    OrganizationInfo,
    OrganizationJoined,
)

__all__ = [
    # Use Cases
    "LoadOrganizationContextUseCase",
    "CreateOrganizationUseCase",
    "JoinOrganizationUseCase",
    "UpdateModulePermissionUseCase",
    "SwitchContextUseCase",
    "LeaveOrganizationUseCase",
    # Defaults
    "DEFAULT_MODULES_BY_TYPE",
    "default_modules_for",
    # DTOs - Commands
    "CreateGroupCommand",
    # DTOs - Responses
    "OrganizationCreated",
    "OrganizationJoined",
    # DTOs - Snapshots
    "ContextInfo",
    "MembershipInfo",
    "ModulePermissionInfo",
    "OrganizationInfo",
]
