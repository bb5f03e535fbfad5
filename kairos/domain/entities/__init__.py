"""
Kairos Domain Entities

All domain entities organized by model.
Each entity in its own file for better maintainability.
"""

# Export all enums
from .enums import (
    AuthChangeEvent,
    MembershipRole,
    ModuleName,
    OrganizationType,
    SignOutScope,
)

# Export all entities
from .user import User
from .refresh_token import RefreshToken
from .organization import Organization
from .membership import OrganizationMembership
from .module_permission import ModulePermission
from .profile import Profile

__all__ = [
    # Enums
    "AuthChangeEvent",
    "MembershipRole",
    "ModuleName",
    "OrganizationType",
    "SignOutScope",
    # Entities
    "User",
    "RefreshToken",
    "Organization",
    "OrganizationMembership",
    "ModulePermission",
    "Profile",
]
