"""
Kairos Domain Enums

All enumeration types used across domain entities and the client layer.
"""

from enum import Enum


class MembershipRole(str, Enum):
    """Role of a principal within an organization"""

    admin = "admin"
    member = "member"
    viewer = "viewer"


class OrganizationType(str, Enum):
    """Kind of shared space an organization represents"""

    individual = "individual"
    family = "family"
    team = "team"
    organization = "organization"
    project = "project"


class ModuleName(str, Enum):
    """Feature areas that can be enabled per organization"""

    today = "today"
    tasks = "tasks"
    calendar = "calendar"
    money = "money"
    fitness = "fitness"
    health = "health"
    business = "business"
    professional = "professional"
    social = "social"
    connections = "connections"
    love = "love"
    creators = "creators"
    crypto = "crypto"
    stocks = "stocks"
    news = "news"

    @classmethod
    def parse(cls, value) -> "ModuleName | None":
        """Return the member for value, or None for unknown module names."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return None


class AuthChangeEvent(str, Enum):
    """Events pushed by the identity provider to subscribers"""

    INITIAL_SESSION = "INITIAL_SESSION"
    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"
    TOKEN_REFRESHED = "TOKEN_REFRESHED"
    USER_UPDATED = "USER_UPDATED"


class SignOutScope(str, Enum):
    """Which refresh sessions a sign-out invalidates"""

    global_ = "global"
    local = "local"
    others = "others"
