"""
OrganizationMembership Entity

Links a principal to an organization with a role.
"""

from datetime import datetime
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from kairos.domain.base import utcnow

from .enums import MembershipRole


class OrganizationMembership(SQLModel, table=True):
    """
    Membership entity - join between principal and organization.

    Business Rules:
    - (user_id, organization_id) must be unique
    - Leaving deactivates the row (is_active=False), never deletes it
    - Only admins may change organization-level settings
    """

    __tablename__ = "organization_memberships"

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    organization_id: UUID = Field(
        foreign_key="organizations.id", nullable=False, index=True
    )
    user_id: UUID = Field(foreign_key="users.id", nullable=False, index=True)

    role: MembershipRole = Field(default=MembershipRole.member)
    is_active: bool = Field(default=True)

    joined_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))

    __table_args__ = (
        Index("idx_membership_user_org", "user_id", "organization_id", unique=True),
        Index("idx_membership_active", "is_active"),
    )
