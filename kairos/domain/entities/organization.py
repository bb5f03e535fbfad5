"""
Organization Entity

A shared space (tenant boundary) grouping memberships and module permissions.
"""

from datetime import datetime
from typing import Any, Dict, Optional
from uuid import UUID, uuid4

from sqlmodel import JSON, Column, DateTime, Field, SQLModel

from kairos.domain.base import utcnow

from .enums import OrganizationType


class Organization(SQLModel, table=True):
    """
    Organization entity - tenant boundary.

    Business Rules:
    - The creator becomes its first admin
    - Only admins mutate name, description and branding settings
    - Never deleted from the client layer
    """

    __tablename__ = "organizations"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    name: str = Field(max_length=255)
    description: Optional[str] = Field(default=None)
    type: OrganizationType = Field(default=OrganizationType.organization)
    logo_url: Optional[str] = Field(default=None, max_length=2048)

    # Branding blob: brand_colors, background_image_url, typography
    settings: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON))

    created_by: Optional[UUID] = Field(default=None, foreign_key="users.id")

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    updated_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
