"""
ModulePermission Entity

Per-organization enable flag and settings for one feature module.
"""

from datetime import datetime
from typing import Any, Dict
from uuid import UUID, uuid4

from sqlmodel import JSON, Column, DateTime, Field, Index, SQLModel

from kairos.domain.base import utcnow

from .enums import ModuleName


class ModulePermission(SQLModel, table=True):
    """
    ModulePermission entity.

    Business Rules:
    - (organization_id, module_name) must be unique
    - Seeded with defaults when the organization is created
    - Toggled by admins afterwards
    """

    __tablename__ = "module_permissions"

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    organization_id: UUID = Field(
        foreign_key="organizations.id", nullable=False, index=True
    )
    module_name: ModuleName = Field(nullable=False)
    is_enabled: bool = Field(default=True)
    settings: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON))

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    updated_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))

    __table_args__ = (
        Index(
            "idx_module_permission_org_module",
            "organization_id",
            "module_name",
            unique=True,
        ),
    )
