"""
Profile Entity

Per-user display data plus the organization the user last worked in.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, SQLModel

from kairos.domain.base import utcnow


class Profile(SQLModel, table=True):
    """
    Profile entity.

    Business Rules:
    - One profile per user
    - organization_id is stamped on create/join/switch and scopes which
      membership counts as the active one
    """

    __tablename__ = "profiles"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    user_id: UUID = Field(foreign_key="users.id", unique=True, index=True)
    display_name: Optional[str] = Field(default=None, max_length=255)
    organization_id: Optional[UUID] = Field(default=None, foreign_key="organizations.id")

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    updated_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
