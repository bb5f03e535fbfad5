"""
RefreshToken Entity

Server-side half of a client session, used to mint new access tokens.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from kairos.domain.base import utcnow


class RefreshToken(SQLModel, table=True):
    """
    RefreshToken entity - one row per signed-in client session.

    Business Rules:
    - Token is stored as a bcrypt hash
    - Tokens rotate on each refresh
    - Revoked rows block refresh
    """

    __tablename__ = "refresh_tokens"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    user_id: UUID = Field(foreign_key="users.id", nullable=False, index=True)

    token_hash: str = Field(max_length=60)
    revoked: bool = Field(default=False)
    revoked_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    expires_at: datetime = Field(sa_column=Column(DateTime))

    __table_args__ = (
        Index("idx_refresh_token_expires_at", "expires_at"),
        Index("idx_refresh_token_revoked", "revoked"),
    )
