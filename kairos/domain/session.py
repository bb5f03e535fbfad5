"""
Client-held session value objects.

The client layer treats these as opaque: it reads `user.id` and passes the
rest back to the identity provider.
"""

import time
from typing import Any, Dict, Optional
from uuid import UUID

from pydantic import BaseModel, Field


class AuthUser(BaseModel):
    """Principal as seen by the client"""

    id: UUID
    email: str
    user_metadata: Dict[str, Any] = Field(default_factory=dict)


class Session(BaseModel):
    """Opaque proof of authentication held by the client"""

    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_at: int
    user: AuthUser

    def is_expired(self, now: Optional[float] = None) -> bool:
        return (now if now is not None else time.time()) >= self.expires_at
