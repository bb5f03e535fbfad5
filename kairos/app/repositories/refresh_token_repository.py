from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from kairos.domain.entities import RefreshToken


class IRefreshTokenRepository(ABC):
    """Refresh token repository interface - application layer"""

    @abstractmethod
    async def get_by_id(self, token_id: UUID) -> Optional[RefreshToken]:
        """Get refresh token row by ID"""
        pass

    @abstractmethod
    async def create(self, token: RefreshToken) -> RefreshToken:
        """Create a new refresh token row"""
        pass

    @abstractmethod
    async def update(self, token: RefreshToken) -> RefreshToken:
        """Update existing refresh token row"""
        pass

    @abstractmethod
    async def revoke_all_by_user_id(self, user_id: UUID) -> int:
        """Revoke all refresh tokens for a user. Returns count revoked."""
        pass

    @abstractmethod
    async def revoke_all_except(self, user_id: UUID, token_id: UUID) -> int:
        """Revoke all of a user's refresh tokens except one. Returns count."""
        pass

    @abstractmethod
    async def revoke_by_id(self, token_id: UUID) -> bool:
        """Revoke one refresh token. Returns True if it existed."""
        pass
