from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from kairos.domain.entities import Profile


class IProfileRepository(ABC):
    """Profile repository interface - application layer"""

    @abstractmethod
    async def get_by_user_id(self, user_id: UUID) -> Optional[Profile]:
        """Get profile by user ID"""
        pass

    @abstractmethod
    async def create(self, profile: Profile) -> Profile:
        """Create a new profile"""
        pass

    @abstractmethod
    async def update(self, profile: Profile) -> Profile:
        """Update existing profile"""
        pass
