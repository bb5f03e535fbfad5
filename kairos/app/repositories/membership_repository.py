from abc import ABC, abstractmethod
from typing import List, Optional
from uuid import UUID

from kairos.domain.entities import OrganizationMembership


class IMembershipRepository(ABC):
    """Organization membership repository interface - application layer"""

    @abstractmethod
    async def get_by_user_and_organization(
        self, user_id: UUID, organization_id: UUID
    ) -> Optional[OrganizationMembership]:
        """Get membership by user and organization, active or not"""
        pass

    @abstractmethod
    async def get_active_by_user_id(self, user_id: UUID) -> List[OrganizationMembership]:
        """Get all active memberships for a user, most recently joined first"""
        pass

    @abstractmethod
    async def create(self, membership: OrganizationMembership) -> OrganizationMembership:
        """Create a new membership"""
        pass

    @abstractmethod
    async def update(self, membership: OrganizationMembership) -> OrganizationMembership:
        """Update existing membership"""
        pass
