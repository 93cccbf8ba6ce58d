"""
Milestone repository interface.

Defines the contract for milestone data operations.
"""

from abc import ABC, abstractmethod
from typing import Iterable, Optional
from uuid import UUID

from tracker.models.milestone import Milestone, MilestoneCreate, MilestoneUpdate
from tracker.services.realtime_service import SnapshotCallback, Subscription


class IMilestoneRepository(ABC):
    """Interface for milestone repository operations."""

    @abstractmethod
    async def create(self, milestone: MilestoneCreate) -> Milestone:
        """Create a new milestone at the end of its project's order."""
        pass

    @abstractmethod
    async def get_by_id(self, milestone_id: UUID) -> Optional[Milestone]:
        """Get a milestone by ID."""
        pass

    @abstractmethod
    async def get_by_ids(self, milestone_ids: Iterable[UUID]) -> dict[UUID, Milestone]:
        """Get milestones by a set of IDs, omitting IDs without a record."""
        pass

    @abstractmethod
    async def list_by_project(self, project_id: UUID) -> list[Milestone]:
        """List milestones for a project ordered by order_index."""
        pass

    @abstractmethod
    async def update(self, milestone_id: UUID, update: MilestoneUpdate) -> Milestone:
        """Update a milestone. Raises NotFoundError if it does not exist."""
        pass

    @abstractmethod
    async def delete(self, milestone_id: UUID) -> bool:
        """Delete a milestone. Returns False if it was already absent."""
        pass

    @abstractmethod
    async def watch_by_project(self, project_id: UUID, on_snapshot: SnapshotCallback) -> Subscription:
        """Subscribe to a project's milestones."""
        pass
