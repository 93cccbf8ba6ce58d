"""
Project repository interface.

Defines the contract for project data operations.
"""

from abc import ABC, abstractmethod
from typing import Iterable, Optional
from uuid import UUID

from tracker.models.project import Project, ProjectCreate, ProjectUpdate
from tracker.services.realtime_service import SnapshotCallback, Subscription


class IProjectRepository(ABC):
    """Interface for project repository operations."""

    @abstractmethod
    async def create(self, owner_id: str, project: ProjectCreate) -> Project:
        """Create a new project owned by owner_id."""
        pass

    @abstractmethod
    async def get_by_id(self, project_id: UUID) -> Optional[Project]:
        """Get a project by ID."""
        pass

    @abstractmethod
    async def get_by_ids(self, project_ids: Iterable[UUID]) -> dict[UUID, Project]:
        """
        Get projects by a set of IDs.

        Lookups are split into store-sized batches; IDs without a record are
        omitted from the result.
        """
        pass

    @abstractmethod
    async def list_by_owner(self, owner_id: str) -> list[Project]:
        """List projects owned by a user, newest first."""
        pass

    @abstractmethod
    async def update(self, project_id: UUID, update: ProjectUpdate) -> Project:
        """Update a project. Raises NotFoundError if it does not exist."""
        pass

    @abstractmethod
    async def delete(self, project_id: UUID) -> bool:
        """Delete a project. Returns False if it was already absent."""
        pass

    @abstractmethod
    async def watch_by_owner(self, owner_id: str, on_snapshot: SnapshotCallback) -> Subscription:
        """Subscribe to the owner's project list."""
        pass
