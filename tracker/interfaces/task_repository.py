"""
Task repository interface.

Defines the contract for task data operations.
"""

from abc import ABC, abstractmethod
from typing import Iterable, Optional
from uuid import UUID

from tracker.models.task import Task, TaskCreate, TaskUpdate
from tracker.services.realtime_service import SnapshotCallback, Subscription


class ITaskRepository(ABC):
    """Interface for task repository operations."""

    @abstractmethod
    async def create(self, task: TaskCreate) -> Task:
        """Create a new task in the BACKLOG column."""
        pass

    @abstractmethod
    async def get_by_id(self, task_id: UUID) -> Optional[Task]:
        """Get a task by ID."""
        pass

    @abstractmethod
    async def get_by_ids(self, task_ids: Iterable[UUID]) -> dict[UUID, Task]:
        """Get tasks by a set of IDs, omitting IDs without a record."""
        pass

    @abstractmethod
    async def list_by_project(self, project_id: UUID) -> list[Task]:
        """List all tasks in a project."""
        pass

    @abstractmethod
    async def list_by_milestone(self, milestone_id: UUID) -> list[Task]:
        """List tasks in a milestone."""
        pass

    @abstractmethod
    async def list_by_assignee(self, assignee_id: str) -> list[Task]:
        """List tasks assigned to a user across projects."""
        pass

    @abstractmethod
    async def update(self, task_id: UUID, update: TaskUpdate) -> Task:
        """Update a task. Raises NotFoundError if it does not exist."""
        pass

    @abstractmethod
    async def delete(self, task_id: UUID) -> bool:
        """Delete a task. Returns False if it was already absent."""
        pass

    @abstractmethod
    async def watch_by_project(self, project_id: UUID, on_snapshot: SnapshotCallback) -> Subscription:
        """Subscribe to all tasks in a project."""
        pass

    @abstractmethod
    async def watch_by_milestone(self, milestone_id: UUID, on_snapshot: SnapshotCallback) -> Subscription:
        """Subscribe to the tasks of a milestone."""
        pass

    @abstractmethod
    async def watch_by_assignee(self, assignee_id: str, on_snapshot: SnapshotCallback) -> Subscription:
        """Subscribe to the tasks assigned to a user."""
        pass
