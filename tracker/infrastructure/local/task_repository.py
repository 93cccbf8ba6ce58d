"""
SQLite implementation of Task repository.
"""

from __future__ import annotations

from typing import Iterable, Optional
from uuid import UUID, uuid4

from sqlalchemy import delete, select

from tracker.core.config import get_settings
from tracker.core.exceptions import NotFoundError
from tracker.infrastructure.local.database import (
    TASKS,
    TaskORM,
    chunked,
    get_session_factory,
    store_session,
    unique_ids,
)
from tracker.interfaces.task_repository import ITaskRepository
from tracker.models.enums import TaskPriority, TaskStatus
from tracker.models.task import Task, TaskCreate, TaskUpdate
from tracker.services.realtime_service import (
    RealtimeManager,
    SnapshotCallback,
    Subscription,
    realtime_manager,
)
from tracker.utils.datetime_utils import now_ms

_CLEARABLE_FIELDS = {"description", "due_date", "assignee_id"}


class SqliteTaskRepository(ITaskRepository):
    """SQLite implementation of task repository."""

    def __init__(
        self,
        session_factory=None,
        realtime: RealtimeManager | None = None,
        batch_size: int | None = None,
    ):
        self._session_factory = session_factory or get_session_factory()
        self._realtime = realtime or realtime_manager
        self._batch_size = batch_size or get_settings().LOOKUP_BATCH_SIZE

    def _orm_to_model(self, orm: TaskORM) -> Task:
        """Convert ORM object to Pydantic model."""
        return Task(
            id=UUID(orm.id),
            project_id=UUID(orm.project_id),
            milestone_id=UUID(orm.milestone_id),
            title=orm.title,
            description=orm.description,
            status=TaskStatus(orm.status),
            priority=TaskPriority(orm.priority),
            assignee_id=orm.assignee_id,
            due_date=orm.due_date,
            created_at=orm.created_at,
            updated_at=orm.updated_at,
        )

    async def create(self, task: TaskCreate) -> Task:
        """Create a new task."""
        timestamp = now_ms()
        async with store_session(self._session_factory) as session:
            orm = TaskORM(
                id=str(uuid4()),
                project_id=str(task.project_id),
                milestone_id=str(task.milestone_id),
                title=task.title,
                description=task.description,
                status=TaskStatus.BACKLOG.value,
                priority=task.priority.value,
                assignee_id=task.assignee_id,
                due_date=task.due_date,
                created_at=timestamp,
                updated_at=timestamp,
            )
            session.add(orm)
            await session.commit()
            await session.refresh(orm)
            created = self._orm_to_model(orm)
        await self._realtime.notify(TASKS)
        return created

    async def get_by_id(self, task_id: UUID) -> Optional[Task]:
        """Get a task by ID."""
        async with store_session(self._session_factory) as session:
            result = await session.execute(
                select(TaskORM).where(TaskORM.id == str(task_id))
            )
            orm = result.scalar_one_or_none()
            return self._orm_to_model(orm) if orm else None

    async def get_by_ids(self, task_ids: Iterable[UUID]) -> dict[UUID, Task]:
        """Get tasks by IDs in store-sized batches."""
        found: dict[UUID, Task] = {}
        ids = unique_ids(task_ids)
        if not ids:
            return found
        async with store_session(self._session_factory) as session:
            for batch in chunked(ids, self._batch_size):
                result = await session.execute(
                    select(TaskORM).where(TaskORM.id.in_(batch))
                )
                for orm in result.scalars().all():
                    task = self._orm_to_model(orm)
                    found[task.id] = task
        return found

    async def _list_where(self, *conditions) -> list[Task]:
        async with store_session(self._session_factory) as session:
            result = await session.execute(
                select(TaskORM).where(*conditions).order_by(TaskORM.created_at)
            )
            return [self._orm_to_model(orm) for orm in result.scalars().all()]

    async def list_by_project(self, project_id: UUID) -> list[Task]:
        """List all tasks in a project."""
        return await self._list_where(TaskORM.project_id == str(project_id))

    async def list_by_milestone(self, milestone_id: UUID) -> list[Task]:
        """List tasks in a milestone."""
        return await self._list_where(TaskORM.milestone_id == str(milestone_id))

    async def list_by_assignee(self, assignee_id: str) -> list[Task]:
        """List tasks assigned to a user."""
        return await self._list_where(TaskORM.assignee_id == assignee_id)

    async def update(self, task_id: UUID, update: TaskUpdate) -> Task:
        """Update a task and stamp updated_at.

        There is no version check; the last write wins.
        """
        async with store_session(self._session_factory) as session:
            result = await session.execute(
                select(TaskORM).where(TaskORM.id == str(task_id))
            )
            orm = result.scalar_one_or_none()
            if not orm:
                raise NotFoundError(f"Task {task_id} not found")

            update_data = update.model_dump(exclude_unset=True)
            for field, value in update_data.items():
                if value is None and field not in _CLEARABLE_FIELDS:
                    continue
                if hasattr(value, "value"):
                    value = value.value
                setattr(orm, field, value)

            orm.updated_at = now_ms()
            await session.commit()
            await session.refresh(orm)
            updated = self._orm_to_model(orm)
        await self._realtime.notify(TASKS)
        return updated

    async def delete(self, task_id: UUID) -> bool:
        """Delete a task. Deleting an absent task is a no-op."""
        async with store_session(self._session_factory) as session:
            result = await session.execute(
                delete(TaskORM).where(TaskORM.id == str(task_id))
            )
            await session.commit()
            deleted = result.rowcount > 0
        if deleted:
            await self._realtime.notify(TASKS)
        return deleted

    async def watch_by_project(self, project_id: UUID, on_snapshot: SnapshotCallback) -> Subscription:
        return await self._realtime.subscribe(
            TASKS,
            lambda: self.list_by_project(project_id),
            on_snapshot,
        )

    async def watch_by_milestone(self, milestone_id: UUID, on_snapshot: SnapshotCallback) -> Subscription:
        return await self._realtime.subscribe(
            TASKS,
            lambda: self.list_by_milestone(milestone_id),
            on_snapshot,
        )

    async def watch_by_assignee(self, assignee_id: str, on_snapshot: SnapshotCallback) -> Subscription:
        return await self._realtime.subscribe(
            TASKS,
            lambda: self.list_by_assignee(assignee_id),
            on_snapshot,
        )
