"""
SQLite implementation of Project repository.
"""

from __future__ import annotations

from typing import Iterable, Optional
from uuid import UUID, uuid4

from sqlalchemy import delete, select

from tracker.core.config import get_settings
from tracker.core.exceptions import NotFoundError
from tracker.infrastructure.local.database import (
    PROJECTS,
    ProjectORM,
    chunked,
    get_session_factory,
    store_session,
    unique_ids,
)
from tracker.interfaces.project_repository import IProjectRepository
from tracker.models.enums import ProjectStatus
from tracker.models.project import Project, ProjectCreate, ProjectUpdate
from tracker.services.realtime_service import (
    RealtimeManager,
    SnapshotCallback,
    Subscription,
    realtime_manager,
)
from tracker.utils.datetime_utils import now_ms

_CLEARABLE_FIELDS = {"description"}


class SqliteProjectRepository(IProjectRepository):
    """SQLite implementation of project repository."""

    def __init__(
        self,
        session_factory=None,
        realtime: RealtimeManager | None = None,
        batch_size: int | None = None,
    ):
        self._session_factory = session_factory or get_session_factory()
        self._realtime = realtime or realtime_manager
        self._batch_size = batch_size or get_settings().LOOKUP_BATCH_SIZE

    def _orm_to_model(self, orm: ProjectORM) -> Project:
        """Convert ORM object to Pydantic model."""
        return Project(
            id=UUID(orm.id),
            owner_id=orm.owner_id,
            name=orm.name,
            description=orm.description,
            status=ProjectStatus(orm.status),
            created_at=orm.created_at,
            updated_at=orm.updated_at,
        )

    async def create(self, owner_id: str, project: ProjectCreate) -> Project:
        """Create a new project."""
        timestamp = now_ms()
        async with store_session(self._session_factory) as session:
            orm = ProjectORM(
                id=str(uuid4()),
                owner_id=owner_id,
                name=project.name,
                description=project.description,
                status=ProjectStatus.ACTIVE.value,
                created_at=timestamp,
                updated_at=timestamp,
            )
            session.add(orm)
            await session.commit()
            await session.refresh(orm)
            created = self._orm_to_model(orm)
        await self._realtime.notify(PROJECTS)
        return created

    async def get_by_id(self, project_id: UUID) -> Optional[Project]:
        """Get a project by ID."""
        async with store_session(self._session_factory) as session:
            result = await session.execute(
                select(ProjectORM).where(ProjectORM.id == str(project_id))
            )
            orm = result.scalar_one_or_none()
            return self._orm_to_model(orm) if orm else None

    async def get_by_ids(self, project_ids: Iterable[UUID]) -> dict[UUID, Project]:
        """Get projects by IDs in store-sized batches."""
        found: dict[UUID, Project] = {}
        ids = unique_ids(project_ids)
        if not ids:
            return found
        async with store_session(self._session_factory) as session:
            for batch in chunked(ids, self._batch_size):
                result = await session.execute(
                    select(ProjectORM).where(ProjectORM.id.in_(batch))
                )
                for orm in result.scalars().all():
                    project = self._orm_to_model(orm)
                    found[project.id] = project
        return found

    async def list_by_owner(self, owner_id: str) -> list[Project]:
        """List projects owned by a user, newest first."""
        async with store_session(self._session_factory) as session:
            result = await session.execute(
                select(ProjectORM)
                .where(ProjectORM.owner_id == owner_id)
                .order_by(ProjectORM.created_at.desc())
            )
            return [self._orm_to_model(orm) for orm in result.scalars().all()]

    async def update(self, project_id: UUID, update: ProjectUpdate) -> Project:
        """Update a project and stamp updated_at."""
        async with store_session(self._session_factory) as session:
            result = await session.execute(
                select(ProjectORM).where(ProjectORM.id == str(project_id))
            )
            orm = result.scalar_one_or_none()
            if not orm:
                raise NotFoundError(f"Project {project_id} not found")

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
        await self._realtime.notify(PROJECTS)
        return updated

    async def delete(self, project_id: UUID) -> bool:
        """Delete a project. Deleting an absent project is a no-op."""
        async with store_session(self._session_factory) as session:
            result = await session.execute(
                delete(ProjectORM).where(ProjectORM.id == str(project_id))
            )
            await session.commit()
            deleted = result.rowcount > 0
        if deleted:
            await self._realtime.notify(PROJECTS)
        return deleted

    async def watch_by_owner(self, owner_id: str, on_snapshot: SnapshotCallback) -> Subscription:
        """Subscribe to the owner's project list."""
        return await self._realtime.subscribe(
            PROJECTS,
            lambda: self.list_by_owner(owner_id),
            on_snapshot,
        )
