"""
SQLite implementation of Milestone repository.
"""

from __future__ import annotations

from typing import Iterable, Optional
from uuid import UUID, uuid4

from sqlalchemy import delete, func, select

from tracker.core.config import get_settings
from tracker.core.exceptions import NotFoundError
from tracker.infrastructure.local.database import (
    MILESTONES,
    MilestoneORM,
    chunked,
    get_session_factory,
    store_session,
    unique_ids,
)
from tracker.interfaces.milestone_repository import IMilestoneRepository
from tracker.models.enums import MilestoneStatus
from tracker.models.milestone import Milestone, MilestoneCreate, MilestoneUpdate
from tracker.services.realtime_service import (
    RealtimeManager,
    SnapshotCallback,
    Subscription,
    realtime_manager,
)
from tracker.utils.datetime_utils import now_ms

_CLEARABLE_FIELDS = {"description", "due_date"}


class SqliteMilestoneRepository(IMilestoneRepository):
    """SQLite implementation of milestone repository."""

    def __init__(
        self,
        session_factory=None,
        realtime: RealtimeManager | None = None,
        batch_size: int | None = None,
    ):
        """
        Initialize repository.

        Args:
            session_factory: Optional session factory (for testing)
            realtime: Live query manager notified after mutations
            batch_size: IDs per lookup query, defaults to LOOKUP_BATCH_SIZE
        """
        self._session_factory = session_factory or get_session_factory()
        self._realtime = realtime or realtime_manager
        self._batch_size = batch_size or get_settings().LOOKUP_BATCH_SIZE

    def _orm_to_model(self, orm: MilestoneORM) -> Milestone:
        """Convert ORM object to Pydantic model."""
        return Milestone(
            id=UUID(orm.id),
            project_id=UUID(orm.project_id),
            name=orm.name,
            description=orm.description,
            status=MilestoneStatus(orm.status),
            order_index=orm.order_index,
            due_date=orm.due_date,
            created_at=orm.created_at,
            updated_at=orm.updated_at,
        )

    async def create(self, milestone: MilestoneCreate) -> Milestone:
        """Create a new milestone.

        order_index is the number of milestones already in the project. It is
        never renumbered, so deletions leave gaps.
        """
        timestamp = now_ms()
        async with store_session(self._session_factory) as session:
            count_result = await session.execute(
                select(func.count())
                .select_from(MilestoneORM)
                .where(MilestoneORM.project_id == str(milestone.project_id))
            )
            order_index = count_result.scalar_one()

            orm = MilestoneORM(
                id=str(uuid4()),
                project_id=str(milestone.project_id),
                name=milestone.name,
                description=milestone.description,
                status=MilestoneStatus.NOT_STARTED.value,
                order_index=order_index,
                due_date=milestone.due_date,
                created_at=timestamp,
                updated_at=timestamp,
            )
            session.add(orm)
            await session.commit()
            await session.refresh(orm)
            created = self._orm_to_model(orm)
        await self._realtime.notify(MILESTONES)
        return created

    async def get_by_id(self, milestone_id: UUID) -> Optional[Milestone]:
        """Get a milestone by ID."""
        async with store_session(self._session_factory) as session:
            result = await session.execute(
                select(MilestoneORM).where(MilestoneORM.id == str(milestone_id))
            )
            orm = result.scalar_one_or_none()
            return self._orm_to_model(orm) if orm else None

    async def get_by_ids(self, milestone_ids: Iterable[UUID]) -> dict[UUID, Milestone]:
        """Get milestones by IDs in store-sized batches."""
        found: dict[UUID, Milestone] = {}
        ids = unique_ids(milestone_ids)
        if not ids:
            return found
        async with store_session(self._session_factory) as session:
            for batch in chunked(ids, self._batch_size):
                result = await session.execute(
                    select(MilestoneORM).where(MilestoneORM.id.in_(batch))
                )
                for orm in result.scalars().all():
                    milestone = self._orm_to_model(orm)
                    found[milestone.id] = milestone
        return found

    async def list_by_project(self, project_id: UUID) -> list[Milestone]:
        """List milestones for a project."""
        async with store_session(self._session_factory) as session:
            result = await session.execute(
                select(MilestoneORM)
                .where(MilestoneORM.project_id == str(project_id))
                .order_by(MilestoneORM.order_index, MilestoneORM.created_at)
            )
            return [self._orm_to_model(orm) for orm in result.scalars().all()]

    async def update(self, milestone_id: UUID, update: MilestoneUpdate) -> Milestone:
        """Update a milestone and stamp updated_at."""
        async with store_session(self._session_factory) as session:
            result = await session.execute(
                select(MilestoneORM).where(MilestoneORM.id == str(milestone_id))
            )
            orm = result.scalar_one_or_none()
            if not orm:
                raise NotFoundError(f"Milestone {milestone_id} not found")

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
        await self._realtime.notify(MILESTONES)
        return updated

    async def delete(self, milestone_id: UUID) -> bool:
        """Delete a milestone. Tasks are left alone; see CascadeDeletionService."""
        async with store_session(self._session_factory) as session:
            result = await session.execute(
                delete(MilestoneORM).where(MilestoneORM.id == str(milestone_id))
            )
            await session.commit()
            deleted = result.rowcount > 0
        if deleted:
            await self._realtime.notify(MILESTONES)
        return deleted

    async def watch_by_project(self, project_id: UUID, on_snapshot: SnapshotCallback) -> Subscription:
        """Subscribe to a project's milestones."""
        return await self._realtime.subscribe(
            MILESTONES,
            lambda: self.list_by_project(project_id),
            on_snapshot,
        )
