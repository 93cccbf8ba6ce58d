"""
Cascading deletes.

The store has no foreign keys, so removing a project or milestone means
removing its descendants first: tasks, then milestones, then the parent.
Siblings inside a stage are deleted concurrently and the stage completes
before the next one starts.

There is no rollback. A reader can observe a partially deleted tree while
a cascade runs, and a failed cascade leaves whatever was not yet deleted;
running the same cascade again removes the rest.
"""

import asyncio
from typing import Awaitable, Callable, Sequence
from uuid import UUID

from tracker.core.exceptions import CascadeDeleteError
from tracker.core.logger import setup_logger
from tracker.interfaces.milestone_repository import IMilestoneRepository
from tracker.interfaces.project_repository import IProjectRepository
from tracker.interfaces.task_repository import ITaskRepository
from tracker.models.summary import CascadeResult

logger = setup_logger(__name__)


class CascadeDeletionService:
    """Coordinates multi-stage deletes across repositories."""

    def __init__(
        self,
        project_repo: IProjectRepository,
        milestone_repo: IMilestoneRepository,
        task_repo: ITaskRepository,
    ):
        self.project_repo = project_repo
        self.milestone_repo = milestone_repo
        self.task_repo = task_repo

    async def delete_project_cascade(self, project_id: UUID) -> CascadeResult:
        """Delete a project's tasks, then its milestones, then the project."""
        tasks = await self.task_repo.list_by_project(project_id)
        tasks_deleted = await self._delete_all(
            "tasks", [task.id for task in tasks], self.task_repo.delete
        )

        milestones = await self.milestone_repo.list_by_project(project_id)
        milestones_deleted = await self._delete_all(
            "milestones", [milestone.id for milestone in milestones], self.milestone_repo.delete
        )

        project_deleted = await self.project_repo.delete(project_id)
        logger.info(
            "Deleted project %s (%d milestones, %d tasks)",
            project_id,
            milestones_deleted,
            tasks_deleted,
        )
        return CascadeResult(
            project_id=project_id,
            tasks_deleted=tasks_deleted,
            milestones_deleted=milestones_deleted,
            project_deleted=project_deleted,
        )

    async def delete_milestone_cascade(self, milestone_id: UUID) -> CascadeResult:
        """Delete a milestone's tasks, then the milestone."""
        tasks = await self.task_repo.list_by_milestone(milestone_id)
        tasks_deleted = await self._delete_all(
            "tasks", [task.id for task in tasks], self.task_repo.delete
        )

        milestone_deleted = await self.milestone_repo.delete(milestone_id)
        logger.info("Deleted milestone %s (%d tasks)", milestone_id, tasks_deleted)
        return CascadeResult(
            milestone_id=milestone_id,
            tasks_deleted=tasks_deleted,
            milestone_deleted=milestone_deleted,
        )

    async def delete_task(self, task_id: UUID) -> bool:
        """Delete a single task (no descendants)."""
        return await self.task_repo.delete(task_id)

    async def _delete_all(
        self,
        stage: str,
        ids: Sequence[UUID],
        delete: Callable[[UUID], Awaitable[bool]],
    ) -> int:
        """Delete ids concurrently and wait for all of them.

        Returns the number of documents actually removed. Raises
        CascadeDeleteError after every delete has settled if any failed.
        """
        if not ids:
            return 0
        results = await asyncio.gather(*(delete(doc_id) for doc_id in ids), return_exceptions=True)

        failed: list[str] = []
        removed = 0
        for doc_id, result in zip(ids, results):
            if isinstance(result, Exception):
                logger.error("Failed to delete %s %s: %s", stage, doc_id, result)
                failed.append(str(doc_id))
            elif result:
                removed += 1

        if failed:
            raise CascadeDeleteError(
                f"Failed to delete {len(failed)} of {len(ids)} {stage}",
                failed_ids=failed,
                stage=stage,
            )
        return removed
