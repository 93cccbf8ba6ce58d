"""
"My tasks" view.

Lists tasks assigned to a user across projects and resolves the project
and milestone names shown on each card. Name lookups are auxiliary: a
failed lookup falls back to a generic label instead of failing the view.
"""

from datetime import datetime
from typing import Optional, Sequence
from uuid import UUID

from tracker.core.exceptions import TrackerError
from tracker.core.logger import setup_logger
from tracker.interfaces.milestone_repository import IMilestoneRepository
from tracker.interfaces.project_repository import IProjectRepository
from tracker.interfaces.task_repository import ITaskRepository
from tracker.models.summary import TaskBoard, TaskCard
from tracker.models.task import Task
from tracker.services.aggregation import group_by_status, optional_due_label

logger = setup_logger(__name__)

PROJECT_PLACEHOLDER = "Project"
MILESTONE_PLACEHOLDER = "Milestone"


class MyTasksService:
    """Builds the personal task board."""

    def __init__(
        self,
        task_repo: ITaskRepository,
        project_repo: IProjectRepository,
        milestone_repo: IMilestoneRepository,
    ):
        self.task_repo = task_repo
        self.project_repo = project_repo
        self.milestone_repo = milestone_repo

    async def load(
        self,
        user_id: str,
        user_timezone: str = "UTC",
        now: Optional[datetime] = None,
    ) -> TaskBoard:
        """Fetch the user's tasks and build the board."""
        tasks = await self.task_repo.list_by_assignee(user_id)
        return await self.build_view(tasks, user_timezone, now)

    async def build_view(
        self,
        tasks: Sequence[Task],
        user_timezone: str = "UTC",
        now: Optional[datetime] = None,
    ) -> TaskBoard:
        """Enrich an already-fetched task list into a status board."""
        project_names = await self._resolve_project_names({t.project_id for t in tasks})
        milestone_names = await self._resolve_milestone_names({t.milestone_id for t in tasks})

        columns = {
            status: [
                TaskCard(
                    task=task,
                    project_name=project_names.get(task.project_id, PROJECT_PLACEHOLDER),
                    milestone_name=milestone_names.get(task.milestone_id, MILESTONE_PLACEHOLDER),
                    due_label=optional_due_label(task.due_date, user_timezone, now),
                )
                for task in bucket
            ]
            for status, bucket in group_by_status(tasks).items()
        }
        return TaskBoard(columns=columns)

    async def _resolve_project_names(self, project_ids: set[UUID]) -> dict[UUID, str]:
        if not project_ids:
            return {}
        try:
            projects = await self.project_repo.get_by_ids(project_ids)
        except TrackerError as exc:
            logger.warning("Could not load some projects: %s", exc.message)
            return {}
        return {project_id: project.name for project_id, project in projects.items()}

    async def _resolve_milestone_names(self, milestone_ids: set[UUID]) -> dict[UUID, str]:
        if not milestone_ids:
            return {}
        try:
            milestones = await self.milestone_repo.get_by_ids(milestone_ids)
        except TrackerError as exc:
            logger.warning("Could not load some milestones: %s", exc.message)
            return {}
        return {milestone_id: milestone.name for milestone_id, milestone in milestones.items()}
