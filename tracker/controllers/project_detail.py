"""
Project detail page: live milestones with per-milestone task progress.
"""

from typing import Optional
from uuid import UUID

from tracker.controllers.base import Confirm, PageController
from tracker.interfaces.milestone_repository import IMilestoneRepository
from tracker.interfaces.task_repository import ITaskRepository
from tracker.models.milestone import Milestone, MilestoneCreate, MilestoneUpdate
from tracker.models.summary import MilestoneWithProgress
from tracker.models.task import Task
from tracker.services.aggregation import milestones_with_progress
from tracker.services.cascade_service import CascadeDeletionService
from tracker.services.session import SessionContext

DELETE_MILESTONE_PROMPT = "Delete this milestone and all tasks inside it?"


class ProjectDetailController(PageController):
    def __init__(
        self,
        session: SessionContext,
        confirm: Confirm,
        milestone_repo: IMilestoneRepository,
        task_repo: ITaskRepository,
        cascade: CascadeDeletionService,
        project_id: UUID,
        user_timezone: str = "UTC",
    ):
        super().__init__(session, confirm, user_timezone)
        self.milestone_repo = milestone_repo
        self.task_repo = task_repo
        self.cascade = cascade
        self.project_id = project_id
        self.milestones: list[Milestone] = []
        self.tasks: list[Task] = []
        self.cards: list[MilestoneWithProgress] = []

    async def _load(self, generation: int) -> None:
        async def on_milestones(snapshot: list[Milestone]) -> None:
            if self._is_current(generation):
                self.milestones = snapshot
                self._derive()

        async def on_tasks(snapshot: list[Task]) -> None:
            if self._is_current(generation):
                self.tasks = snapshot
                self._derive()

        project_id = self.project_id
        self._keep(generation, await self.milestone_repo.watch_by_project(project_id, on_milestones))
        self._keep(generation, await self.task_repo.watch_by_project(project_id, on_tasks))

    def _derive(self) -> None:
        self.cards = milestones_with_progress(self.milestones, self.tasks, self.user_timezone)

    def _reset(self) -> None:
        self.milestones = []
        self.tasks = []
        self.cards = []

    async def change_project(self, project_id: UUID) -> None:
        """Switch scope; the previous project's listeners are released."""
        if project_id == self.project_id:
            return
        self.project_id = project_id
        self.cancel_edit()
        self._reset()
        if self.is_mounted:
            await self.refresh()

    async def create_milestone(
        self,
        name: str,
        description: Optional[str] = None,
        due_date: Optional[int] = None,
    ) -> bool:
        if not name.strip():
            return False
        project_id = self.project_id

        async def create() -> Milestone:
            payload = MilestoneCreate(
                project_id=project_id,
                name=name.strip(),
                description=(description or "").strip() or None,
                due_date=due_date,
            )
            return await self.milestone_repo.create(payload)

        return await self.run_mutation("create", create)

    async def save_edit(self, update: MilestoneUpdate) -> bool:
        if self.editing_id is None:
            return False
        milestone_id = self.editing_id
        saved = await self.run_mutation(
            f"update:{milestone_id}",
            lambda: self.milestone_repo.update(milestone_id, update),
        )
        if saved:
            self.cancel_edit()
        return saved

    async def delete_milestone(self, milestone_id: UUID) -> bool:
        deleted = await self.confirm_and_delete(
            DELETE_MILESTONE_PROMPT,
            f"delete:{milestone_id}",
            lambda: self.cascade.delete_milestone_cascade(milestone_id),
        )
        if deleted and self.editing_id == milestone_id:
            self.cancel_edit()
        return deleted
