"""
Milestone board page: live tasks of one milestone in status columns.
"""

from typing import Optional
from uuid import UUID

from tracker.controllers.base import Confirm, PageController
from tracker.interfaces.milestone_repository import IMilestoneRepository
from tracker.interfaces.task_repository import ITaskRepository
from tracker.models.enums import TaskPriority, TaskStatus
from tracker.models.milestone import Milestone
from tracker.models.summary import MilestoneProgress, TaskBoard
from tracker.models.task import Task, TaskCreate, TaskUpdate
from tracker.services.aggregation import milestone_progress, task_board
from tracker.services.my_tasks_service import MILESTONE_PLACEHOLDER
from tracker.services.session import SessionContext

DELETE_TASK_PROMPT = "Delete this task? This cannot be undone."


class MilestoneBoardController(PageController):
    def __init__(
        self,
        session: SessionContext,
        confirm: Confirm,
        milestone_repo: IMilestoneRepository,
        task_repo: ITaskRepository,
        project_id: UUID,
        milestone_id: UUID,
        user_timezone: str = "UTC",
    ):
        super().__init__(session, confirm, user_timezone)
        self.milestone_repo = milestone_repo
        self.task_repo = task_repo
        self.project_id = project_id
        self.milestone_id = milestone_id
        self.milestone: Optional[Milestone] = None
        self.tasks: list[Task] = []
        self.board: TaskBoard = task_board([])
        self.progress: MilestoneProgress = MilestoneProgress()

    @property
    def milestone_name(self) -> str:
        return self.milestone.name if self.milestone else MILESTONE_PLACEHOLDER

    async def _load(self, generation: int) -> None:
        async def on_tasks(snapshot: list[Task]) -> None:
            if self._is_current(generation):
                self.tasks = snapshot
                self.board = task_board(snapshot, self.user_timezone)
                self.progress = milestone_progress(snapshot)

        milestone = await self.milestone_repo.get_by_id(self.milestone_id)
        if not self._is_current(generation):
            return
        self.milestone = milestone
        self._keep(generation, await self.task_repo.watch_by_milestone(self.milestone_id, on_tasks))

    def _reset(self) -> None:
        self.milestone = None
        self.tasks = []
        self.board = task_board([])
        self.progress = MilestoneProgress()

    async def create_task(
        self,
        title: str,
        description: Optional[str] = None,
        priority: TaskPriority = TaskPriority.MEDIUM,
        due_date: Optional[int] = None,
        assignee_id: Optional[str] = None,
    ) -> bool:
        if not title.strip():
            return False
        async def create() -> Task:
            payload = TaskCreate(
                project_id=self.project_id,
                milestone_id=self.milestone_id,
                title=title.strip(),
                description=(description or "").strip() or None,
                priority=priority,
                due_date=due_date,
                assignee_id=assignee_id,
            )
            return await self.task_repo.create(payload)

        return await self.run_mutation("create", create)

    async def change_status(self, task_id: UUID, status: TaskStatus) -> bool:
        return await self.run_mutation(
            f"status:{task_id}",
            lambda: self.task_repo.update(task_id, TaskUpdate(status=status)),
        )

    async def save_edit(self, update: TaskUpdate) -> bool:
        if self.editing_id is None:
            return False
        task_id = self.editing_id
        saved = await self.run_mutation(
            f"update:{task_id}",
            lambda: self.task_repo.update(task_id, update),
        )
        if saved:
            self.cancel_edit()
        return saved

    async def delete_task(self, task_id: UUID) -> bool:
        deleted = await self.confirm_and_delete(
            DELETE_TASK_PROMPT,
            f"delete:{task_id}",
            lambda: self.task_repo.delete(task_id),
        )
        if deleted and self.editing_id == task_id:
            self.cancel_edit()
        return deleted
