"""
Personal task page: live tasks assigned to the signed-in user.
"""

from uuid import UUID

from tracker.controllers.base import Confirm, PageController
from tracker.controllers.milestone_board import DELETE_TASK_PROMPT
from tracker.interfaces.task_repository import ITaskRepository
from tracker.models.enums import TaskStatus
from tracker.models.summary import TaskBoard
from tracker.models.task import Task, TaskUpdate
from tracker.services.aggregation import task_board
from tracker.services.my_tasks_service import MyTasksService
from tracker.services.session import SessionContext


class MyTasksController(PageController):
    def __init__(
        self,
        session: SessionContext,
        confirm: Confirm,
        task_repo: ITaskRepository,
        my_tasks_service: MyTasksService,
        user_timezone: str = "UTC",
    ):
        super().__init__(session, confirm, user_timezone)
        self.task_repo = task_repo
        self.my_tasks_service = my_tasks_service
        self.tasks: list[Task] = []
        self.board: TaskBoard = task_board([])

    async def _load(self, generation: int) -> None:
        async def on_tasks(snapshot: list[Task]) -> None:
            if not self._is_current(generation):
                return
            board = await self.my_tasks_service.build_view(snapshot, self.user_timezone)
            # a newer snapshot or an unmount may have landed while names resolved
            if self._is_current(generation):
                self.tasks = snapshot
                self.board = board

        self._keep(
            generation,
            await self.task_repo.watch_by_assignee(self.session.user_id, on_tasks),
        )

    def _reset(self) -> None:
        self.tasks = []
        self.board = task_board([])

    async def change_status(self, task_id: UUID, status: TaskStatus) -> bool:
        return await self.run_mutation(
            f"status:{task_id}",
            lambda: self.task_repo.update(task_id, TaskUpdate(status=status)),
        )

    async def delete_task(self, task_id: UUID) -> bool:
        return await self.confirm_and_delete(
            DELETE_TASK_PROMPT,
            f"delete:{task_id}",
            lambda: self.task_repo.delete(task_id),
        )
