"""
Project list page.

Fetches the signed-in user's projects once, then a summary per project.
Mutations re-fetch the list explicitly.
"""

import asyncio
from typing import Optional
from uuid import UUID

from tracker.controllers.base import Confirm, PageController
from tracker.interfaces.milestone_repository import IMilestoneRepository
from tracker.interfaces.project_repository import IProjectRepository
from tracker.interfaces.task_repository import ITaskRepository
from tracker.models.project import Project, ProjectCreate, ProjectUpdate
from tracker.models.summary import ProjectSummary, ProjectWithSummary
from tracker.services.aggregation import optional_due_label, project_summary
from tracker.services.cascade_service import CascadeDeletionService
from tracker.services.session import SessionContext

DELETE_PROJECT_PROMPT = "Delete this project, its milestones, and all tasks? This cannot be undone."


class ProjectListController(PageController):
    def __init__(
        self,
        session: SessionContext,
        confirm: Confirm,
        project_repo: IProjectRepository,
        milestone_repo: IMilestoneRepository,
        task_repo: ITaskRepository,
        cascade: CascadeDeletionService,
        user_timezone: str = "UTC",
    ):
        super().__init__(session, confirm, user_timezone)
        self.project_repo = project_repo
        self.milestone_repo = milestone_repo
        self.task_repo = task_repo
        self.cascade = cascade
        self.projects: list[Project] = []
        self.summaries: dict[UUID, ProjectSummary] = {}

    @property
    def cards(self) -> list[ProjectWithSummary]:
        cards = []
        for project in self.projects:
            summary = self.summaries.get(project.id, ProjectSummary())
            cards.append(
                ProjectWithSummary(
                    project=project,
                    summary=summary,
                    next_due_label=optional_due_label(summary.next_due, self.user_timezone),
                )
            )
        return cards

    async def _load(self, generation: int) -> None:
        projects = await self.project_repo.list_by_owner(self.session.user_id)
        summaries = await asyncio.gather(*(self._summarize(project.id) for project in projects))
        if self._is_current(generation):
            self.projects = projects
            self.summaries = {project.id: summary for project, summary in zip(projects, summaries)}

    async def _summarize(self, project_id: UUID) -> ProjectSummary:
        milestones, tasks = await asyncio.gather(
            self.milestone_repo.list_by_project(project_id),
            self.task_repo.list_by_project(project_id),
        )
        return project_summary(milestones, tasks)

    def _reset(self) -> None:
        self.projects = []
        self.summaries = {}

    async def create_project(self, name: str, description: Optional[str] = None) -> bool:
        if not name.strip() or not self.session.is_active:
            return False
        owner_id = self.session.user_id

        async def create() -> Project:
            payload = ProjectCreate(name=name.strip(), description=(description or "").strip() or None)
            return await self.project_repo.create(owner_id, payload)

        created = await self.run_mutation("create", create)
        if created:
            await self.refresh()
        return created

    async def save_edit(self, update: ProjectUpdate) -> bool:
        if self.editing_id is None:
            return False
        project_id = self.editing_id
        saved = await self.run_mutation(
            f"update:{project_id}",
            lambda: self.project_repo.update(project_id, update),
        )
        if saved:
            self.cancel_edit()
            await self.refresh()
        return saved

    async def delete_project(self, project_id: UUID) -> bool:
        deleted = await self.confirm_and_delete(
            DELETE_PROJECT_PROMPT,
            f"delete:{project_id}",
            lambda: self.cascade.delete_project_cascade(project_id),
        )
        if deleted:
            if self.editing_id == project_id:
                self.cancel_edit()
            await self.refresh()
        return deleted
