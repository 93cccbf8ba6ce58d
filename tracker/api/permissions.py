from __future__ import annotations

from uuid import UUID

from fastapi import HTTPException, status

from tracker.core.exceptions import ForbiddenError, NotFoundError
from tracker.api.deps import CurrentUser, MilestoneRepo, ProjectRepo, TaskRepo
from tracker.models.milestone import Milestone
from tracker.models.project import Project
from tracker.models.task import Task
from tracker.services.project_access import (
    get_accessible_task,
    get_owned_milestone,
    get_owned_project,
)


def _to_http(exc: Exception) -> HTTPException:
    if isinstance(exc, NotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc))


async def require_project_owner(
    user: CurrentUser,
    project_id: UUID,
    project_repo: ProjectRepo,
) -> Project:
    try:
        return await get_owned_project(user.id, project_id, project_repo)
    except (NotFoundError, ForbiddenError) as exc:
        raise _to_http(exc) from exc


async def require_milestone_owner(
    user: CurrentUser,
    milestone_id: UUID,
    milestone_repo: MilestoneRepo,
    project_repo: ProjectRepo,
) -> Milestone:
    try:
        return await get_owned_milestone(user.id, milestone_id, milestone_repo, project_repo)
    except (NotFoundError, ForbiddenError) as exc:
        raise _to_http(exc) from exc


async def require_task_access(
    user: CurrentUser,
    task_id: UUID,
    task_repo: TaskRepo,
    project_repo: ProjectRepo,
) -> Task:
    try:
        return await get_accessible_task(user.id, task_id, task_repo, project_repo)
    except (NotFoundError, ForbiddenError) as exc:
        raise _to_http(exc) from exc
