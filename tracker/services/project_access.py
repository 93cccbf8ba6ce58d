"""
Project access rules.

A project, its milestones and its tasks are controlled by the project
owner. A task's assignee may also read and update that task.
"""

from __future__ import annotations

from uuid import UUID

from tracker.core.exceptions import ForbiddenError, NotFoundError
from tracker.interfaces.milestone_repository import IMilestoneRepository
from tracker.interfaces.project_repository import IProjectRepository
from tracker.interfaces.task_repository import ITaskRepository
from tracker.models.milestone import Milestone
from tracker.models.project import Project
from tracker.models.task import Task


def ensure_project_owner(user_id: str, project: Project) -> Project:
    if project.owner_id != user_id:
        raise ForbiddenError(f"Not allowed to access project {project.id}")
    return project


async def get_owned_project(
    user_id: str,
    project_id: UUID,
    project_repo: IProjectRepository,
) -> Project:
    """Load a project the user owns."""
    project = await project_repo.get_by_id(project_id)
    if not project:
        raise NotFoundError(f"Project {project_id} not found")
    return ensure_project_owner(user_id, project)


async def get_owned_milestone(
    user_id: str,
    milestone_id: UUID,
    milestone_repo: IMilestoneRepository,
    project_repo: IProjectRepository,
) -> Milestone:
    """Load a milestone whose project the user owns."""
    milestone = await milestone_repo.get_by_id(milestone_id)
    if not milestone:
        raise NotFoundError(f"Milestone {milestone_id} not found")
    await get_owned_project(user_id, milestone.project_id, project_repo)
    return milestone


async def get_accessible_task(
    user_id: str,
    task_id: UUID,
    task_repo: ITaskRepository,
    project_repo: IProjectRepository,
) -> Task:
    """Load a task the user owns (via its project) or is assigned to."""
    task = await task_repo.get_by_id(task_id)
    if not task:
        raise NotFoundError(f"Task {task_id} not found")
    if task.assignee_id == user_id:
        return task
    await get_owned_project(user_id, task.project_id, project_repo)
    return task
