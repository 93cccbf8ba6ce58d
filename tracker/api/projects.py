"""
Project API endpoints.

Provides CRUD operations for projects, project summaries, and cascading
project deletion.
"""

import asyncio
from uuid import UUID

from fastapi import APIRouter, status

from tracker.api.deps import CascadeService, CurrentUser, MilestoneRepo, ProjectRepo, TaskRepo, UserTimezone
from tracker.api.permissions import require_project_owner
from tracker.models.project import Project, ProjectCreate, ProjectUpdate
from tracker.models.summary import CascadeResult, ProjectSummary, ProjectWithSummary
from tracker.services.aggregation import optional_due_label, project_summary

router = APIRouter()


async def _summarize(
    project_id: UUID,
    milestone_repo: MilestoneRepo,
    task_repo: TaskRepo,
) -> ProjectSummary:
    milestones, tasks = await asyncio.gather(
        milestone_repo.list_by_project(project_id),
        task_repo.list_by_project(project_id),
    )
    return project_summary(milestones, tasks)


@router.post("", response_model=Project, status_code=status.HTTP_201_CREATED)
async def create_project(
    project: ProjectCreate,
    user: CurrentUser,
    repo: ProjectRepo,
) -> Project:
    """Create a new project owned by the current user."""
    return await repo.create(user.id, project)


@router.get("", response_model=list[Project])
async def list_projects(
    user: CurrentUser,
    repo: ProjectRepo,
) -> list[Project]:
    """List the current user's projects, newest first."""
    return await repo.list_by_owner(user.id)


@router.get("/summaries", response_model=list[ProjectWithSummary])
async def list_project_summaries(
    user: CurrentUser,
    repo: ProjectRepo,
    milestone_repo: MilestoneRepo,
    task_repo: TaskRepo,
    user_timezone: UserTimezone,
) -> list[ProjectWithSummary]:
    """List projects with milestone/task counts and next due date."""
    projects = await repo.list_by_owner(user.id)
    summaries = await asyncio.gather(
        *(_summarize(project.id, milestone_repo, task_repo) for project in projects)
    )
    return [
        ProjectWithSummary(
            project=project,
            summary=summary,
            next_due_label=optional_due_label(summary.next_due, user_timezone),
        )
        for project, summary in zip(projects, summaries)
    ]


@router.get("/{project_id}", response_model=Project)
async def get_project(
    project_id: UUID,
    user: CurrentUser,
    repo: ProjectRepo,
) -> Project:
    """Get a project by ID."""
    return await require_project_owner(user, project_id, repo)


@router.get("/{project_id}/summary", response_model=ProjectSummary)
async def get_project_summary(
    project_id: UUID,
    user: CurrentUser,
    repo: ProjectRepo,
    milestone_repo: MilestoneRepo,
    task_repo: TaskRepo,
) -> ProjectSummary:
    """Get milestone/task counts for a project."""
    await require_project_owner(user, project_id, repo)
    return await _summarize(project_id, milestone_repo, task_repo)


@router.patch("/{project_id}", response_model=Project)
async def update_project(
    project_id: UUID,
    update: ProjectUpdate,
    user: CurrentUser,
    repo: ProjectRepo,
) -> Project:
    """Update a project's name, description or status."""
    await require_project_owner(user, project_id, repo)
    return await repo.update(project_id, update)


@router.delete("/{project_id}", response_model=CascadeResult)
async def delete_project(
    project_id: UUID,
    user: CurrentUser,
    repo: ProjectRepo,
    cascade: CascadeService,
) -> CascadeResult:
    """Delete a project together with its milestones and tasks. A missing project is a no-op."""
    if await repo.get_by_id(project_id) is None:
        return CascadeResult(project_id=project_id)
    await require_project_owner(user, project_id, repo)
    return await cascade.delete_project_cascade(project_id)
