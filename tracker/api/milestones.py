"""
Milestone API endpoints.

Provides CRUD operations for milestones, progress views, and cascading
milestone deletion.
"""

from uuid import UUID

from fastapi import APIRouter, Query, status

from tracker.api.deps import CascadeService, CurrentUser, MilestoneRepo, ProjectRepo, TaskRepo, UserTimezone
from tracker.api.permissions import require_milestone_owner, require_project_owner
from tracker.models.milestone import Milestone, MilestoneCreate, MilestoneUpdate
from tracker.models.summary import CascadeResult, MilestoneProgress, MilestoneWithProgress
from tracker.services.aggregation import milestone_progress, milestones_with_progress

router = APIRouter()


@router.post("", response_model=Milestone, status_code=status.HTTP_201_CREATED)
async def create_milestone(
    milestone: MilestoneCreate,
    user: CurrentUser,
    repo: MilestoneRepo,
    project_repo: ProjectRepo,
) -> Milestone:
    """Create a new milestone at the end of the project's order."""
    await require_project_owner(user, milestone.project_id, project_repo)
    return await repo.create(milestone)


@router.get("", response_model=list[Milestone])
async def list_milestones(
    user: CurrentUser,
    repo: MilestoneRepo,
    project_repo: ProjectRepo,
    project_id: UUID = Query(..., description="Filter milestones by project ID"),
) -> list[Milestone]:
    """List milestones for a project ordered by order_index."""
    await require_project_owner(user, project_id, project_repo)
    return await repo.list_by_project(project_id)


@router.get("/project/{project_id}/progress", response_model=list[MilestoneWithProgress])
async def list_milestone_progress(
    project_id: UUID,
    user: CurrentUser,
    repo: MilestoneRepo,
    project_repo: ProjectRepo,
    task_repo: TaskRepo,
    user_timezone: UserTimezone,
) -> list[MilestoneWithProgress]:
    """Milestones of a project with task completion and due labels."""
    await require_project_owner(user, project_id, project_repo)
    milestones = await repo.list_by_project(project_id)
    tasks = await task_repo.list_by_project(project_id)
    return milestones_with_progress(milestones, tasks, user_timezone)


@router.get("/{milestone_id}", response_model=Milestone)
async def get_milestone(
    milestone_id: UUID,
    user: CurrentUser,
    repo: MilestoneRepo,
    project_repo: ProjectRepo,
) -> Milestone:
    """Get a milestone by ID."""
    return await require_milestone_owner(user, milestone_id, repo, project_repo)


@router.get("/{milestone_id}/progress", response_model=MilestoneProgress)
async def get_milestone_progress(
    milestone_id: UUID,
    user: CurrentUser,
    repo: MilestoneRepo,
    project_repo: ProjectRepo,
    task_repo: TaskRepo,
) -> MilestoneProgress:
    """Task completion for one milestone."""
    await require_milestone_owner(user, milestone_id, repo, project_repo)
    return milestone_progress(await task_repo.list_by_milestone(milestone_id))


@router.patch("/{milestone_id}", response_model=Milestone)
async def update_milestone(
    milestone_id: UUID,
    milestone: MilestoneUpdate,
    user: CurrentUser,
    repo: MilestoneRepo,
    project_repo: ProjectRepo,
) -> Milestone:
    """Update a milestone."""
    await require_milestone_owner(user, milestone_id, repo, project_repo)
    return await repo.update(milestone_id, milestone)


@router.delete("/{milestone_id}", response_model=CascadeResult)
async def delete_milestone(
    milestone_id: UUID,
    user: CurrentUser,
    repo: MilestoneRepo,
    project_repo: ProjectRepo,
    cascade: CascadeService,
) -> CascadeResult:
    """Delete a milestone and its tasks. A missing milestone is a no-op."""
    if await repo.get_by_id(milestone_id) is None:
        return CascadeResult(milestone_id=milestone_id)
    await require_milestone_owner(user, milestone_id, repo, project_repo)
    return await cascade.delete_milestone_cascade(milestone_id)
