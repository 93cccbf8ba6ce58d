"""
Task API endpoints.

Provides CRUD operations for tasks, the milestone board, and the personal
"my tasks" board.
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, HTTPException, Query, Response, status

from tracker.api.deps import CurrentUser, MilestoneRepo, MyTasks, ProjectRepo, TaskRepo, UserTimezone
from tracker.api.permissions import require_milestone_owner, require_project_owner, require_task_access
from tracker.models.summary import TaskBoard
from tracker.models.task import Task, TaskCreate, TaskUpdate
from tracker.services.aggregation import task_board

router = APIRouter()


@router.post("", response_model=Task, status_code=status.HTTP_201_CREATED)
async def create_task(
    task: TaskCreate,
    user: CurrentUser,
    repo: TaskRepo,
    milestone_repo: MilestoneRepo,
    project_repo: ProjectRepo,
) -> Task:
    """Create a task inside a milestone."""
    milestone = await require_milestone_owner(user, task.milestone_id, milestone_repo, project_repo)
    if milestone.project_id != task.project_id:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Milestone {task.milestone_id} does not belong to project {task.project_id}",
        )
    return await repo.create(task)


@router.get("", response_model=list[Task])
async def list_tasks(
    user: CurrentUser,
    repo: TaskRepo,
    milestone_repo: MilestoneRepo,
    project_repo: ProjectRepo,
    project_id: Optional[UUID] = Query(None, description="Filter tasks by project ID"),
    milestone_id: Optional[UUID] = Query(None, description="Filter tasks by milestone ID"),
) -> list[Task]:
    """List tasks by milestone or project."""
    if milestone_id:
        await require_milestone_owner(user, milestone_id, milestone_repo, project_repo)
        return await repo.list_by_milestone(milestone_id)
    if project_id:
        await require_project_owner(user, project_id, project_repo)
        return await repo.list_by_project(project_id)
    raise HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail="project_id or milestone_id query parameter is required",
    )


@router.get("/mine", response_model=TaskBoard)
async def my_tasks(
    user: CurrentUser,
    service: MyTasks,
    user_timezone: UserTimezone,
) -> TaskBoard:
    """Tasks assigned to the current user across projects, by status."""
    return await service.load(user.id, user_timezone)


@router.get("/board/{milestone_id}", response_model=TaskBoard)
async def milestone_board(
    milestone_id: UUID,
    user: CurrentUser,
    repo: TaskRepo,
    milestone_repo: MilestoneRepo,
    project_repo: ProjectRepo,
    user_timezone: UserTimezone,
) -> TaskBoard:
    """Tasks of a milestone in status columns."""
    await require_milestone_owner(user, milestone_id, milestone_repo, project_repo)
    return task_board(await repo.list_by_milestone(milestone_id), user_timezone)


@router.get("/{task_id}", response_model=Task)
async def get_task(
    task_id: UUID,
    user: CurrentUser,
    repo: TaskRepo,
    project_repo: ProjectRepo,
) -> Task:
    """Get a task by ID."""
    return await require_task_access(user, task_id, repo, project_repo)


@router.patch("/{task_id}", response_model=Task)
async def update_task(
    task_id: UUID,
    update: TaskUpdate,
    user: CurrentUser,
    repo: TaskRepo,
    project_repo: ProjectRepo,
) -> Task:
    """Update a task. Concurrent edits are last-write-wins."""
    await require_task_access(user, task_id, repo, project_repo)
    return await repo.update(task_id, update)


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_task(
    task_id: UUID,
    user: CurrentUser,
    repo: TaskRepo,
    project_repo: ProjectRepo,
) -> Response:
    """Delete a task. Deleting a missing task succeeds."""
    if await repo.get_by_id(task_id) is not None:
        await require_task_access(user, task_id, repo, project_repo)
        await repo.delete(task_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
