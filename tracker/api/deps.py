"""
Dependency injection for API endpoints.

This module provides FastAPI dependencies that inject the correct
infrastructure implementations based on environment configuration.
"""

from functools import lru_cache
from typing import Annotated
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from fastapi import Depends, Header, HTTPException, Query, status

from tracker.core.config import get_settings
from tracker.core.exceptions import AuthenticationError
from tracker.interfaces.auth_provider import IAuthProvider, User
from tracker.interfaces.milestone_repository import IMilestoneRepository
from tracker.interfaces.project_repository import IProjectRepository
from tracker.interfaces.task_repository import ITaskRepository
from tracker.services.cascade_service import CascadeDeletionService
from tracker.services.my_tasks_service import MyTasksService


# ===========================================
# Repository Dependencies
# ===========================================


@lru_cache()
def get_project_repository() -> IProjectRepository:
    """Get project repository instance."""
    from tracker.infrastructure.local.project_repository import SqliteProjectRepository

    return SqliteProjectRepository()


@lru_cache()
def get_milestone_repository() -> IMilestoneRepository:
    """Get milestone repository instance."""
    from tracker.infrastructure.local.milestone_repository import SqliteMilestoneRepository

    return SqliteMilestoneRepository()


@lru_cache()
def get_task_repository() -> ITaskRepository:
    """Get task repository instance."""
    from tracker.infrastructure.local.task_repository import SqliteTaskRepository

    return SqliteTaskRepository()


# ===========================================
# Service Dependencies
# ===========================================


def get_cascade_service(
    project_repo: IProjectRepository = Depends(get_project_repository),
    milestone_repo: IMilestoneRepository = Depends(get_milestone_repository),
    task_repo: ITaskRepository = Depends(get_task_repository),
) -> CascadeDeletionService:
    return CascadeDeletionService(project_repo, milestone_repo, task_repo)


def get_my_tasks_service(
    task_repo: ITaskRepository = Depends(get_task_repository),
    project_repo: IProjectRepository = Depends(get_project_repository),
    milestone_repo: IMilestoneRepository = Depends(get_milestone_repository),
) -> MyTasksService:
    return MyTasksService(task_repo, project_repo, milestone_repo)


def get_user_timezone(
    tz: str | None = Query(None, description="IANA timezone for due-date labels"),
) -> str:
    """Viewer timezone, falling back to DISPLAY_TIMEZONE."""
    if not tz:
        return get_settings().DISPLAY_TIMEZONE
    try:
        ZoneInfo(tz)
    except (ZoneInfoNotFoundError, ValueError):
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Unknown timezone: {tz}",
        )
    return tz


# ===========================================
# Provider Dependencies
# ===========================================


@lru_cache()
def get_auth_provider() -> IAuthProvider:
    """Get auth provider instance."""
    settings = get_settings()
    if settings.AUTH_PROVIDER == "jwt":
        from tracker.infrastructure.auth.jwt_auth import JwtAuthProvider

        return JwtAuthProvider(settings)

    from tracker.infrastructure.auth.mock_auth import MockAuthProvider
    return MockAuthProvider()


# ===========================================
# User Authentication
# ===========================================


async def get_current_user(
    authorization: Annotated[str | None, Header()] = None,
    auth_provider: IAuthProvider = Depends(get_auth_provider),
) -> User:
    """
    Get current authenticated user.

    In mock mode the bearer token is the user ID; in jwt mode it must be a
    signed token.
    """
    if not authorization:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authorization header required",
        )

    # Extract token from "Bearer <token>"
    try:
        scheme, token = authorization.split()
        if scheme.lower() != "bearer":
            raise ValueError("Invalid scheme")
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authorization header format",
        )

    try:
        return await auth_provider.verify_token(token)
    except AuthenticationError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=e.message,
        )


# ===========================================
# Type Aliases for Dependency Injection
# ===========================================

ProjectRepo = Annotated[IProjectRepository, Depends(get_project_repository)]
MilestoneRepo = Annotated[IMilestoneRepository, Depends(get_milestone_repository)]
TaskRepo = Annotated[ITaskRepository, Depends(get_task_repository)]
CascadeService = Annotated[CascadeDeletionService, Depends(get_cascade_service)]
MyTasks = Annotated[MyTasksService, Depends(get_my_tasks_service)]
UserTimezone = Annotated[str, Depends(get_user_timezone)]
CurrentUser = Annotated[User, Depends(get_current_user)]
