"""Abstract interfaces for infrastructure abstraction."""

from tracker.interfaces.auth_provider import IAuthProvider
from tracker.interfaces.milestone_repository import IMilestoneRepository
from tracker.interfaces.project_repository import IProjectRepository
from tracker.interfaces.task_repository import ITaskRepository

__all__ = [
    "IProjectRepository",
    "IMilestoneRepository",
    "ITaskRepository",
    "IAuthProvider",
]
