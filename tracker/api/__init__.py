"""API routers."""

from tracker.api import (
    auth,
    milestones,
    projects,
    realtime,
    tasks,
)

__all__ = [
    "auth",
    "tasks",
    "projects",
    "milestones",
    "realtime",
]
