"""Pydantic models (schemas) for the application."""

from tracker.models.enums import (
    DueKind,
    MilestoneStatus,
    ProjectStatus,
    TaskPriority,
    TaskStatus,
)
from tracker.models.milestone import Milestone, MilestoneCreate, MilestoneUpdate
from tracker.models.project import Project, ProjectCreate, ProjectUpdate
from tracker.models.summary import (
    CascadeResult,
    DueLabel,
    MilestoneProgress,
    MilestoneWithProgress,
    ProjectSummary,
    ProjectWithSummary,
    TaskBoard,
    TaskCard,
)
from tracker.models.task import Task, TaskCreate, TaskUpdate

__all__ = [
    # Enums
    "ProjectStatus",
    "MilestoneStatus",
    "TaskStatus",
    "TaskPriority",
    "DueKind",
    # Project
    "Project",
    "ProjectCreate",
    "ProjectUpdate",
    # Milestone
    "Milestone",
    "MilestoneCreate",
    "MilestoneUpdate",
    # Task
    "Task",
    "TaskCreate",
    "TaskUpdate",
    # Derived views
    "MilestoneProgress",
    "ProjectSummary",
    "DueLabel",
    "MilestoneWithProgress",
    "ProjectWithSummary",
    "TaskCard",
    "TaskBoard",
    "CascadeResult",
]
