"""
Derived view models.

These are computed from already-fetched records and never persisted.
"""

from datetime import date
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field, computed_field

from tracker.models.enums import DueKind, TaskStatus
from tracker.models.milestone import Milestone
from tracker.models.project import Project
from tracker.models.task import Task


class MilestoneProgress(BaseModel):
    """Task completion for a milestone."""

    total: int = 0
    done: int = 0
    percent: int = 0


class ProjectSummary(BaseModel):
    """Milestone/task counts and nearest milestone due date for a project."""

    milestone_count: int = 0
    task_count: int = 0
    done_task_count: int = 0
    next_due: Optional[int] = Field(None, description="Earliest milestone due date (epoch ms)")


class DueLabel(BaseModel):
    """Calendar-day label for a due date."""

    kind: DueKind
    day: date

    @computed_field
    @property
    def text(self) -> str:
        label = self.day.isoformat()
        if self.kind == DueKind.OVERDUE:
            return f"Overdue • {label}"
        if self.kind == DueKind.DUE_TODAY:
            return f"Due today • {label}"
        return f"Due {label}"


class MilestoneWithProgress(BaseModel):
    """Milestone card for the project page."""

    milestone: Milestone
    progress: MilestoneProgress
    due_label: Optional[DueLabel] = None


class ProjectWithSummary(BaseModel):
    """Project card for the project list."""

    project: Project
    summary: ProjectSummary
    next_due_label: Optional[DueLabel] = None


class TaskCard(BaseModel):
    """Task as shown on a board column."""

    task: Task
    project_name: Optional[str] = None
    milestone_name: Optional[str] = None
    due_label: Optional[DueLabel] = None


class TaskBoard(BaseModel):
    """Tasks partitioned into the four status columns."""

    columns: dict[TaskStatus, list[TaskCard]]

    @property
    def total(self) -> int:
        return sum(len(cards) for cards in self.columns.values())


class CascadeResult(BaseModel):
    """Outcome of a cascading delete."""

    project_id: Optional[UUID] = None
    milestone_id: Optional[UUID] = None
    tasks_deleted: int = 0
    milestones_deleted: int = 0
    project_deleted: bool = False
    milestone_deleted: bool = False
