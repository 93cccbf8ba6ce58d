"""
Task model definitions.
"""

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from tracker.models.enums import TaskPriority, TaskStatus


class TaskBase(BaseModel):
    """Base task fields."""

    project_id: UUID = Field(..., description="Project ID")
    milestone_id: UUID = Field(..., description="Milestone ID")
    title: str = Field(..., min_length=1, max_length=500, description="Task title")
    description: Optional[str] = Field(None, max_length=2000, description="Task description")
    priority: TaskPriority = Field(TaskPriority.MEDIUM)
    assignee_id: Optional[str] = Field(None, description="Assigned user ID")
    due_date: Optional[int] = Field(None, description="Due date (epoch ms)")


class TaskCreate(TaskBase):
    """Schema for creating a new task."""

    pass


class TaskUpdate(BaseModel):
    """Schema for updating an existing task."""

    title: Optional[str] = Field(None, min_length=1, max_length=500)
    description: Optional[str] = Field(None, max_length=2000)
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    assignee_id: Optional[str] = None
    due_date: Optional[int] = None


class Task(TaskBase):
    """Complete task model."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    status: TaskStatus = Field(TaskStatus.BACKLOG)
    created_at: int
    updated_at: int
