"""
Milestone model definitions.

Milestones belong to a project and are displayed by order_index.
"""

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from tracker.models.enums import MilestoneStatus


class MilestoneBase(BaseModel):
    """Base milestone fields."""

    project_id: UUID = Field(..., description="Project ID")
    name: str = Field(..., min_length=1, max_length=200, description="Milestone name")
    description: Optional[str] = Field(None, max_length=2000, description="Milestone description")
    due_date: Optional[int] = Field(None, description="Target due date (epoch ms)")


class MilestoneCreate(MilestoneBase):
    """Schema for creating a milestone."""

    pass


class MilestoneUpdate(BaseModel):
    """Schema for updating a milestone."""

    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    status: Optional[MilestoneStatus] = None
    due_date: Optional[int] = None


class Milestone(MilestoneBase):
    """Complete milestone model."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    status: MilestoneStatus = Field(MilestoneStatus.NOT_STARTED)
    order_index: int = Field(..., ge=0, description="Creation-time display order (gaps allowed)")
    created_at: int
    updated_at: int
