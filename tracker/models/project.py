"""
Project model definitions.

Projects are owned by a single user and group ordered milestones.
"""

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from tracker.models.enums import ProjectStatus


class ProjectBase(BaseModel):
    """Base project fields."""

    name: str = Field(..., min_length=1, max_length=200, description="Project name")
    description: Optional[str] = Field(None, max_length=2000, description="Project description")


class ProjectCreate(ProjectBase):
    """Schema for creating a new project."""

    pass


class ProjectUpdate(BaseModel):
    """Schema for updating an existing project."""

    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    status: Optional[ProjectStatus] = None


class Project(ProjectBase):
    """Complete project model."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    owner_id: str = Field(..., description="Owner user ID")
    status: ProjectStatus = Field(ProjectStatus.ACTIVE)
    created_at: int = Field(..., description="Creation time (epoch ms)")
    updated_at: int = Field(..., description="Last update time (epoch ms)")
