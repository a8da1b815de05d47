"""
Task Model Module

This module defines the Task model and its priority/status enumerations.
A task does not know who it is assigned to; assignments live in the
task_assignments table (see taskboard.models.assignment).
"""
from enum import Enum
from typing import Optional
from sqlmodel import SQLModel, Field, AutoString
from pydantic import field_validator
import uuid
from datetime import datetime


class TaskPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class TaskStatus(str, Enum):
    """
    Task status. Transitions are one-directional in practice
    (pending -> in_progress -> completed) but backward moves are not rejected.
    """
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class TaskBase(SQLModel):
    """
    Base Task model containing common fields.
    """
    # Basic task information
    title: str = Field(nullable=False)
    description: Optional[str] = None

    priority: TaskPriority = Field(default=TaskPriority.MEDIUM, sa_type=AutoString)
    status: TaskStatus = Field(default=TaskStatus.PENDING, sa_type=AutoString)

    # Due date stored as ISO format string (YYYY-MM-DD)
    due_date: Optional[str] = None

    # Associations
    project_id: Optional[str] = Field(default=None, foreign_key="projects.id")
    created_by: Optional[str] = Field(default=None, foreign_key="users.id")

    # Image reference (URL); uploading is handled elsewhere
    image_url: Optional[str] = None


class Task(TaskBase, table=True):
    """
    Task table model.
    """
    __tablename__ = "tasks"

    # Primary key
    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)

    # Audit timestamps
    created_at: Optional[str] = Field(default_factory=lambda: datetime.utcnow().isoformat())
    completed_at: Optional[str] = None


class TaskCreate(TaskBase):
    """Schema for creating a task."""

    @field_validator("status", "priority", mode="before")
    @classmethod
    def to_lowercase(cls, v):
        if isinstance(v, str):
            return v.lower()
        return v


class TaskUpdate(SQLModel):
    """Schema for updating a task."""
    title: Optional[str] = None
    description: Optional[str] = None
    priority: Optional[TaskPriority] = None
    status: Optional[TaskStatus] = None
    due_date: Optional[str] = None
    project_id: Optional[str] = None
    image_url: Optional[str] = None

    @field_validator("status", "priority", mode="before")
    @classmethod
    def to_lowercase(cls, v):
        if isinstance(v, str):
            return v.lower()
        return v
