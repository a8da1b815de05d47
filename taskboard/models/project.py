"""
Project Model Module

This module defines the Project model. Projects are simple named entities that
tasks and task assignments point at by id.
"""
from typing import Optional
from sqlmodel import SQLModel, Field
import uuid

from datetime import datetime


class ProjectBase(SQLModel):
    name: str = Field(nullable=False)
    description: Optional[str] = None


class Project(ProjectBase, table=True):
    """
    Project model.

    Any authenticated user can read projects; only admins can write them.

    Attributes:
        id: Unique identifier (UUID)
        name: Project name (required)
        description: Detailed project description
        created_at: ISO timestamp when the project was created
    """
    __tablename__ = "projects"

    # Primary key
    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)

    # Audit timestamp - automatically managed
    created_at: Optional[str] = Field(default_factory=lambda: datetime.utcnow().isoformat())


class ProjectCreate(ProjectBase):
    pass


class ProjectUpdate(SQLModel):
    name: Optional[str] = None
    description: Optional[str] = None
