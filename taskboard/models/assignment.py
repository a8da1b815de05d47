"""
Task Assignment Model Module

A task assignment links one task to an assignee and an assignor, optionally
scoped to a project and a client, over a start/due date range. A task can
collect any number of assignments over time; nothing enforces a single
active assignee.
"""
from typing import Optional
from sqlmodel import SQLModel, Field
import uuid


class TaskAssignment(SQLModel, table=True):
    """
    Attributes:
        id: Unique identifier (UUID)
        task_id: The task being assigned
        assigned_by: The assignor's user id
        assigned_to: The assignee's user id
        project_id: Optional project the work is booked against
        client_id: Optional client the work is for
        start_date: ISO date the work starts (YYYY-MM-DD)
        due_date: ISO date the work is due; never before start_date
        assigned_at: ISO timestamp of the assignment
        completed_at: ISO timestamp set when the assignee finishes
        hours: Hours spent, reported on completion
        narration: Free-text notes
    """
    __tablename__ = "task_assignments"

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)

    task_id: str = Field(foreign_key="tasks.id", index=True)
    assigned_by: str = Field(foreign_key="users.id")
    assigned_to: str = Field(foreign_key="users.id", index=True)

    project_id: Optional[str] = Field(default=None, foreign_key="projects.id")
    client_id: Optional[str] = Field(default=None, foreign_key="clients.id")

    start_date: Optional[str] = None
    due_date: Optional[str] = None

    assigned_at: Optional[str] = None
    completed_at: Optional[str] = None
    hours: Optional[float] = None
    narration: Optional[str] = None
