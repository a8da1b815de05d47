"""
User Request Model Module

A user request is a peer-to-peer work item: one user asks another to do
something. Requests are independent of tasks and assignments, and only the
assignee may move a request through its statuses.
"""
from enum import Enum
from typing import Optional
from sqlmodel import SQLModel, Field, AutoString
import uuid
from datetime import datetime


class RequestStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class UserRequest(SQLModel, table=True):
    __tablename__ = "user_requests"

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)

    title: str = Field(nullable=False)
    description: Optional[str] = None

    # Requester and assignee
    user_id: str = Field(foreign_key="users.id", index=True)
    assigned_to: str = Field(foreign_key="users.id", index=True)

    status: RequestStatus = Field(default=RequestStatus.PENDING, sa_type=AutoString)
    narration: Optional[str] = None

    created_at: Optional[str] = Field(default_factory=lambda: datetime.utcnow().isoformat())
