from .user import User, UserRole
from .auth_models import Session as UserSession
from .client import Client
from .project import Project
from .task import Task, TaskPriority, TaskStatus
from .assignment import TaskAssignment
from .request import UserRequest, RequestStatus

__all__ = [
    "User", "UserRole",
    "UserSession",
    "Client",
    "Project",
    "Task", "TaskPriority", "TaskStatus",
    "TaskAssignment",
    "UserRequest", "RequestStatus",
]
