"""
Task Endpoints Module

This module provides CRUD endpoints for tasks. Assignment of tasks to users is
handled separately by the assignments endpoints.
"""
from datetime import datetime
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select
from taskboard.db.session import get_db
from taskboard.models.assignment import TaskAssignment
from taskboard.models.task import Task, TaskCreate, TaskStatus, TaskUpdate
from taskboard.models.user import UserRole
from taskboard.schemas.user import Identity
from taskboard.services.filters import filter_tasks
from taskboard.api import deps

router = APIRouter()

PRIVILEGED = (UserRole.ADMIN, UserRole.MANAGER)


def _is_assignee(db: Session, task_id: str, user_id: str) -> bool:
    statement = select(TaskAssignment).where(
        TaskAssignment.task_id == task_id,
        TaskAssignment.assigned_to == user_id,
    )
    return db.exec(statement).first() is not None


@router.get("", response_model=List[Task])
def list_tasks(
    status: Optional[str] = None,
    priority: Optional[str] = None,
    project_id: Optional[str] = None,
    q: Optional[str] = None,
    db: Session = Depends(get_db),
    current_user: Identity = Depends(deps.get_current_user),
):
    """
    Retrieve tasks, newest first.

    Admins and managers see all tasks. Regular users see tasks they created
    OR tasks assigned to them.

    The status/priority/project/search filters are applied to the fetched
    rows; search is a case-insensitive substring match over title and description.
    """
    if current_user.role in PRIVILEGED:
        statement = select(Task)
    else:
        assigned_task_ids_subquery = select(TaskAssignment.task_id).where(
            TaskAssignment.assigned_to == current_user.id
        )
        statement = select(Task).where(
            (Task.created_by == current_user.id) |
            (Task.id.in_(assigned_task_ids_subquery))
        )

    statement = statement.order_by(Task.created_at.desc())
    rows = [task.model_dump() for task in db.exec(statement).all()]
    return filter_tasks(rows, status=status, priority=priority, project_id=project_id, search=q)


@router.get("/{task_id}", response_model=Task)
def read_task(
    task_id: str,
    db: Session = Depends(get_db),
    current_user: Identity = Depends(deps.get_current_user),
):
    """
    Get a specific task by ID.
    """
    task = db.get(Task, task_id)
    if not task:
        raise HTTPException(status_code=404, detail="Task not found")

    if current_user.role not in PRIVILEGED:
        if task.created_by != current_user.id and not _is_assignee(db, task_id, current_user.id):
            raise HTTPException(status_code=403, detail="Not authorized to view this task")

    return task


@router.post("", response_model=Task)
def create_task(
    task_in: TaskCreate,
    db: Session = Depends(get_db),
    current_user: Identity = Depends(deps.get_current_assignor),
):
    """
    Create a new task. The creator is recorded as created_by.
    """
    if not task_in.title.strip():
        raise HTTPException(status_code=422, detail="Task title is required")

    task = Task.model_validate(task_in)
    task.created_by = current_user.id
    if task.status == TaskStatus.COMPLETED:
        task.completed_at = datetime.utcnow().isoformat()
    db.add(task)
    db.commit()
    db.refresh(task)
    return task


@router.patch("/{task_id}", response_model=Task)
def update_task(
    task_id: str,
    task_update: TaskUpdate,
    db: Session = Depends(get_db),
    current_user: Identity = Depends(deps.get_current_user),
):
    """
    Update an existing task.

    Admins and managers may change any field. An assignee may only move the
    task's status. Moving to completed stamps completed_at.
    """
    task = db.get(Task, task_id)
    if not task:
        raise HTTPException(status_code=404, detail="Task not found")

    update_data = task_update.model_dump(exclude_unset=True)

    # Check permissions
    if current_user.role not in PRIVILEGED:
        if not _is_assignee(db, task_id, current_user.id):
            raise HTTPException(status_code=403, detail="Not authorized to update this task")
        if set(update_data) - {"status"}:
            raise HTTPException(status_code=403, detail="Assignees can only change the task status")

    for key, value in update_data.items():
        setattr(task, key, value)

    if update_data.get("status") == TaskStatus.COMPLETED and not task.completed_at:
        task.completed_at = datetime.utcnow().isoformat()

    db.add(task)
    db.commit()
    db.refresh(task)
    return task


@router.delete("/{task_id}")
def delete_task(
    task_id: str,
    db: Session = Depends(get_db),
    current_user: Identity = Depends(deps.get_current_assignor),
):
    """
    Delete a task and all its assignments.
    """
    task = db.get(Task, task_id)
    if not task:
        raise HTTPException(status_code=404, detail="Task not found")

    # Delete assignments first (foreign key constraint)
    for assignment in db.exec(select(TaskAssignment).where(TaskAssignment.task_id == task_id)).all():
        db.delete(assignment)

    db.delete(task)
    db.commit()
    return {"status": "success", "detail": "Task deleted"}
