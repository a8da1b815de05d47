"""
Task Assignment Endpoints Module

Assigning goes through AssignmentWorkflow: the response reports success as
soon as the assignment row is written, and carries any notification failure
in "warnings" instead of failing the request.
"""
from datetime import date
from typing import Any, Dict, List, Optional
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlmodel import Session, select
from taskboard.api import deps
from taskboard.backend.tables import SQLModelTables
from taskboard.db.session import get_db
from taskboard.models.assignment import TaskAssignment
from taskboard.models.task import Task
from taskboard.models.user import UserRole
from taskboard.schemas.assignment import (
    AssignmentComplete,
    AssignmentCreate,
    AssignmentCreated,
    AssignmentReportRead,
)
from taskboard.schemas.user import Identity
from taskboard.services.assignment import AssignmentWorkflow
from taskboard.services.dashboard import assign_screen_data
from taskboard.services.filters import DateFilter, filter_assignments
from taskboard.services.loader import ScreenScope

router = APIRouter()


def get_workflow(
    tables: SQLModelTables = Depends(deps.get_tables),
    notifier=Depends(deps.get_notifier_dep),
) -> AssignmentWorkflow:
    return AssignmentWorkflow(tables, notifier)


def _with_tasks(db: Session, rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Nest each row's task (title, priority, status) under "task"."""
    task_ids = {row["task_id"] for row in rows}
    tasks = {}
    if task_ids:
        tasks = {t.id: t for t in db.exec(select(Task).where(Task.id.in_(list(task_ids)))).all()}
    for row in rows:
        task = tasks.get(row["task_id"])
        row["task"] = (
            {"id": task.id, "title": task.title, "priority": task.priority, "status": task.status}
            if task else None
        )
    return rows


@router.post("", response_model=AssignmentCreated)
def create_assignment(
    assignment_in: AssignmentCreate,
    db: Session = Depends(get_db),
    workflow: AssignmentWorkflow = Depends(get_workflow),
    current_user: Identity = Depends(deps.get_current_assignor),
):
    """
    Assign a task to a user.

    Raises:
        ValidationError (422): No assignee selected, or due date before start date
        HTTPException 404: If the task doesn't exist
    """
    if assignment_in.assigned_to and not db.get(Task, assignment_in.task_id):
        raise HTTPException(status_code=404, detail="Task not found")

    result = workflow.assign_task(
        task_id=assignment_in.task_id,
        assignee_id=assignment_in.assigned_to,
        assignor_id=current_user.id,
        project_id=assignment_in.project_id,
        client_id=assignment_in.client_id,
        start_date=assignment_in.start_date,
        due_date=assignment_in.due_date,
        narration=assignment_in.narration,
    )
    return {
        "assignment": result.assignment,
        "notified": result.notified,
        "warnings": [w.detail for w in result.warnings],
    }


@router.get("/screen/{task_id}")
async def read_assign_screen(
    task_id: str,
    request: Request,
    open_tables=Depends(deps.get_tables_factory),
    current_user: Identity = Depends(deps.get_current_assignor),
):
    """
    Everything the assign form needs, loaded concurrently. Any failed read fails
    the whole load. Loads are abandoned if the client disconnects.
    """
    async with ScreenScope() as scope:
        scope.cancel_when(request.is_disconnected)
        data = await scope.run(assign_screen_data(open_tables, task_id))
    if data["task"] is None:
        raise HTTPException(status_code=404, detail="Task not found")
    return data


@router.get("", response_model=List[Dict[str, Any]])
def list_assignments(
    db: Session = Depends(get_db),
    workflow: AssignmentWorkflow = Depends(get_workflow),
    current_user: Identity = Depends(deps.get_current_admin),
):
    """
    All assignments, newest first, with their task details.
    """
    return _with_tasks(db, workflow.list_assignments())


@router.get("/mine", response_model=List[Dict[str, Any]])
def list_my_assignments(
    date_filter: DateFilter = DateFilter.ALL,
    status: Optional[str] = None,
    today: Optional[date] = None,
    db: Session = Depends(get_db),
    workflow: AssignmentWorkflow = Depends(get_workflow),
    current_user: Identity = Depends(deps.get_current_user),
):
    """
    Assignments given to the current user, filtered by due date and task status.

    ``today`` defaults to the server's date; clients in other time zones pass their own.
    """
    rows = _with_tasks(db, workflow.list_assignments(assignee_id=current_user.id))
    return filter_assignments(rows, date_filter=date_filter, status=status, today=today)


@router.get("/report", response_model=AssignmentReportRead)
def assignment_report(
    project_id: Optional[str] = None,
    user_id: Optional[str] = None,
    db: Session = Depends(get_db),
    workflow: AssignmentWorkflow = Depends(get_workflow),
    current_user: Identity = Depends(deps.get_current_admin),
):
    """
    Assignments filtered by project and/or assignee, with total hours booked.
    """
    report = workflow.report(project_id=project_id, assignee_id=user_id)
    return {"rows": _with_tasks(db, report.rows), "total_hours": report.total_hours}


@router.patch("/{assignment_id}/complete", response_model=Dict[str, Any])
def complete_assignment(
    assignment_id: str,
    completion: AssignmentComplete,
    db: Session = Depends(get_db),
    workflow: AssignmentWorkflow = Depends(get_workflow),
    current_user: Identity = Depends(deps.get_current_user),
):
    """
    Mark an assignment as done, recording hours spent and an optional narration.

    Only the assignee or an admin may complete an assignment.
    """
    assignment = db.get(TaskAssignment, assignment_id)
    if not assignment:
        raise HTTPException(status_code=404, detail="Assignment not found")
    if assignment.assigned_to != current_user.id and current_user.role != UserRole.ADMIN:
        raise HTTPException(status_code=403, detail="Not authorized to complete this assignment")

    return workflow.complete_assignment(assignment_id, hours=completion.hours, narration=completion.narration)


@router.delete("/{assignment_id}")
def remove_assignment(
    assignment_id: str,
    workflow: AssignmentWorkflow = Depends(get_workflow),
    current_user: Identity = Depends(deps.get_current_admin),
):
    """
    Remove an assignment. The task itself is left untouched.
    """
    workflow.remove_assignment(assignment_id)
    return {"status": "success", "detail": "Assignment removed"}
