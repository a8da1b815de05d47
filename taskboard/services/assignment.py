"""
Assignment Workflow

Creating an assignment is two separately observable steps:

1. the write: insert one task_assignments row. Failure here fails the call.
2. the notify: look up the assignee's push address and send a message.
   Failure here is logged and reported in AssignmentResult.warnings; it never
   raises and never undoes step 1.

The assignment row is the source of truth; the notification is a courtesy.
The same task can be assigned any number of times; rows are not deduplicated.
"""
import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Callable, Dict, List, Optional

from taskboard.backend.base import Notifier, TableBackend
from taskboard.core.exceptions import NotifyError, TaskboardError, ValidationError

logger = logging.getLogger(__name__)

TABLE = "task_assignments"


@dataclass
class AssignmentResult:
    assignment: Dict[str, Any]
    notified: bool = False
    warnings: List[NotifyError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        # Reaching a result means the row was written
        return True


@dataclass
class AssignmentReport:
    rows: List[Dict[str, Any]]
    total_hours: float


def _parse_day(value, name: str) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        raise ValidationError(f"{name} must be an ISO date (YYYY-MM-DD)")


def _blank(value) -> bool:
    return value is None or not str(value).strip()


class AssignmentWorkflow:
    def __init__(
        self,
        tables: TableBackend,
        notifier: Notifier,
        clock: Callable[[], datetime] = None,
    ):
        self.tables = tables
        self.notifier = notifier
        self.clock = clock or datetime.utcnow

    def assign_task(
        self,
        task_id: str,
        assignee_id: str,
        assignor_id: str,
        project_id: Optional[str] = None,
        client_id: Optional[str] = None,
        start_date=None,
        due_date=None,
        narration: Optional[str] = None,
    ) -> AssignmentResult:
        """
        Assign a task and try to tell the assignee about it.

        Raises:
            ValidationError: a required id is missing or the dates are inverted.
                Raised before any backend call.
            WriteError / BackendUnavailableError: the insert failed.
        """
        if _blank(assignee_id):
            raise ValidationError("Please select a user to assign")
        if _blank(task_id):
            raise ValidationError("A task is required")
        if _blank(assignor_id):
            raise ValidationError("The assigning user is required")

        start = _parse_day(start_date, "start_date")
        due = _parse_day(due_date, "due_date")
        if start and due and due < start:
            raise ValidationError("Due date cannot be before the start date")

        payload = {
            "task_id": task_id,
            "assigned_by": assignor_id,
            "assigned_to": assignee_id,
            "project_id": project_id or None,
            "client_id": client_id or None,
            "start_date": start.isoformat() if start else None,
            "due_date": due.isoformat() if due else None,
            "assigned_at": self.clock().isoformat(),
            "narration": narration,
        }
        row = self.tables.insert(TABLE, payload)

        result = AssignmentResult(assignment=row)
        try:
            result.notified = self._notify(row)
        except NotifyError as exc:
            logger.warning("Assignment %s saved but notification failed: %s", row.get("id"), exc)
            result.warnings.append(exc)
        return result

    def _notify(self, assignment: Dict[str, Any]) -> bool:
        """Returns False when the assignee has no push address. Raises NotifyError on failure."""
        try:
            assignee = self.tables.select_one("users", assignment["assigned_to"])
        except TaskboardError as exc:
            raise NotifyError(f"Could not read the assignee's push address: {exc.detail}") from exc

        address = (assignee or {}).get("push_token")
        if not address:
            return False

        body = "You have been assigned a new task"
        try:
            task = self.tables.select_one("tasks", assignment["task_id"])
        except TaskboardError:
            task = None
        if task and task.get("title"):
            body = f"You have been assigned: {task['title']}"
        if assignment.get("due_date"):
            body += f" (due {assignment['due_date']})"

        try:
            self.notifier.send(
                address,
                "New Task Assigned",
                body,
                {"assignment_id": assignment.get("id"), "task_id": assignment["task_id"]},
            )
        except NotifyError:
            raise
        except Exception as exc:
            # Notifier implementations are third-party code; anything they raise is a delivery failure
            raise NotifyError(f"Notification failed: {exc}") from exc
        return True

    def list_assignments(
        self,
        assignee_id: Optional[str] = None,
        project_id: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        filters = {}
        if assignee_id:
            filters["assigned_to"] = assignee_id
        if project_id:
            filters["project_id"] = project_id
        return self.tables.select(TABLE, filters=filters, order_by="assigned_at", descending=True)

    def remove_assignment(self, assignment_id: str) -> None:
        self.tables.delete(TABLE, assignment_id)

    def complete_assignment(
        self,
        assignment_id: str,
        hours: Optional[float] = None,
        narration: Optional[str] = None,
    ) -> Dict[str, Any]:
        if hours is not None and hours < 0:
            raise ValidationError("Hours cannot be negative")
        payload = {"completed_at": self.clock().isoformat()}
        if hours is not None:
            payload["hours"] = hours
        if narration is not None:
            payload["narration"] = narration
        return self.tables.update(TABLE, payload, assignment_id)

    def report(
        self,
        project_id: Optional[str] = None,
        assignee_id: Optional[str] = None,
    ) -> AssignmentReport:
        rows = self.list_assignments(assignee_id=assignee_id, project_id=project_id)
        total = sum((row.get("hours") or 0) for row in rows)
        return AssignmentReport(rows=rows, total_hours=float(total))
