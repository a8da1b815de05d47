from typing import Any, Dict, List, Optional

from taskboard.backend.base import TableBackend
from taskboard.core.exceptions import NotFoundError, PermissionDeniedError, ValidationError
from taskboard.models.request import RequestStatus

TABLE = "user_requests"


class RequestService:
    """Peer-to-peer work requests. Only the assignee may change a request's status."""

    def __init__(self, tables: TableBackend):
        self.tables = tables

    def create_request(
        self,
        requester_id: str,
        assignee_id: str,
        title: str,
        description: str,
    ) -> Dict[str, Any]:
        title = (title or "").strip()
        description = (description or "").strip()
        assignee_id = (assignee_id or "").strip()
        if not title or not description or not assignee_id:
            raise ValidationError("Please fill in all fields")

        return self.tables.insert(TABLE, {
            "title": title,
            "description": description,
            "user_id": requester_id,
            "assigned_to": assignee_id,
            "status": RequestStatus.PENDING.value,
        })

    def list_for_assignee(self, user_id: str) -> List[Dict[str, Any]]:
        return self.tables.select(TABLE, filters={"assigned_to": user_id}, order_by="created_at", descending=True)

    def list_for_requester(self, user_id: str) -> List[Dict[str, Any]]:
        return self.tables.select(TABLE, filters={"user_id": user_id}, order_by="created_at", descending=True)

    def update_status(
        self,
        request_id: str,
        actor_id: str,
        status: str,
        narration: Optional[str] = None,
    ) -> Dict[str, Any]:
        try:
            new_status = RequestStatus(str(status).strip().lower())
        except ValueError:
            raise ValidationError(f"Unknown status '{status}'")

        current = self.tables.select_one(TABLE, request_id)
        if current is None:
            raise NotFoundError("Request not found")
        if current["assigned_to"] != actor_id:
            raise PermissionDeniedError("Only the assignee can update this request")

        payload = {"status": new_status.value}
        if narration is not None:
            payload["narration"] = narration
        return self.tables.update(TABLE, payload, request_id)
