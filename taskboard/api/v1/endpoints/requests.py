"""
User Request Endpoints Module

Peer-to-peer work requests between users. Anyone can send a request to
another user; only the recipient can move it through its statuses.
"""
from typing import Any, Dict, List
from fastapi import APIRouter, Depends
from taskboard.api import deps
from taskboard.backend.tables import SQLModelTables
from taskboard.schemas.request import RequestCreate, RequestStatusUpdate
from taskboard.schemas.user import Identity
from taskboard.services.requests import RequestService

router = APIRouter()


def get_request_service(tables: SQLModelTables = Depends(deps.get_tables)) -> RequestService:
    return RequestService(tables)


@router.post("", response_model=Dict[str, Any])
def create_request(
    request_in: RequestCreate,
    service: RequestService = Depends(get_request_service),
    current_user: Identity = Depends(deps.get_current_user),
):
    """
    Send a work request to another user. Title, description and assignee are all required.
    """
    return service.create_request(
        requester_id=current_user.id,
        assignee_id=request_in.assigned_to,
        title=request_in.title,
        description=request_in.description,
    )


@router.get("/assigned", response_model=List[Dict[str, Any]])
def list_assigned_requests(
    service: RequestService = Depends(get_request_service),
    current_user: Identity = Depends(deps.get_current_user),
):
    """
    Requests addressed to the current user, newest first.
    """
    return service.list_for_assignee(current_user.id)


@router.get("/sent", response_model=List[Dict[str, Any]])
def list_sent_requests(
    service: RequestService = Depends(get_request_service),
    current_user: Identity = Depends(deps.get_current_user),
):
    return service.list_for_requester(current_user.id)


@router.patch("/{request_id}/status", response_model=Dict[str, Any])
def update_request_status(
    request_id: str,
    update: RequestStatusUpdate,
    service: RequestService = Depends(get_request_service),
    current_user: Identity = Depends(deps.get_current_user),
):
    """
    Change a request's status.

    Raises:
        PermissionDeniedError (403): If the caller is not the request's assignee
        ValidationError (422): If the status is not pending, in_progress or completed
    """
    return service.update_status(request_id, current_user.id, update.status, narration=update.narration)
