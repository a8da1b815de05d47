from typing import Any, Dict, Optional
from fastapi import APIRouter, Depends, Request
from taskboard.api import deps
from taskboard.schemas.user import Identity
from taskboard.services.dashboard import dashboard_stats, task_board_data
from taskboard.services.filters import filter_tasks
from taskboard.services.loader import ScreenScope

router = APIRouter()


@router.get("", response_model=Dict[str, int])
async def read_dashboard(
    request: Request,
    open_tables=Depends(deps.get_tables_factory),
    current_user: Identity = Depends(deps.get_current_admin),
):
    """
    Record counts for the admin dashboard.

    All counts load concurrently; if any one fails the whole request fails.
    """
    async with ScreenScope() as scope:
        scope.cancel_when(request.is_disconnected)
        return await scope.run(dashboard_stats(open_tables))


@router.get("/task-board", response_model=Dict[str, Any])
async def read_task_board(
    request: Request,
    status: Optional[str] = None,
    priority: Optional[str] = None,
    project_id: Optional[str] = None,
    q: Optional[str] = None,
    open_tables=Depends(deps.get_tables_factory),
    current_user: Identity = Depends(deps.get_current_admin),
):
    """
    The admin task board: filtered tasks plus the project and user lists used to label them.
    """
    async with ScreenScope() as scope:
        scope.cancel_when(request.is_disconnected)
        data = await scope.run(task_board_data(open_tables))
    data["tasks"] = filter_tasks(data["tasks"], status=status, priority=priority, project_id=project_id, search=q)
    return data
