from fastapi import APIRouter
from typing import Any
from taskboard.core.config import settings

router = APIRouter()

@router.get("", response_model=dict[str, Any])
def health_check() -> Any:
    """
    Liveness probe. Does not touch the database.
    """
    return {"status": "ok", "version": settings.VERSION}
