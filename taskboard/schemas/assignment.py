from typing import Any, Dict, List, Optional
from pydantic import BaseModel


class AssignmentCreate(BaseModel):
    task_id: str
    assigned_to: Optional[str] = None
    project_id: Optional[str] = None
    client_id: Optional[str] = None
    start_date: Optional[str] = None
    due_date: Optional[str] = None
    narration: Optional[str] = None


class AssignmentComplete(BaseModel):
    hours: Optional[float] = None
    narration: Optional[str] = None


class AssignmentCreated(BaseModel):
    """Write result plus the non-fatal warnings of the notify step."""
    assignment: Dict[str, Any]
    notified: bool
    warnings: List[str] = []


class AssignmentReportRead(BaseModel):
    rows: List[Dict[str, Any]]
    total_hours: float
