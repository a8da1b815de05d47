from typing import Optional
from pydantic import BaseModel


class RequestCreate(BaseModel):
    title: str = ""
    description: str = ""
    assigned_to: str = ""


class RequestStatusUpdate(BaseModel):
    # Validated against RequestStatus by the service so bad values surface as ValidationError
    status: str
    narration: Optional[str] = None
