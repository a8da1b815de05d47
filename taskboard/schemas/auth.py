from typing import Optional
from pydantic import BaseModel, EmailStr

from taskboard.schemas.user import Identity


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    route: str


class UserRegister(BaseModel):
    email: EmailStr
    password: str
    full_name: Optional[str] = None
    username: Optional[str] = None


class SessionRead(BaseModel):
    """Result of bootstrapping a stored session."""
    state: str
    route: str
    user: Optional[Identity] = None
