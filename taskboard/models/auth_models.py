from typing import Optional
from sqlmodel import SQLModel, Field
import uuid


class Session(SQLModel, table=True):
    """One live login. Deleting the row revokes every token that points at it."""
    __tablename__ = "session"
    sessionToken: str = Field(default_factory=lambda: uuid.uuid4().hex, primary_key=True)
    userId: str = Field(foreign_key="users.id", index=True)
    expires: int = Field(nullable=False)  # timestamp_ms
    created_at: Optional[int] = None  # timestamp_ms
