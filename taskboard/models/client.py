"""
Client Model Module

This module defines the Client model representing client/company entities in the system.
Clients are shared resources readable by all authenticated users, but only admins
can create, modify or delete them.
"""
from typing import Optional
from sqlmodel import SQLModel, Field
import uuid

from datetime import datetime


class ClientBase(SQLModel):
    name: str = Field(nullable=False)
    description: Optional[str] = None


class Client(ClientBase, table=True):
    """
    Client model representing a client/company entity.

    Clients are referenced by id from task assignments. They carry no lifecycle
    beyond create/update/delete.

    Attributes:
        id: Unique identifier (UUID) automatically generated for each client
        name: Company/organization name (required)
        description: Free-text notes about the client
        created_at: ISO timestamp of when the client record was created
    """
    __tablename__ = "clients"

    # Primary key - auto-generated UUID for global uniqueness
    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)

    # Audit timestamp - automatically set to current UTC time on creation
    created_at: Optional[str] = Field(default_factory=lambda: datetime.utcnow().isoformat())


class ClientCreate(ClientBase):
    pass


class ClientUpdate(SQLModel):
    name: Optional[str] = None
    description: Optional[str] = None
