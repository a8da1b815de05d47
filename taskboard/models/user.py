"""
User Model Module

This module defines the User model and UserRole enumeration for authentication
and authorization throughout the application.
"""
from enum import Enum
from typing import Optional
from sqlmodel import SQLModel, Field, AutoString
import uuid
from datetime import datetime


class UserRole(str, Enum):
    """
    Enumeration of user roles. The set is closed.

    - USER: Standard user, sees their own assignments and requests
    - MANAGER: Standard route set, may also assign tasks
    - ADMIN: Full access; the only role routed to the admin dashboard
    """
    ADMIN = "ADMIN"
    MANAGER = "MANAGER"
    USER = "USER"

    @classmethod
    def parse(cls, value) -> "UserRole":
        """Accept role strings in any case, as stored by older clients."""
        if isinstance(value, cls):
            return value
        return cls(str(value).strip().upper())


class User(SQLModel, table=True):
    """
    User model representing an identity in the system.

    Users are identified by UUID and authenticated via email/password. A user
    with is_active = 0 must never hold a live session; the session manager
    revokes any session it finds for such a user.

    Attributes:
        id: Unique identifier (UUID) automatically generated for each user
        email: Login email (required, unique, indexed)
        password: Hashed password (bcrypt)
        username: Optional short handle
        full_name: Display name
        role: One of UserRole (default USER)
        is_active: Account gate (1 = active, 0 = deactivated)
        avatar_url: URL of the profile image
        push_token: Device push-notification address, if the user registered one
        created_at: ISO timestamp when the account was created
    """
    __tablename__ = "users"

    # Primary key - auto-generated UUID for global uniqueness
    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)

    # Authentication fields
    email: str = Field(unique=True, index=True, nullable=False)
    password: Optional[str] = None  # Hashed password (bcrypt)

    # Profile information
    username: Optional[str] = None
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None

    # Authorization
    role: UserRole = Field(default=UserRole.USER, sa_type=AutoString)

    # Account gate - use boolean column for portability
    is_active: bool = Field(default=True)

    # Push notification address (e.g. "ExponentPushToken[...]")
    push_token: Optional[str] = None

    # Audit timestamp
    created_at: Optional[str] = Field(default_factory=lambda: datetime.utcnow().isoformat())
