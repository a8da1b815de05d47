from pydantic import BaseModel, EmailStr, field_validator
from typing import Optional
from taskboard.models.user import UserRole


class Identity(BaseModel):
    """The authenticated user as the rest of the app sees it."""
    id: str
    email: Optional[str] = None
    username: Optional[str] = None
    full_name: Optional[str] = None
    role: UserRole = UserRole.USER
    is_active: bool = True
    avatar_url: Optional[str] = None
    push_token: Optional[str] = None

    model_config = {"from_attributes": True}

    @field_validator("role", mode="before")
    @classmethod
    def normalise_role(cls, v):
        return UserRole.parse(v)


# Shared properties
class UserBase(BaseModel):
    email: Optional[EmailStr] = None
    username: Optional[str] = None
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None

# Properties to receive via API on creation
class UserCreate(UserBase):
    email: EmailStr
    password: str
    role: Optional[UserRole] = None

# Properties to receive via API on update
class UserUpdate(UserBase):
    password: Optional[str] = None

# Properties to return to client
class UserRead(UserBase):
    id: str
    role: UserRole
    is_active: bool
    created_at: Optional[str] = None

    model_config = {"from_attributes": True}

    @field_validator("role", mode="before")
    @classmethod
    def normalise_role(cls, v):
        return UserRole.parse(v)


class RoleUpdate(BaseModel):
    role: UserRole

    @field_validator("role", mode="before")
    @classmethod
    def normalise_role(cls, v):
        return UserRole.parse(v)


class ActiveUpdate(BaseModel):
    is_active: bool


class PushTokenUpdate(BaseModel):
    push_token: Optional[str] = None
