"""
User Endpoints Module

Profile endpoints for the signed-in user plus the admin user listing.
Profile edits write straight to the users table; other live sessions pick the
change up on their next bootstrap.
"""
from typing import Any, List
from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select
from taskboard.api import deps
from taskboard.db.session import get_db
from taskboard.models.user import User
from taskboard.schemas.user import Identity, PushTokenUpdate, UserRead, UserUpdate
from taskboard.core.security import get_password_hash

router = APIRouter()

@router.get("", response_model=List[UserRead])
def read_users(
    db: Session = Depends(get_db),
    skip: int = 0,
    limit: int = 100,
    current_user: Identity = Depends(deps.get_current_admin),
) -> Any:
    """
    Retrieve a paginated list of all users, ordered by name.

    Only administrators can access this endpoint.
    """
    users = db.exec(select(User).order_by(User.full_name).offset(skip).limit(limit)).all()
    return users

@router.get("/assignable", response_model=List[UserRead])
def read_assignable_users(
    db: Session = Depends(get_db),
    current_user: Identity = Depends(deps.get_current_user),
) -> Any:
    """
    Active users other than the caller, for the request and assignment pickers.
    """
    statement = select(User).where(User.id != current_user.id, User.is_active == True).order_by(User.full_name)  # noqa: E712
    return db.exec(statement).all()

@router.get("/me", response_model=UserRead)
def read_user_me(
    current_user: Identity = Depends(deps.get_current_user),
    db: Session = Depends(get_db),
) -> Any:
    """
    Get the current authenticated user's profile.
    """
    return db.get(User, current_user.id)

@router.put("/me", response_model=UserRead)
def update_user_me(
    *,
    db: Session = Depends(get_db),
    user_in: UserUpdate,
    current_user: Identity = Depends(deps.get_current_user),
) -> Any:
    """
    Update the current user's own profile.

    Role and active flag cannot be changed here; see the user-admin endpoints.
    """
    db_user = db.get(User, current_user.id)

    # Update password if provided (will be hashed)
    if user_in.password is not None:
        db_user.password = get_password_hash(user_in.password)

    # Update other fields if provided
    if user_in.full_name is not None:
        db_user.full_name = user_in.full_name
    if user_in.username is not None:
        db_user.username = user_in.username
    if user_in.email is not None:
        clash = db.exec(select(User).where(User.email == user_in.email, User.id != db_user.id)).first()
        if clash:
            raise HTTPException(status_code=400, detail="User with this email already exists.")
        db_user.email = user_in.email
    if user_in.avatar_url is not None:
        db_user.avatar_url = user_in.avatar_url

    db.add(db_user)
    db.commit()
    db.refresh(db_user)
    return db_user

@router.put("/me/push-token", response_model=UserRead)
def save_push_token(
    *,
    db: Session = Depends(get_db),
    token_in: PushTokenUpdate,
    current_user: Identity = Depends(deps.get_current_user),
) -> Any:
    """
    Store (or clear, with null) the device push address used for assignment notifications.
    """
    db_user = db.get(User, current_user.id)
    db_user.push_token = token_in.push_token or None
    db.add(db_user)
    db.commit()
    db.refresh(db_user)
    return db_user
