from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select
from taskboard.api import deps
from taskboard.backend.auth import SQLModelAuthBackend
from taskboard.db.session import get_db
from taskboard.models.user import User, UserRole
from taskboard.schemas.user import ActiveUpdate, Identity, RoleUpdate, UserCreate, UserRead
from taskboard.core.security import get_password_hash

router = APIRouter()

@router.post("/create", response_model=UserRead)
def create_user_admin(
    *,
    db: Session = Depends(get_db),
    user_in: UserCreate,
    current_user: Identity = Depends(deps.get_current_admin),
):
    """
    Create a user with any role from the admin dashboard.
    """
    user = db.exec(select(User).where(User.email == user_in.email)).first()
    if user:
        raise HTTPException(
            status_code=400,
            detail="The user with this email already exists in the system.",
        )
    db_user = User(
        email=user_in.email,
        password=get_password_hash(user_in.password),
        full_name=user_in.full_name,
        username=user_in.username,
        role=user_in.role or UserRole.USER,
        avatar_url=user_in.avatar_url
    )
    db.add(db_user)
    db.commit()
    db.refresh(db_user)
    return db_user

@router.patch("/{user_id}/active", response_model=UserRead)
def set_user_active(
    *,
    db: Session = Depends(get_db),
    user_id: str,
    update: ActiveUpdate,
    current_user: Identity = Depends(deps.get_current_admin),
    auth: SQLModelAuthBackend = Depends(deps.get_auth_backend),
):
    """
    Activate or deactivate a user.

    Deactivating also revokes every session the user holds.
    """
    db_user = db.get(User, user_id)
    if not db_user:
        raise HTTPException(status_code=404, detail="The user with this id does not exist in the system")
    if db_user.id == current_user.id and not update.is_active:
        raise HTTPException(status_code=400, detail="Users cannot deactivate themselves")

    db_user.is_active = update.is_active
    db.add(db_user)
    db.commit()
    if not update.is_active:
        auth.revoke_all(user_id)
    db.refresh(db_user)
    return db_user

@router.patch("/{user_id}/role", response_model=UserRead)
def set_user_role(
    *,
    db: Session = Depends(get_db),
    user_id: str,
    update: RoleUpdate,
    current_user: Identity = Depends(deps.get_current_admin),
):
    """
    Promote or demote a user. Concurrent edits are last-write-wins.
    """
    db_user = db.get(User, user_id)
    if not db_user:
        raise HTTPException(status_code=404, detail="The user with this id does not exist in the system")

    db_user.role = update.role
    db.add(db_user)
    db.commit()
    db.refresh(db_user)
    return db_user
