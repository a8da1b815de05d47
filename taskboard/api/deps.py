"""
API Dependencies Module

This module provides FastAPI dependency functions for authentication and authorization.
Each request builds its own SessionManager from the bearer token (API clients) or the
HTTP-only cookie (browser clients) and bootstraps it, so a deactivated account is
signed out on its very next request.
"""
from contextlib import contextmanager
from typing import Iterator, List, Optional
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from sqlmodel import Session

from taskboard.backend.auth import SQLModelAuthBackend
from taskboard.backend.notify import get_notifier
from taskboard.backend.tables import SQLModelTables
from taskboard.core.config import settings
from taskboard.db.session import engine, get_db
from taskboard.models.user import UserRole
from taskboard.schemas.user import Identity
from taskboard.services.session_manager import SessionManager

# auto_error=False allows us to check cookies as a fallback
reusable_oauth2 = OAuth2PasswordBearer(
    tokenUrl=f"{settings.API_V1_STR}/auth/login",
    auto_error=False  # Don't raise error immediately if Authorization header is missing
)


def get_token(request: Request, token: Optional[str] = Depends(reusable_oauth2)) -> Optional[str]:
    """Bearer token from the Authorization header, falling back to the access_token cookie."""
    if not token:
        token = request.cookies.get("access_token")
        # Cookie format is "Bearer <token>", so we need to extract the token
        if token and token.startswith("Bearer "):
            token = token.replace("Bearer ", "")
    return token or None


def get_tables(db: Session = Depends(get_db)) -> SQLModelTables:
    return SQLModelTables(db)


def get_auth_backend(db: Session = Depends(get_db)) -> SQLModelAuthBackend:
    return SQLModelAuthBackend(db)


def get_session_manager(
    auth: SQLModelAuthBackend = Depends(get_auth_backend),
    tables: SQLModelTables = Depends(get_tables),
    token: Optional[str] = Depends(get_token),
) -> Iterator[SessionManager]:
    """An un-bootstrapped manager holding whatever token the client sent."""
    manager = SessionManager(auth, tables, token=token)
    try:
        yield manager
    finally:
        manager.close()


def get_current_session(
    manager: SessionManager = Depends(get_session_manager),
) -> SessionManager:
    """
    Dependency that resumes the client's session.

    Raises:
        HTTPException 401: If no live session exists for the supplied token,
            including sessions revoked because the account was deactivated
    """
    manager.bootstrap()
    if not manager.is_authenticated:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return manager


def get_current_user(
    manager: SessionManager = Depends(get_current_session),
) -> Identity:
    return manager.identity


class RoleChecker:
    """
    Dependency factory for checking user roles.

    Usage: Depends(RoleChecker([UserRole.ADMIN, UserRole.MANAGER]))
    """
    def __init__(self, allowed_roles: List[UserRole]):
        self.allowed_roles = allowed_roles

    def __call__(self, current_user: Identity = Depends(get_current_user)) -> Identity:
        if current_user.role not in self.allowed_roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"The user does not have enough privileges. Required roles: {[r.value for r in self.allowed_roles]}"
            )
        return current_user


get_current_admin = RoleChecker([UserRole.ADMIN])
get_current_assignor = RoleChecker([UserRole.ADMIN, UserRole.MANAGER])


def get_notifier_dep():
    return get_notifier()


@contextmanager
def _engine_tables():
    with Session(engine) as session:
        yield SQLModelTables(session)


def get_tables_factory():
    """Factory for loaders that run on worker threads and need their own session."""
    return _engine_tables
