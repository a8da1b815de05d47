"""
Authentication Endpoints Module

This module provides authentication endpoints for registration, login, session
bootstrap and logout. Login and bootstrap both report the route set the client
should enter ("admin" for administrators, "standard" for everyone else, "auth"
when there is no usable session).
"""
from fastapi import APIRouter, Depends, Response
from fastapi.security import OAuth2PasswordRequestForm
from taskboard.api import deps
from taskboard.backend.auth import SQLModelAuthBackend
from taskboard.core.config import settings
from taskboard.schemas.auth import SessionRead, Token, UserRegister
from taskboard.schemas.user import UserRead
from taskboard.services.session_manager import SessionManager

router = APIRouter()


@router.post("/register", response_model=UserRead)
def register_user(
    user_in: UserRegister,
    auth: SQLModelAuthBackend = Depends(deps.get_auth_backend),
    tables=Depends(deps.get_tables),
):
    """
    Register a new user account.

    New users are always created with the USER role and an active account.

    Raises:
        ValidationError (422): If a user with this email already exists
    """
    user_id = auth.sign_up(
        user_in.email,
        user_in.password,
        full_name=user_in.full_name,
        username=user_in.username,
    )
    return tables.select_one("users", user_id)


@router.post("/login", response_model=Token)
def login(
    response: Response,
    form_data: OAuth2PasswordRequestForm = Depends(),
    manager: SessionManager = Depends(deps.get_session_manager),
):
    """
    Authenticate a user and issue a session token.

    The token is also set as an HTTP-only cookie for browser clients.
    OAuth2PasswordRequestForm uses the 'username' field; we treat it as email.

    Raises:
        AuthError (401): If credentials are invalid
        AccountDeactivatedError (403): If the account is deactivated; no session survives
    """
    route = manager.sign_in(form_data.username, form_data.password)

    response.set_cookie(
        key="access_token",
        value=f"Bearer {manager.token}",
        httponly=True,  # Cannot be accessed via JavaScript
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,  # Convert minutes to seconds
        samesite="lax"  # CSRF protection
    )
    return {"access_token": manager.token, "token_type": "bearer", "route": route.value}


@router.get("/session", response_model=SessionRead)
def read_session(manager: SessionManager = Depends(deps.get_session_manager)):
    """
    Bootstrap the stored session.

    Unlike the protected endpoints this never answers 401: a missing, expired,
    or revoked session simply comes back as state "unauthenticated".
    """
    route = manager.bootstrap()
    return {"state": manager.state.value, "route": route.value, "user": manager.identity}


@router.post("/logout", response_model=SessionRead)
def logout(response: Response, manager: SessionManager = Depends(deps.get_session_manager)):
    """
    Revoke the current session and clear the cookie.

    Safe to call without a session.
    """
    route = manager.sign_out()
    response.delete_cookie("access_token")
    return {"state": manager.state.value, "route": route.value, "user": None}
