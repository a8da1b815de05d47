"""
SQLModel Auth Backend

Email/password authentication over the users table, with sessions persisted
in the session table. The token handed to clients is a signed JWT whose
``sid`` claim names the session row.
"""
import logging
import time
from datetime import timedelta
from typing import Optional

from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlmodel import Session, select

from taskboard.backend.base import AuthSession
from taskboard.core.config import settings
from taskboard.core.exceptions import AuthError, BackendUnavailableError, ValidationError, WriteError
from taskboard.core.security import (
    create_access_token,
    decode_access_token,
    get_password_hash,
    verify_password,
)
from taskboard.models.auth_models import Session as UserSession
from taskboard.models.user import User, UserRole

logger = logging.getLogger(__name__)


def _now_ms() -> int:
    return int(time.time() * 1000)


class SQLModelAuthBackend:
    def __init__(self, db: Session):
        self.db = db

    def _commit(self) -> None:
        try:
            self.db.commit()
        except OperationalError as exc:
            self.db.rollback()
            raise BackendUnavailableError("Auth backend unavailable") from exc
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise WriteError("Could not persist session") from exc

    def sign_in(self, email: str, password: str) -> AuthSession:
        try:
            user = self.db.exec(select(User).where(User.email == email)).first()
        except OperationalError as exc:
            raise BackendUnavailableError("Auth backend unavailable") from exc

        # Verify user exists and password is correct
        if not user or not verify_password(password, user.password):
            raise AuthError("Incorrect email or password")

        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
        row = UserSession(
            userId=user.id,
            expires=_now_ms() + int(expires_delta.total_seconds() * 1000),
            created_at=_now_ms(),
        )
        self.db.add(row)
        self._commit()

        token = create_access_token(user.id, row.sessionToken, expires_delta=expires_delta)
        return AuthSession(token=token, user_id=user.id, expires_at=row.expires)

    def sign_out(self, token: str) -> None:
        claims = decode_access_token(token) if token else None
        if claims is None:
            return
        try:
            row = self.db.get(UserSession, claims["sid"])
        except OperationalError as exc:
            raise BackendUnavailableError("Auth backend unavailable") from exc
        if row is None:
            return
        self.db.delete(row)
        self._commit()

    def current_session(self, token: Optional[str]) -> Optional[AuthSession]:
        if not token:
            return None
        claims = decode_access_token(token)
        if claims is None:
            return None
        try:
            row = self.db.get(UserSession, claims["sid"])
        except OperationalError as exc:
            raise BackendUnavailableError("Auth backend unavailable") from exc
        if row is None or row.userId != claims["sub"]:
            return None
        if row.expires <= _now_ms():
            # Expired rows are dead weight; drop them on sight
            self.db.delete(row)
            self._commit()
            return None
        return AuthSession(token=token, user_id=row.userId, expires_at=row.expires)

    def sign_up(self, email: str, password: str, full_name: str = None, username: str = None) -> str:
        """
        Register credentials and the matching profile row.

        New accounts always start as active USERs; only an admin can promote them.
        """
        if not email or not password:
            raise ValidationError("Email and password are required")
        try:
            existing = self.db.exec(select(User).where(User.email == email)).first()
        except OperationalError as exc:
            raise BackendUnavailableError("Auth backend unavailable") from exc
        if existing:
            raise ValidationError("User with this email already exists.")

        user = User(
            email=email,
            password=get_password_hash(password),
            full_name=full_name,
            username=username,
            role=UserRole.USER,
        )
        self.db.add(user)
        self._commit()
        return user.id

    def revoke_all(self, user_id: str) -> int:
        """Delete every session belonging to ``user_id``. Returns the number removed."""
        try:
            rows = self.db.exec(select(UserSession).where(UserSession.userId == user_id)).all()
        except OperationalError as exc:
            raise BackendUnavailableError("Auth backend unavailable") from exc
        for row in rows:
            self.db.delete(row)
        self._commit()
        if rows:
            logger.info("Revoked %d session(s) for user %s", len(rows), user_id)
        return len(rows)
