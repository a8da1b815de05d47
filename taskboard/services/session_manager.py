"""
Session/Role Manager

Owns the identity of one running client: bootstraps it from a stored session
token, signs in and out, derives role flags, and decides which route set the
client may enter. One manager per client; it is constructed with its backends
and torn down with close(), never shared through module state.

Lifecycle::

    UNAUTHENTICATED --sign_in--> AUTHENTICATING --ok--> AUTHENTICATED
          ^                            |                      |
          +---------- failure ---------+------ sign_out ------+

A deactivated identity never keeps a live session: both bootstrap() and
sign_in() revoke the session before reporting the account as unusable.
"""
import logging
from enum import Enum
from typing import Optional

from taskboard.backend.base import AuthBackend, AuthSession, TableBackend
from taskboard.core.exceptions import (
    AccountDeactivatedError,
    BackendUnavailableError,
    DataFetchError,
    PermissionDeniedError,
    TaskboardError,
)
from taskboard.models.user import UserRole
from taskboard.schemas.user import Identity

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATING = "authenticating"
    AUTHENTICATED = "authenticated"


class RouteSet(str, Enum):
    AUTH = "auth"          # login / register screens
    ADMIN = "admin"        # admin dashboard
    STANDARD = "standard"  # everyone else


def route_for_role(role) -> RouteSet:
    """Only ADMIN reaches the admin route set; MANAGER and USER share the standard one."""
    if UserRole.parse(role) == UserRole.ADMIN:
        return RouteSet.ADMIN
    return RouteSet.STANDARD


class SessionManager:
    def __init__(self, auth: AuthBackend, tables: TableBackend, token: Optional[str] = None):
        self._auth = auth
        self._tables = tables
        self._stored_token = token
        self._session: Optional[AuthSession] = None
        self._identity: Optional[Identity] = None
        self._state = SessionState.UNAUTHENTICATED
        self._closed = False

    # ---- derived state ----

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def session(self) -> Optional[AuthSession]:
        return self._session

    @property
    def identity(self) -> Optional[Identity]:
        return self._identity

    @property
    def token(self) -> Optional[str]:
        return self._session.token if self._session else self._stored_token

    @property
    def is_authenticated(self) -> bool:
        return self._state == SessionState.AUTHENTICATED

    @property
    def is_admin(self) -> bool:
        return self.is_authenticated and self._identity.role == UserRole.ADMIN

    @property
    def is_manager(self) -> bool:
        return self.is_authenticated and self._identity.role == UserRole.MANAGER

    @property
    def route(self) -> RouteSet:
        if not self.is_authenticated:
            return RouteSet.AUTH
        return route_for_role(self._identity.role)

    def require_role(self, *roles: UserRole) -> Identity:
        if not self.is_authenticated:
            raise PermissionDeniedError("Not authenticated")
        if self._identity.role not in roles:
            raise PermissionDeniedError(
                f"The user does not have enough privileges. Required roles: {[r.value for r in roles]}"
            )
        return self._identity

    # ---- internals ----

    def _ensure_open(self) -> None:
        if self._closed:
            raise RuntimeError("SessionManager has been closed")

    def _snapshot(self):
        return self._state, self._session, self._identity, self._stored_token

    def _restore(self, snapshot) -> None:
        self._state, self._session, self._identity, self._stored_token = snapshot

    def _clear(self) -> None:
        self._state = SessionState.UNAUTHENTICATED
        self._session = None
        self._identity = None

    def _fetch_identity(self, user_id: str) -> Identity:
        try:
            row = self._tables.select_one("users", user_id)
        except BackendUnavailableError:
            raise
        except TaskboardError as exc:
            raise DataFetchError("Could not load the user profile") from exc
        if row is None:
            raise DataFetchError("User profile not found")
        return Identity.model_validate(row)

    def _revoke_quietly(self, token: str) -> None:
        try:
            self._auth.sign_out(token)
        except TaskboardError as exc:
            logger.warning("Could not revoke session: %s", exc)

    # ---- operations ----

    def bootstrap(self) -> RouteSet:
        """
        Resume the stored session, if any.

        A session whose profile cannot be read, or whose identity is inactive,
        is revoked and the manager stays unauthenticated. Nothing is retried.
        BackendUnavailableError propagates with the session and state untouched.
        """
        self._ensure_open()
        session = self._auth.current_session(self._stored_token)
        if session is None:
            self._clear()
            self._stored_token = None
            return RouteSet.AUTH

        try:
            identity = self._fetch_identity(session.user_id)
        except BackendUnavailableError:
            raise
        except TaskboardError as exc:
            logger.warning("Bootstrap could not load user %s, signing out: %s", session.user_id, exc)
            self._revoke_quietly(session.token)
            self._clear()
            self._stored_token = None
            return RouteSet.AUTH

        if not identity.is_active:
            logger.warning("Deactivated user %s held a session; revoking", identity.id)
            self._auth.sign_out(session.token)
            self._clear()
            self._stored_token = None
            return RouteSet.AUTH

        self._session = session
        self._identity = identity
        self._stored_token = session.token
        self._state = SessionState.AUTHENTICATED
        return self.route

    def sign_in(self, email: str, password: str) -> RouteSet:
        """
        Authenticate and load the identity.

        Raises:
            AuthError: credentials rejected
            DataFetchError: credentials accepted but the profile row is unreadable
            AccountDeactivatedError: the identity is inactive; the new session is
                revoked before this is raised
            BackendUnavailableError: from any step

        On any failure the manager is left exactly as it was before the call.
        """
        self._ensure_open()
        prior = self._snapshot()
        self._state = SessionState.AUTHENTICATING
        try:
            session = self._auth.sign_in(email, password)

            try:
                identity = self._fetch_identity(session.user_id)
            except TaskboardError:
                self._revoke_quietly(session.token)
                raise

            if not identity.is_active:
                self._auth.sign_out(session.token)
                raise AccountDeactivatedError()
        except BaseException:
            self._restore(prior)
            raise

        # One live session per handle; the credential being replaced is revoked
        replaced = prior[1].token if prior[1] is not None else prior[3]
        if replaced and replaced != session.token:
            self._revoke_quietly(replaced)

        self._session = session
        self._identity = identity
        self._stored_token = session.token
        self._state = SessionState.AUTHENTICATED
        logger.info("User %s signed in as %s", identity.id, identity.role.value)
        return self.route

    def sign_out(self) -> RouteSet:
        """Revoke the session and forget the identity. A no-op when nothing is held."""
        self._ensure_open()
        token = self.token
        if token is not None:
            self._auth.sign_out(token)
            if self._identity is not None:
                logger.info("User %s signed out", self._identity.id)
        self._clear()
        self._stored_token = None
        return RouteSet.AUTH

    def close(self) -> None:
        """Tear the handle down. The stored credential is left alone for the next bootstrap."""
        self._clear()
        self._stored_token = None
        self._closed = True

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()
