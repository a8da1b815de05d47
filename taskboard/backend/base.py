"""
Backend Capability Boundary

The session manager and the workflows never touch the database or the push
service directly; they are handed objects satisfying these protocols. The
SQLModel-backed implementations live next to this module, and tests pass
in-memory fakes.
"""
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol, Sequence


@dataclass(frozen=True)
class AuthSession:
    """A live credential bound to exactly one user."""
    token: str
    user_id: str
    expires_at: int  # timestamp_ms


class AuthBackend(Protocol):
    def sign_in(self, email: str, password: str) -> AuthSession:
        """Create a session. Raises AuthError when the credentials are rejected."""

    def sign_out(self, token: str) -> None:
        """Revoke the session behind ``token``. Unknown tokens are ignored."""

    def current_session(self, token: Optional[str]) -> Optional[AuthSession]:
        """Return the live session for ``token``, or None."""

    def sign_up(self, email: str, password: str, full_name: str = None, username: str = None) -> str:
        """Create credentials and return the new user id."""


class TableBackend(Protocol):
    def select(
        self,
        table: str,
        columns: Optional[Sequence[str]] = None,
        filters: Optional[Dict[str, Any]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> List[Dict[str, Any]]:
        ...

    def select_one(self, table: str, row_id: str) -> Optional[Dict[str, Any]]:
        ...

    def count(self, table: str) -> int:
        ...

    def insert(self, table: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        ...

    def update(self, table: str, payload: Dict[str, Any], match_id: str) -> Dict[str, Any]:
        ...

    def delete(self, table: str, match_id: str) -> None:
        ...


class Notifier(Protocol):
    def send(self, address: str, title: str, body: str, data: Optional[Dict[str, Any]] = None) -> None:
        """Deliver one push notification. Raises NotifyError on failure."""
