from __future__ import annotations

import uuid
from contextlib import contextmanager
from typing import Any, Dict, List, Optional

import pytest
from sqlmodel import Session, create_engine

from taskboard.backend.base import AuthSession
from taskboard.core.exceptions import AuthError, NotFoundError, NotifyError


class FakeAuth:
    """In-memory AuthBackend. ``users`` maps email -> (password, user_id)."""

    def __init__(self, users: Optional[Dict[str, tuple]] = None):
        self.users = users or {}
        self.sessions: Dict[str, AuthSession] = {}
        self.calls: List[tuple] = []
        self.fail: Dict[str, Exception] = {}
        self._n = 0

    def _maybe_fail(self, op):
        if op in self.fail:
            raise self.fail[op]

    def sign_in(self, email, password):
        self.calls.append(("sign_in", email))
        self._maybe_fail("sign_in")
        entry = self.users.get(email)
        if entry is None or entry[0] != password:
            raise AuthError("Incorrect email or password")
        self._n += 1
        session = AuthSession(token=f"tok-{self._n}", user_id=entry[1], expires_at=10**13)
        self.sessions[session.token] = session
        return session

    def sign_out(self, token):
        self.calls.append(("sign_out", token))
        self._maybe_fail("sign_out")
        self.sessions.pop(token, None)

    def current_session(self, token):
        self.calls.append(("current_session", token))
        self._maybe_fail("current_session")
        return self.sessions.get(token) if token else None

    def sign_up(self, email, password, full_name=None, username=None):
        user_id = str(uuid.uuid4())
        self.users[email] = (password, user_id)
        return user_id

    def live_sessions_for(self, user_id):
        return [s for s in self.sessions.values() if s.user_id == user_id]


class FakeTables:
    """In-memory TableBackend that records every call."""

    def __init__(self, rows: Optional[Dict[str, List[Dict[str, Any]]]] = None):
        self.rows: Dict[str, Dict[str, Dict[str, Any]]] = {}
        for table, items in (rows or {}).items():
            self.rows[table] = {item["id"]: dict(item) for item in items}
        self.calls: List[tuple] = []
        self.fail: Dict[Any, Exception] = {}

    def _call(self, op, table):
        self.calls.append((op, table))
        exc = self.fail.get((op, table)) or self.fail.get(op)
        if exc is not None:
            raise exc

    def _table(self, table):
        return self.rows.setdefault(table, {})

    def select(self, table, columns=None, filters=None, order_by=None, descending=False):
        self._call("select", table)
        result = [
            dict(row) for row in self._table(table).values()
            if all(row.get(k) == v for k, v in (filters or {}).items())
        ]
        if order_by:
            result.sort(key=lambda r: (r.get(order_by) is None, r.get(order_by) or ""), reverse=descending)
        if columns:
            result = [{k: row.get(k) for k in columns} for row in result]
        return result

    def select_one(self, table, row_id):
        self._call("select_one", table)
        row = self._table(table).get(row_id)
        return dict(row) if row is not None else None

    def count(self, table):
        self._call("count", table)
        return len(self._table(table))

    def insert(self, table, payload):
        self._call("insert", table)
        row = dict(payload)
        row.setdefault("id", str(uuid.uuid4()))
        self._table(table)[row["id"]] = row
        return dict(row)

    def update(self, table, payload, match_id):
        self._call("update", table)
        row = self._table(table).get(match_id)
        if row is None:
            raise NotFoundError(f"No row '{match_id}' in '{table}'")
        row.update(payload)
        return dict(row)

    def delete(self, table, match_id):
        self._call("delete", table)
        if self._table(table).pop(match_id, None) is None:
            raise NotFoundError(f"No row '{match_id}' in '{table}'")


class RecordingNotifier:
    def __init__(self, error: Optional[Exception] = None):
        self.sent: List[tuple] = []
        self.error = error

    def send(self, address, title, body, data=None):
        self.sent.append((address, title, body, data))
        if self.error is not None:
            raise self.error


def user_row(user_id, role="USER", is_active=True, push_token=None, full_name=None):
    return {
        "id": user_id,
        "email": f"{user_id}@example.com",
        "full_name": full_name or user_id.title(),
        "role": role,
        "is_active": is_active,
        "push_token": push_token,
    }


@pytest.fixture
def fake_auth():
    return FakeAuth()


@pytest.fixture
def fake_tables():
    return FakeTables()


# ---- API fixtures ----

@pytest.fixture
def db_engine(tmp_path):
    from taskboard.db.session import init_db

    engine = create_engine(
        f"sqlite:///{tmp_path / 'test.db'}",
        connect_args={"check_same_thread": False},
    )
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def api_notifier():
    return RecordingNotifier()


@pytest.fixture
def client(db_engine, api_notifier):
    from fastapi.testclient import TestClient

    from taskboard.api import deps
    from taskboard.backend.tables import SQLModelTables
    from taskboard.db.session import get_db
    from taskboard.main import app

    def override_get_db():
        with Session(db_engine) as session:
            yield session

    @contextmanager
    def open_tables():
        with Session(db_engine) as session:
            yield SQLModelTables(session)

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[deps.get_tables_factory] = lambda: open_tables
    app.dependency_overrides[deps.get_notifier_dep] = lambda: api_notifier
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def make_user(db_engine):
    from taskboard.core.security import get_password_hash
    from taskboard.models.user import User

    def make(email, password="secret-pass", role="USER", is_active=True, push_token=None, full_name=None):
        with Session(db_engine) as session:
            user = User(
                email=email,
                password=get_password_hash(password),
                role=role,
                is_active=is_active,
                push_token=push_token,
                full_name=full_name or email.split("@")[0],
            )
            session.add(user)
            session.commit()
            session.refresh(user)
            return user.id

    return make


@pytest.fixture
def login(client):
    def do_login(email, password="secret-pass"):
        response = client.post("/api/v1/auth/login", data={"username": email, "password": password})
        client.cookies.clear()
        assert response.status_code == 200, response.text
        return {"Authorization": f"Bearer {response.json()['access_token']}"}

    return do_login
