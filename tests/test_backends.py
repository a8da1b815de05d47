from __future__ import annotations

import warnings

import pytest
from sqlalchemy.exc import OperationalError
from sqlmodel import Session

from taskboard.backend.auth import SQLModelAuthBackend
from taskboard.backend.tables import SQLModelTables
from taskboard.core.exceptions import BackendUnavailableError, WriteError
from taskboard.core.security import create_access_token
from taskboard.models.request import RequestStatus
from taskboard.models.task import TaskPriority


@pytest.fixture
def tables(db_engine):
    with Session(db_engine) as session:
        yield SQLModelTables(session)


def test_update_stores_enum_members_for_enum_columns(tables):
    row = tables.insert("user_requests", {
        "title": "Review", "description": "PR #12", "user_id": "a", "assigned_to": "b", "status": "pending",
    })

    with warnings.catch_warnings():
        warnings.simplefilter("error", UserWarning)
        updated = tables.update("user_requests", {"status": "in_progress"}, row["id"])
        listed = tables.select("user_requests")

    assert updated["status"] is RequestStatus.IN_PROGRESS
    assert listed[0]["status"] is RequestStatus.IN_PROGRESS


def test_insert_coerces_and_rejects_bad_values(tables):
    with warnings.catch_warnings():
        warnings.simplefilter("error", UserWarning)
        task = tables.insert("tasks", {"title": "Deploy", "priority": "high"})
    assert task["priority"] is TaskPriority.HIGH

    with pytest.raises(WriteError):
        tables.insert("tasks", {"title": "Deploy", "priority": "urgent"})


class UnreachableDb:
    """Session stand-in whose every read fails the way a dropped connection does."""

    def _fail(self, *args, **kwargs):
        raise OperationalError("SELECT 1", {}, Exception("connection refused"))

    exec = _fail
    get = _fail


@pytest.mark.parametrize("call", [
    lambda auth: auth.sign_in("a@example.com", "pw"),
    lambda auth: auth.sign_out(create_access_token("user-1", "sid-1")),
    lambda auth: auth.current_session(create_access_token("user-1", "sid-1")),
    lambda auth: auth.sign_up("a@example.com", "pw"),
    lambda auth: auth.revoke_all("user-1"),
])
def test_auth_reads_report_outage_as_backend_unavailable(call):
    with pytest.raises(BackendUnavailableError):
        call(SQLModelAuthBackend(UnreachableDb()))
