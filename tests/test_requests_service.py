from __future__ import annotations

import pytest

from taskboard.core.exceptions import NotFoundError, PermissionDeniedError, ValidationError
from taskboard.services.requests import RequestService

from conftest import FakeTables


@pytest.fixture
def service():
    return RequestService(FakeTables())


@pytest.mark.parametrize("title, description, assignee", [
    ("", "details", "bob"),
    ("Review PR", "   ", "bob"),
    ("Review PR", "details", ""),
])
def test_every_field_is_required(service, title, description, assignee):
    with pytest.raises(ValidationError) as excinfo:
        service.create_request("alice", assignee, title, description)

    assert excinfo.value.detail == "Please fill in all fields"
    assert service.tables.calls == []


def test_create_trims_and_starts_pending(service):
    row = service.create_request("alice", " bob ", "  Review PR ", " see #12 ")

    assert row["title"] == "Review PR"
    assert row["description"] == "see #12"
    assert row["assigned_to"] == "bob"
    assert row["user_id"] == "alice"
    assert row["status"] == "pending"


def test_listings_split_by_direction(service):
    service.create_request("alice", "bob", "one", "x")
    service.create_request("bob", "alice", "two", "y")

    assert [r["title"] for r in service.list_for_assignee("bob")] == ["one"]
    assert [r["title"] for r in service.list_for_requester("bob")] == ["two"]


def test_only_assignee_may_change_status(service):
    row = service.create_request("alice", "bob", "Review PR", "details")

    with pytest.raises(PermissionDeniedError):
        service.update_status(row["id"], "alice", "completed")

    updated = service.update_status(row["id"], "bob", "IN_PROGRESS", narration="on it")
    assert updated["status"] == "in_progress"
    assert updated["narration"] == "on it"


def test_unknown_status_and_missing_request(service):
    row = service.create_request("alice", "bob", "Review PR", "details")

    with pytest.raises(ValidationError):
        service.update_status(row["id"], "bob", "archived")
    with pytest.raises(NotFoundError):
        service.update_status("nope", "bob", "completed")
