from __future__ import annotations

from datetime import date

import pytest

from taskboard.services.filters import (
    DateFilter,
    filter_assignments,
    filter_tasks,
    matches_choice,
    matches_date,
    matches_search,
)

TODAY = date(2024, 6, 15)


def assignment(due, status="pending"):
    return {"id": due or "none", "due_date": due, "task": {"status": status}}


def test_last_5_days_is_strict_on_both_ends():
    rows = [assignment(d) for d in ("2024-06-15", "2024-06-14", "2024-06-10", "2024-06-09", "2024-06-16")]

    picked = filter_assignments(rows, DateFilter.LAST_5_DAYS, today=TODAY)

    assert [r["due_date"] for r in picked] == ["2024-06-14"]


def test_last_5_days_window_interior():
    assert matches_date("2024-06-11", DateFilter.LAST_5_DAYS, TODAY)
    assert not matches_date("2024-06-10", DateFilter.LAST_5_DAYS, TODAY)


def test_today_and_upcoming():
    assert matches_date("2024-06-15T18:00:00", DateFilter.TODAY, TODAY)
    assert not matches_date("2024-06-14", DateFilter.TODAY, TODAY)
    assert matches_date("2024-06-16", DateFilter.UPCOMING, TODAY)
    assert not matches_date("2024-06-15", DateFilter.UPCOMING, TODAY)


def test_missing_due_date_only_matches_all():
    assert matches_date(None, DateFilter.ALL, TODAY)
    for f in (DateFilter.TODAY, DateFilter.LAST_5_DAYS, DateFilter.UPCOMING):
        assert not matches_date(None, f, TODAY)


@pytest.mark.parametrize("query", ["deploy", "SERVICE", "oy serv"])
def test_search_is_case_insensitive_substring(query):
    assert matches_search(query, "Deploy Service", "")


def test_search_miss():
    assert not matches_search("deployx", "Deploy Service", "rolls out the api")


def test_search_covers_description():
    tasks = [
        {"title": "Write docs", "description": "Deploy guide", "status": "pending"},
        {"title": "Fix bug", "description": None, "status": "pending"},
    ]
    assert [t["title"] for t in filter_tasks(tasks, search="deploy")] == ["Write docs"]


def test_choice_is_case_insensitive_and_blank_matches_all():
    assert matches_choice("IN_PROGRESS", "in_progress")
    assert not matches_choice("pending", "completed")
    assert matches_choice("pending", None)
    assert matches_choice("pending", "")
    assert matches_choice("pending", "all")


def test_filters_compose_with_and():
    tasks = [
        {"title": "Deploy Service", "status": "pending", "priority": "high", "project_id": "p1"},
        {"title": "Deploy Docs", "status": "completed", "priority": "high", "project_id": "p1"},
        {"title": "Deploy Web", "status": "pending", "priority": "low", "project_id": "p1"},
        {"title": "Deploy Api", "status": "pending", "priority": "high", "project_id": "p2"},
    ]

    picked = filter_tasks(tasks, status="PENDING", priority="high", project_id="p1", search="deploy")

    assert [t["title"] for t in picked] == ["Deploy Service"]
    assert len(filter_tasks(tasks)) == 4


def test_assignment_status_and_date_compose():
    rows = [
        assignment("2024-06-14", "completed"),
        assignment("2024-06-14", "pending"),
        assignment("2024-06-20", "completed"),
    ]

    picked = filter_assignments(rows, DateFilter.LAST_5_DAYS, status="completed", today=TODAY)

    assert len(picked) == 1
    assert picked[0]["task"]["status"] == "completed"
