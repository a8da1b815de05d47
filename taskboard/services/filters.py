"""
List Filters

Pure predicates applied to rows that have already been fetched. Nothing here
touches the backend. Every filter treats an unset value as "match
everything", and filters compose with AND.
"""
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

ALL = "all"
LAST_N_DAYS = 5


class DateFilter(str, Enum):
    ALL = "all"
    TODAY = "today"
    LAST_5_DAYS = "last_5_days"
    UPCOMING = "upcoming"


def to_day(value) -> Optional[date]:
    """Reduce an ISO date/datetime string, date or datetime to a calendar day."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value)
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        return date.fromisoformat(text[:10])


def matches_date(due, date_filter, today: date) -> bool:
    """
    Day-granularity comparison of a due date against ``today``.

    - TODAY: due on today
    - LAST_5_DAYS: strictly before today and strictly after today - 5 days,
      so with today = 2024-06-15 it covers 06-11 through 06-14
    - UPCOMING: strictly after today

    A record without a due date only passes the ALL filter.
    """
    date_filter = DateFilter(date_filter or DateFilter.ALL)
    day = to_day(due)
    if day is None:
        return date_filter == DateFilter.ALL

    if date_filter == DateFilter.TODAY:
        return day == today
    if date_filter == DateFilter.LAST_5_DAYS:
        return today - timedelta(days=LAST_N_DAYS) < day < today
    if date_filter == DateFilter.UPCOMING:
        return day > today
    return True


def matches_choice(value, wanted) -> bool:
    """Exact, case-insensitive match against one enumeration value."""
    if wanted is None:
        return True
    wanted = getattr(wanted, "value", wanted)
    if wanted == "" or str(wanted).lower() == ALL:
        return True
    if value is None:
        return False
    value = getattr(value, "value", value)
    return str(value).lower() == str(wanted).lower()


def matches_search(query: Optional[str], *fields) -> bool:
    """Case-insensitive substring match over any of ``fields``."""
    if not query:
        return True
    needle = query.lower()
    return any(needle in str(f).lower() for f in fields if f)


def filter_tasks(
    tasks: Iterable[Dict[str, Any]],
    status=None,
    priority=None,
    project_id: Optional[str] = None,
    search: Optional[str] = None,
) -> List[Dict[str, Any]]:
    return [
        task for task in tasks
        if (not project_id or task.get("project_id") == project_id)
        and matches_choice(task.get("status"), status)
        and matches_choice(task.get("priority"), priority)
        and matches_search(search, task.get("title"), task.get("description"))
    ]


def filter_assignments(
    assignments: Iterable[Dict[str, Any]],
    date_filter=DateFilter.ALL,
    status=None,
    today: Optional[date] = None,
) -> List[Dict[str, Any]]:
    """
    Filter assignment rows by due date and by the status of their task.

    Rows are expected to carry the task either nested under ``"task"`` or
    flattened as ``"task_status"``.
    """
    today = today or date.today()

    def task_status(row):
        task = row.get("task") or {}
        return task.get("status", row.get("task_status"))

    return [
        row for row in assignments
        if matches_date(row.get("due_date"), date_filter, today)
        and matches_choice(task_status(row), status)
    ]
