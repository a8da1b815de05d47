"""
Screen Data Loaders

Each function gathers everything one screen needs with a single concurrent
join. ``open_tables`` is a zero-argument context manager factory yielding a
TableBackend; every loader opens its own, since loaders run on separate
threads and database sessions must not be shared between them.
"""
from typing import Any, Callable, ContextManager, Dict

from taskboard.backend.base import TableBackend
from taskboard.services.loader import load_all

TablesFactory = Callable[[], ContextManager[TableBackend]]

DASHBOARD_COUNTS = {
    "total_projects": "projects",
    "total_clients": "clients",
    "total_tasks": "tasks",
    "active_users": "users",
    "total_task_assignments": "task_assignments",
    "total_requests": "user_requests",
}


def _with_tables(open_tables: TablesFactory, fn: Callable[[TableBackend], Any]) -> Callable[[], Any]:
    def load():
        with open_tables() as tables:
            return fn(tables)
    return load


async def dashboard_stats(open_tables: TablesFactory) -> Dict[str, int]:
    return await load_all(**{
        key: _with_tables(open_tables, lambda t, table=table: t.count(table))
        for key, table in DASHBOARD_COUNTS.items()
    })


async def task_board_data(open_tables: TablesFactory) -> Dict[str, Any]:
    """Tasks (newest first) with the projects and users needed to label them."""
    return await load_all(
        tasks=_with_tables(open_tables, lambda t: t.select("tasks", order_by="created_at", descending=True)),
        projects=_with_tables(open_tables, lambda t: t.select("projects", order_by="name")),
        users=_with_tables(open_tables, lambda t: t.select("users", columns=["id", "full_name"], order_by="full_name")),
    )


async def assign_screen_data(open_tables: TablesFactory, task_id: str) -> Dict[str, Any]:
    """The task being assigned plus every assignable user, clients and projects."""
    return await load_all(
        task=_with_tables(open_tables, lambda t: t.select_one("tasks", task_id)),
        users=_with_tables(open_tables, lambda t: t.select("users", filters={"is_active": True}, order_by="full_name")),
        projects=_with_tables(open_tables, lambda t: t.select("projects", order_by="name")),
        clients=_with_tables(open_tables, lambda t: t.select("clients", order_by="name")),
    )
