"""
SQLModel Table Backend

Implements the TableBackend protocol over a SQLModel session. Rows cross the
boundary as plain dicts so callers stay independent of the ORM.
"""
import logging
from functools import lru_cache
from typing import Any, Dict, List, Optional, Sequence, Type

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import func
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlmodel import Session, SQLModel, select

from taskboard.core.exceptions import (
    BackendUnavailableError,
    NotFoundError,
    QueryError,
    WriteError,
)
from taskboard.models import (
    Client,
    Project,
    Task,
    TaskAssignment,
    User,
    UserRequest,
)

logger = logging.getLogger(__name__)

TABLES: Dict[str, Type[SQLModel]] = {
    "users": User,
    "projects": Project,
    "clients": Client,
    "tasks": Task,
    "task_assignments": TaskAssignment,
    "user_requests": UserRequest,
}

# Never handed out through select()
HIDDEN_COLUMNS = {"users": {"password"}}


@lru_cache(maxsize=None)
def _adapter(model: Type[SQLModel], column: str) -> TypeAdapter:
    return TypeAdapter(model.model_fields[column].annotation)


def _coerce(model: Type[SQLModel], payload: Dict[str, Any]) -> Dict[str, Any]:
    """Convert payload values to the column types declared on ``model`` (e.g. "pending" -> RequestStatus)."""
    coerced = {}
    for key, value in payload.items():
        try:
            coerced[key] = _adapter(model, key).validate_python(value)
        except PydanticValidationError as exc:
            raise WriteError(f"Invalid value for {model.__tablename__}.{key}: {value!r}") from exc
    return coerced


def _row_to_dict(table: str, row: SQLModel) -> Dict[str, Any]:
    # Enum columns load back from the database as plain strings
    model = type(row)
    hidden = HIDDEN_COLUMNS.get(table, set())
    result = {}
    for column in model.model_fields:
        if column in hidden:
            continue
        value = getattr(row, column)
        try:
            result[column] = _adapter(model, column).validate_python(value)
        except PydanticValidationError:
            result[column] = value
    return result


class SQLModelTables:
    def __init__(self, db: Session):
        self.db = db

    def _model(self, table: str) -> Type[SQLModel]:
        try:
            return TABLES[table]
        except KeyError:
            raise QueryError(f"Unknown table '{table}'")

    def _check_columns(self, model: Type[SQLModel], names) -> None:
        unknown = [name for name in names if name not in model.model_fields]
        if unknown:
            raise QueryError(f"Unknown column(s) {unknown} on '{model.__tablename__}'")

    def select(
        self,
        table: str,
        columns: Optional[Sequence[str]] = None,
        filters: Optional[Dict[str, Any]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> List[Dict[str, Any]]:
        model = self._model(table)
        filters = filters or {}
        self._check_columns(model, list(filters) + list(columns or []) + ([order_by] if order_by else []))

        statement = select(model)
        for column, value in filters.items():
            statement = statement.where(getattr(model, column) == value)
        if order_by:
            order_column = getattr(model, order_by)
            statement = statement.order_by(order_column.desc() if descending else order_column)

        try:
            rows = self.db.exec(statement).all()
        except OperationalError as exc:
            raise BackendUnavailableError(f"Query on '{table}' failed: {exc.orig}") from exc
        except SQLAlchemyError as exc:
            raise QueryError(f"Query on '{table}' failed") from exc

        result = [_row_to_dict(table, row) for row in rows]
        if columns:
            result = [{key: row.get(key) for key in columns} for row in result]
        return result

    def select_one(self, table: str, row_id: str) -> Optional[Dict[str, Any]]:
        model = self._model(table)
        try:
            row = self.db.get(model, row_id)
        except OperationalError as exc:
            raise BackendUnavailableError(f"Query on '{table}' failed: {exc.orig}") from exc
        except SQLAlchemyError as exc:
            raise QueryError(f"Query on '{table}' failed") from exc
        return _row_to_dict(table, row) if row is not None else None

    def count(self, table: str) -> int:
        model = self._model(table)
        try:
            return self.db.exec(select(func.count()).select_from(model)).one()
        except OperationalError as exc:
            raise BackendUnavailableError(f"Count on '{table}' failed: {exc.orig}") from exc
        except SQLAlchemyError as exc:
            raise QueryError(f"Count on '{table}' failed") from exc

    def _commit(self, table: str, row: SQLModel = None) -> None:
        try:
            self.db.commit()
            if row is not None:
                self.db.refresh(row)
        except OperationalError as exc:
            self.db.rollback()
            raise BackendUnavailableError(f"Write to '{table}' failed: {exc.orig}") from exc
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.warning("Write to %s rejected: %s", table, exc)
            raise WriteError(f"Write to '{table}' failed") from exc

    def insert(self, table: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        model = self._model(table)
        try:
            self._check_columns(model, payload)
        except QueryError as exc:
            raise WriteError(exc.detail)

        row = model(**_coerce(model, payload))
        self.db.add(row)
        self._commit(table, row)
        return _row_to_dict(table, row)

    def update(self, table: str, payload: Dict[str, Any], match_id: str) -> Dict[str, Any]:
        model = self._model(table)
        try:
            self._check_columns(model, payload)
        except QueryError as exc:
            raise WriteError(exc.detail)

        row = self.db.get(model, match_id)
        if row is None:
            raise NotFoundError(f"No row '{match_id}' in '{table}'")
        for key, value in _coerce(model, payload).items():
            setattr(row, key, value)
        self.db.add(row)
        self._commit(table, row)
        return _row_to_dict(table, row)

    def delete(self, table: str, match_id: str) -> None:
        model = self._model(table)
        row = self.db.get(model, match_id)
        if row is None:
            raise NotFoundError(f"No row '{match_id}' in '{table}'")
        self.db.delete(row)
        self._commit(table)
