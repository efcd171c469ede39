"""Direct SQL implementation of the data access interface"""

import asyncio
import logging
from typing import Any, Callable, Dict, List

from sqlalchemy.exc import DataError, IntegrityError, OperationalError, SQLAlchemyError, StatementError
from sqlalchemy.orm import Session

from fraudguard.domain.exceptions import (
    BackendUnavailableError,
    BackendValidationError,
    ConflictError,
    DataAccessError,
    UnknownBackendError,
)
from fraudguard.infrastructure.backend.base import EQ, GTE, IN, NOT_NULL, DataAccess, Query
from fraudguard.infrastructure.database.models import TABLES
from fraudguard.infrastructure.observability.metrics import backend_failure_counter

logger = logging.getLogger(__name__)

UNIQUE_VIOLATION_CODES = {"23505", "SQLITE_CONSTRAINT_UNIQUE", "SQLITE_CONSTRAINT_PRIMARYKEY"}


def _is_unique_violation(error: IntegrityError) -> bool:
    orig = error.orig
    code = getattr(orig, "pgcode", None) or getattr(orig, "sqlite_errorname", None)
    return code in UNIQUE_VIOLATION_CODES


def classify_error(error: SQLAlchemyError, table: str) -> DataAccessError:
    if isinstance(error, IntegrityError):
        if _is_unique_violation(error):
            return ConflictError(f"{table}: duplicate key", table=table)
        return BackendValidationError(f"{table}: constraint violation", table=table)
    if isinstance(error, OperationalError):
        return BackendUnavailableError(f"{table}: database unavailable", table=table)
    if isinstance(error, (DataError, StatementError)):
        return BackendValidationError(f"{table}: invalid data", table=table)
    return UnknownBackendError(f"{table}: {error.__class__.__name__}", table=table)


class SqlBackend(DataAccess):
    """Repository over the backend tables through SQLAlchemy sessions

    Each call opens its own session and runs in a worker thread, so a slow
    query never blocks the event loop and ``asyncio.wait_for`` around a call
    can give up on it. The abandoned query itself keeps running until the
    database ends it (see ``db_statement_timeout_ms``).
    """

    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    def _model(self, table: str):
        try:
            return TABLES[table]
        except KeyError:
            raise BackendValidationError(f"Unknown table: {table}", table=table) from None

    def _column(self, model, table: str, name: str):
        column = getattr(model, name, None)
        if column is None:
            raise BackendValidationError(f"Unknown column {table}.{name}", table=table)
        return column

    def _fail(self, db: Session, error: SQLAlchemyError, table: str) -> DataAccessError:
        db.rollback()
        mapped = classify_error(error, table)
        backend_failure_counter.labels(kind=mapped.kind).inc()
        logger.warning("Database operation failed", extra={"table": table, "kind": mapped.kind})
        return mapped

    @staticmethod
    def _to_dict(obj, columns) -> Dict[str, Any]:
        names = [c.name for c in obj.__table__.columns] if columns == ("*",) else columns
        return {name: getattr(obj, name) for name in names}

    async def select(self, query: Query) -> List[Dict[str, Any]]:
        if query.matches_nothing:
            return []
        model = self._model(query.table)
        for name in query.columns:
            if name != "*":
                self._column(model, query.table, name)
        criteria = []
        for op, name, value in query.filters:
            column = self._column(model, query.table, name)
            if op == EQ:
                criteria.append(column == value)
            elif op == IN:
                criteria.append(column.in_(value))
            elif op == GTE:
                criteria.append(column >= value)
            elif op == NOT_NULL:
                criteria.append(column.isnot(None))
            else:
                raise ValueError(f"Unsupported filter operator: {op}")
        return await asyncio.to_thread(self._select, model, query, criteria)

    def _select(self, model, query: Query, criteria) -> List[Dict[str, Any]]:
        with self.session_factory() as db:
            try:
                objs = db.query(model).filter(*criteria).all()
            except SQLAlchemyError as e:
                raise self._fail(db, e, query.table) from e
            return [self._to_dict(obj, query.columns) for obj in objs]

    async def insert(self, table: str, record: Dict[str, Any]) -> Dict[str, Any]:
        model = self._model(table)
        return await asyncio.to_thread(self._insert, model, table, record)

    def _insert(self, model, table: str, record: Dict[str, Any]) -> Dict[str, Any]:
        try:
            obj = model(**record)
        except TypeError as e:
            raise BackendValidationError(f"{table}: {e}", table=table) from e
        with self.session_factory() as db:
            try:
                db.add(obj)
                db.commit()
                db.refresh(obj)
            except SQLAlchemyError as e:
                raise self._fail(db, e, table) from e
            return self._to_dict(obj, ("*",))

    async def delete(self, table: str, column: str, value: Any) -> int:
        model = self._model(table)
        target = self._column(model, table, column)
        return await asyncio.to_thread(self._delete, model, table, target, value)

    def _delete(self, model, table: str, target, value: Any) -> int:
        with self.session_factory() as db:
            try:
                removed = db.query(model).filter(target == value).delete(synchronize_session=False)
                db.commit()
            except SQLAlchemyError as e:
                raise self._fail(db, e, table) from e
            return removed
