"""Connection/Transaction Executor for the broker plug-in store.

DataAccess is the boundary that touches SQLite. Every public method opens
its own connection, releases it on every exit path, and converts store
failures into plain results:

    reads             -> list (possibly empty) or Lookup
    scalar reads      -> value or None
    inserts / execute -> bool
    update / delete   -> DBResult

Usage:
    access = DataAccess(StoreConfig(database_path="Data/tda.db"))
    access.create_table(Trade)
    access.insert(trade)
    latest = access.get_most_recent(Trade)
    if latest:
        print(latest.record.asset)
"""

import logging
from typing import Any, Callable, Dict, List, Optional, Sequence, Type, TypeVar, Union

from sqlalchemy import text
from sqlalchemy.engine import Connection
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from tenacity import Retrying, retry_if_exception, stop_after_attempt, wait_exponential

from tradestore.core.log_helper import LogLevel, log

from . import schema
from . import sql_builder as sql
from .coercion import hydrate
from .descriptor import describe
from .engine import StoreConfig, get_connection, get_transaction
from .exceptions import CoercionError
from .result import DBResult, Lookup
from .sql_builder import Statement

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")

NOT_CONFIGURED = "Store database path is not set"


def _is_locked(exc: BaseException) -> bool:
    if not isinstance(exc, OperationalError):
        return False
    message = str(exc.orig if exc.orig is not None else exc).lower()
    return "locked" in message or "busy" in message


class DataAccess:
    """Reads and writes record types against one SQLite store file."""

    def __init__(self, config: Optional[StoreConfig] = None):
        """Initialize the executor.

        Args:
            config: Store to use (defaults to the one named in settings)
        """
        self.config = config if config is not None else StoreConfig.from_settings()

    # =========================================================================
    # Unit-of-work plumbing
    # =========================================================================

    def _retrying(self) -> Retrying:
        return Retrying(
            stop=stop_after_attempt(max(1, self.config.lock_retries)),
            wait=wait_exponential(multiplier=0.05, min=0.05, max=1),
            retry=retry_if_exception(_is_locked),
            reraise=True,
        )

    def _read(self, work: Callable[[Connection], R]) -> R:
        for attempt in self._retrying():
            with attempt:
                with get_connection(self.config) as conn:
                    return work(conn)

    def _write(self, work: Callable[[Connection], R]) -> R:
        """Run ``work`` in one transaction, committed only if it returns."""
        for attempt in self._retrying():
            with attempt:
                with get_transaction(self.config) as conn:
                    return work(conn)

    def run_statements(self, statements: Sequence[Statement]) -> List[Optional[int]]:
        """Execute statements in one transaction.

        Returns:
            The cursor's lastrowid after each statement

        Raises:
            SQLAlchemyError: Any statement fails (nothing is committed)
        """

        def work(conn: Connection) -> List[Optional[int]]:
            return [conn.execute(text(s.sql), s.params).lastrowid for s in statements]

        return self._write(work)

    def _fetch_rows(self, statement: Statement) -> List[Dict[str, Any]]:
        def work(conn: Connection) -> List[Dict[str, Any]]:
            result = conn.execute(text(statement.sql), statement.params)
            return [dict(row) for row in result.mappings()]

        return self._read(work)

    def _hydrate_rows(
        self, record_type: Type[T], rows: List[Dict[str, Any]]
    ) -> List[Union[T, CoercionError]]:
        outcomes: List[Union[T, CoercionError]] = []
        for row in rows:
            try:
                outcomes.append(hydrate(record_type, row))
            except CoercionError as e:
                log(LogLevel.Error, f"{record_type.__name__}: {e}", logger)
                outcomes.append(e)
        return outcomes

    # =========================================================================
    # Generic reads
    # =========================================================================

    def query(self, record_type: Type[T], statement: Statement) -> List[T]:
        """Run a SELECT and map each row to ``record_type``.

        Rows that fail conversion are logged and left out.

        Returns:
            Records in row order; empty on no rows, store errors or a
            missing store path
        """
        if not self.config.is_configured:
            log(LogLevel.Warning, f"{NOT_CONFIGURED}; returning no {record_type.__name__} records", logger)
            return []
        try:
            rows = self._fetch_rows(statement)
        except SQLAlchemyError as e:
            log(LogLevel.Error, f"Query on {record_type.__name__} failed. {e}", logger)
            return []
        return [r for r in self._hydrate_rows(record_type, rows) if not isinstance(r, CoercionError)]

    def _lookup(self, record_type: Type[T], build: Callable[[], Statement]) -> Lookup[T]:
        """Fetch the first row of the statement ``build`` returns.

        Bad arguments rejected by the builder and store failures both come
        back as ERROR; only an empty result is NOT_FOUND.
        """
        if not self.config.is_configured:
            log(LogLevel.Warning, NOT_CONFIGURED, logger)
            return Lookup.missing()
        try:
            statement = build()
        except (TypeError, ValueError) as e:
            log(LogLevel.Error, f"Lookup on {record_type.__name__} rejected. {e}", logger)
            return Lookup.error(str(e))
        try:
            rows = self._fetch_rows(statement)
        except SQLAlchemyError as e:
            log(LogLevel.Error, f"Lookup on {record_type.__name__} failed. {e}", logger)
            return Lookup.error(str(e))
        if not rows:
            return Lookup.missing()
        outcome = self._hydrate_rows(record_type, rows[:1])[0]
        if isinstance(outcome, CoercionError):
            return Lookup.invalid(str(outcome))
        return Lookup.found(outcome)

    def execute_scalar(self, sql_text: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """First column of the first row, or None on no rows / failure."""
        if not self.config.is_configured:
            return None
        try:
            return self._read(lambda conn: conn.execute(text(sql_text), params or {}).scalar())
        except SQLAlchemyError as e:
            log(LogLevel.Error, str(e), logger)
            return None

    def reader_has_rows(self, sql_text: str, params: Optional[Dict[str, Any]] = None) -> bool:
        if not self.config.is_configured:
            return False
        try:
            return self._read(lambda conn: conn.execute(text(sql_text), params or {}).first() is not None)
        except SQLAlchemyError as e:
            log(LogLevel.Error, str(e), logger)
            return False

    def execute(self, sql_text: str, params: Optional[Dict[str, Any]] = None) -> bool:
        """Run a non-query statement in its own transaction."""
        if not self.config.is_configured:
            log(LogLevel.Error, NOT_CONFIGURED, logger)
            return False
        try:
            self.run_statements([Statement(sql_text, dict(params or {}))])
            return True
        except SQLAlchemyError as e:
            log(LogLevel.Error, str(e), logger)
            return False

    # =========================================================================
    # Typed reads
    # =========================================================================

    def get_all_records(self, record_type: Type[T]) -> List[T]:
        return self.query(record_type, sql.select_all(describe(record_type)))

    def get_record_by_id(self, record_type: Type[T], record_id: Optional[int]) -> Lookup[T]:
        """Record by primary key; NOT_FOUND without a query when ``record_id`` is None."""
        if record_id is None:
            return Lookup.missing()
        return self._lookup(record_type, lambda: sql.select_by_id(describe(record_type), record_id))

    def get_records_by_ids(self, record_type: Type[T], ids: Sequence[int]) -> List[T]:
        """Records whose primary key is in ``ids``; no query for an empty list."""
        if not ids:
            return []
        try:
            statement = sql.select_by_ids(describe(record_type), ids)
        except (TypeError, ValueError) as e:
            log(LogLevel.Error, f"Query on {record_type.__name__} rejected. {e}", logger)
            return []
        return self.query(record_type, statement)

    def get_records_by_sql(
        self, record_type: Type[T], sql_text: str, params: Optional[Dict[str, Any]] = None
    ) -> List[T]:
        """Records from caller-written SQL; values go in ``params``."""
        if not sql_text:
            return []
        return self.query(record_type, Statement(sql_text, dict(params or {})))

    def get_most_recent(self, record_type: Type[T]) -> Lookup[T]:
        """The last inserted row (highest ROWID)."""
        return self._lookup(record_type, lambda: sql.select_most_recent(describe(record_type)))

    def get_ordinal_record(
        self, record_type: Type[T], n: int, order_by: Optional[str] = None
    ) -> Lookup[T]:
        """The Nth record (1-based), newest first by ``order_by``.

        ``n`` < 1 reports not-found without querying the store; an
        ``order_by`` that is not a column of the record reports ERROR.
        """
        if n < 1:
            return Lookup.missing()
        return self._lookup(record_type, lambda: sql.select_ordinal(describe(record_type), n, order_by))

    # =========================================================================
    # Writes
    # =========================================================================

    def insert(self, record: Any) -> bool:
        """Insert one record in its own transaction.

        The store-assigned key is written back to the record's
        auto-increment field.
        """
        return self.insert_all([record])

    def insert_all(self, records: Sequence[Any]) -> bool:
        """Insert records in one transaction; nothing is kept if any row fails."""
        if not records:
            return True
        if not self.config.is_configured:
            log(LogLevel.Error, f"Transaction insertion. {NOT_CONFIGURED}", logger)
            return False

        statements = []
        for record in records:
            statements.append(sql.insert(describe(type(record)), record))

        try:
            row_ids = self.run_statements(statements)
        except SQLAlchemyError as e:
            log(LogLevel.Error, f"Transaction insertion. {e}", logger)
            return False

        for record, row_id in zip(records, row_ids):
            pk = describe(type(record)).primary_key
            if pk is not None and pk.is_auto_increment and row_id is not None:
                setattr(record, pk.name, row_id)
        return True

    def update(self, record: Any) -> DBResult:
        """Write every non-key field of ``record`` to its row."""
        if not self.config.is_configured:
            log(LogLevel.Error, NOT_CONFIGURED, logger)
            return DBResult.failure(NOT_CONFIGURED)
        try:
            self.run_statements([sql.update(describe(type(record)), record)])
        except (SQLAlchemyError, TypeError, ValueError) as e:
            log(LogLevel.Error, str(e), logger)
            return DBResult.failure(str(e))
        return DBResult()

    def delete_where(
        self,
        record_type: type,
        predicate: str,
        params: Optional[Dict[str, Any]] = None,
    ) -> DBResult:
        """DELETE FROM the record's table WHERE ``predicate``."""
        return self._delete(lambda: sql.delete_where(describe(record_type), predicate, params))

    def _delete(self, build: Callable[[], Statement]) -> DBResult:
        if not self.config.is_configured:
            log(LogLevel.Error, NOT_CONFIGURED, logger)
            return DBResult.failure(NOT_CONFIGURED)
        try:
            self.run_statements([build()])
        except (SQLAlchemyError, TypeError, ValueError) as e:
            log(LogLevel.Error, str(e), logger)
            return DBResult.failure(str(e))
        return DBResult()

    def delete_all(self, record_type: type) -> DBResult:
        return self._delete(lambda: sql.delete_all(describe(record_type)))

    def delete_by_id(self, record_type: type, record_id: int) -> DBResult:
        return self._delete(lambda: sql.delete_by_id(describe(record_type), record_id))

    def delete_by_ids(self, record_type: type, ids: Sequence[int]) -> DBResult:
        if not ids:
            return DBResult()
        return self._delete(lambda: sql.delete_by_ids(describe(record_type), ids))

    # =========================================================================
    # Schema
    # =========================================================================

    def table_exists(self, record_type: type) -> bool:
        return schema.table_exists(self, record_type)

    def create_table(self, record_type: type, overwrite: bool = False) -> DBResult:
        return schema.create_table(self, record_type, overwrite=overwrite)

    def create_tables(self, *record_types: type, overwrite: bool = False) -> DBResult:
        return schema.create_tables(self, *record_types, overwrite=overwrite)

    def drop_table(self, record_type: type) -> DBResult:
        return schema.drop_table(self, record_type)

    def reset_autoincrement(self, record_type: type) -> DBResult:
        return schema.reset_autoincrement(self, record_type)

    def get_db_size(self) -> int:
        """Store size in bytes (page_count * page_size), 0 when unavailable."""
        page_count = self.execute_scalar("PRAGMA page_count")
        page_size = self.execute_scalar("PRAGMA page_size")
        return int(page_count or 0) * int(page_size or 0)
