"""Schema Synthesizer - table creation from record descriptors.

Tables are created lazily and left alone once they exist, unless an
overwrite is requested, in which case DROP and CREATE run as one batch.
Failures come back as DBResult envelopes; nothing is raised.
"""

import logging
from typing import TYPE_CHECKING

from sqlalchemy.exc import SQLAlchemyError

from tradestore.core.log_helper import LogLevel, log

from . import sql_builder as sql
from .descriptor import describe
from .result import DBResult

if TYPE_CHECKING:
    from .data_access import DataAccess

logger = logging.getLogger(__name__)


def table_exists(access: "DataAccess", record_type: type) -> bool:
    statement = sql.table_exists(describe(record_type))
    return access.reader_has_rows(statement.sql, statement.params)


def create_table(access: "DataAccess", record_type: type, overwrite: bool = False) -> DBResult:
    """Create the record's table.

    Args:
        access: Executor bound to the target store
        record_type: Registered record type
        overwrite: Drop and recreate the table (all rows are lost)

    Returns:
        DBResult; success without touching the store when the table
        already exists and ``overwrite`` is False
    """
    descriptor = describe(record_type)

    if not overwrite and table_exists(access, record_type):
        return DBResult()

    if not access.config.is_configured:
        log(LogLevel.Error, f"Creating table {descriptor.table_name}. Store database path is not set", logger)
        return DBResult.failure("Store database path is not set")

    statements = [sql.create_table(descriptor)]
    if overwrite:
        statements.insert(0, sql.drop_table(descriptor))

    try:
        access.run_statements(statements)
    except SQLAlchemyError as e:
        log(LogLevel.Error, f"Creating table {descriptor.table_name}. {e}", logger)
        return DBResult.failure(str(e))

    logger.info(f"Table {descriptor.table_name} ready ({len(descriptor.fields)} columns)")
    return DBResult()


def create_tables(access: "DataAccess", *record_types: type, overwrite: bool = False) -> DBResult:
    """Create tables in order, stopping at the first failure."""
    for record_type in record_types:
        result = create_table(access, record_type, overwrite=overwrite)
        if not result.success:
            return result
    return DBResult()


def drop_table(access: "DataAccess", record_type: type) -> DBResult:
    descriptor = describe(record_type)
    if access.execute(sql.drop_table(descriptor).sql):
        return DBResult()
    return DBResult.failure(f"Could not drop table {descriptor.table_name}")


def reset_autoincrement(access: "DataAccess", record_type: type) -> DBResult:
    """Restart the table's auto-increment counter (sqlite_sequence row)."""
    statement = sql.reset_autoincrement(describe(record_type))
    if access.execute(statement.sql, statement.params):
        return DBResult()
    return DBResult.failure(f"Could not reset autoincrement for {statement.params['name']}")
