"""SQL Builder - statement text and bind parameters per operation.

Statements are plain SQL with named placeholders (``:name``); values are
always carried in ``Statement.params`` and bound by the driver. Only
identifiers taken from a record descriptor are written into the text, and
each one is double-quoted so keyword names (``Order``, ``Group``) work.
Column and value lists follow the descriptor's field order, so the same
record type always yields the same statement shape.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Sequence

from .coercion import to_storage_params
from .descriptor import FieldDescriptor, RecordDescriptor, StorageKind

SQL_TABLE_EXISTS = "SELECT name FROM sqlite_master WHERE type = 'table' AND name = :name"
SQL_RESET_AUTOINCREMENT = "DELETE FROM sqlite_sequence WHERE name = :name"

# Storage column type and default per kind
COLUMN_TYPES = {
    StorageKind.INTEGER32: ("INTEGER", "0"),
    StorageKind.INTEGER64: ("INTEGER", "0"),
    StorageKind.ENUMERATION: ("INTEGER", "0"),
    StorageKind.DOUBLE: ("DOUBLE", "0.0"),
    StorageKind.DATETIME: ("DATETIME", "CURRENT_TIMESTAMP"),
    StorageKind.BOOLEAN: ("BOOLEAN", "true"),
    StorageKind.TEXT: ("NVARCHAR", "' '"),
}


@dataclass(frozen=True)
class Statement:
    """SQL text plus its named bind parameters."""

    sql: str
    params: Dict[str, Any] = field(default_factory=dict)


def quote_identifier(name: str) -> str:
    """``Order`` -> ``"Order"`` (embedded quotes doubled)."""
    return '"' + name.replace('"', '""') + '"'


def _table(descriptor: RecordDescriptor) -> str:
    return quote_identifier(descriptor.table_name)


def _require_pk(descriptor: RecordDescriptor) -> FieldDescriptor:
    pk = descriptor.primary_key
    if pk is None:
        raise ValueError(f"{descriptor.table_name} has no primary key column")
    return pk


def _id_placeholders(ids: Sequence[int]) -> Dict[str, int]:
    if not ids:
        raise ValueError("id list is empty")
    return {f"id_{i}": int(value) for i, value in enumerate(ids)}


# =============================================================================
# DDL
# =============================================================================


def column_definition(f: FieldDescriptor) -> str:
    """Column fragment for CREATE TABLE, e.g. ``"symbol" NVARCHAR NOT NULL DEFAULT ' '``."""
    column_type, default = COLUMN_TYPES[f.kind]
    parts = [quote_identifier(f.name), column_type]

    if f.is_primary_key:
        parts.append("PRIMARY KEY")
    if f.is_auto_increment:
        parts.append("AUTOINCREMENT")
        return " ".join(parts)

    if f.is_not_null:
        parts.append("NOT NULL")
    parts.append(f"DEFAULT {default}")
    return " ".join(parts)


def create_table(descriptor: RecordDescriptor) -> Statement:
    columns = ", ".join(column_definition(f) for f in descriptor.fields)
    return Statement(f"CREATE TABLE IF NOT EXISTS {_table(descriptor)} ({columns})")


def drop_table(descriptor: RecordDescriptor) -> Statement:
    return Statement(f"DROP TABLE IF EXISTS {_table(descriptor)}")


def table_exists(descriptor: RecordDescriptor) -> Statement:
    return Statement(SQL_TABLE_EXISTS, {"name": descriptor.table_name})


def reset_autoincrement(descriptor: RecordDescriptor) -> Statement:
    return Statement(SQL_RESET_AUTOINCREMENT, {"name": descriptor.table_name})


# =============================================================================
# SELECT
# =============================================================================


def select_all(descriptor: RecordDescriptor) -> Statement:
    return Statement(f"SELECT * FROM {_table(descriptor)}")


def select_by_id(descriptor: RecordDescriptor, record_id: int) -> Statement:
    pk = _require_pk(descriptor)
    return Statement(
        f"SELECT * FROM {_table(descriptor)} WHERE {quote_identifier(pk.name)} = :{pk.name}",
        {pk.name: int(record_id)},
    )


def select_by_ids(descriptor: RecordDescriptor, ids: Sequence[int]) -> Statement:
    """SELECT by primary key list.

    Raises:
        ValueError: ``ids`` is empty (``IN ()`` is never emitted)
    """
    pk = _require_pk(descriptor)
    params = _id_placeholders(ids)
    placeholders = ", ".join(f":{name}" for name in params)
    return Statement(
        f"SELECT * FROM {_table(descriptor)} WHERE {quote_identifier(pk.name)} IN ({placeholders})",
        params,
    )


def select_most_recent(descriptor: RecordDescriptor) -> Statement:
    table = _table(descriptor)
    return Statement(f"SELECT * FROM {table} WHERE ROWID = (SELECT MAX(ROWID) FROM {table})")


def select_ordinal(descriptor: RecordDescriptor, n: int, order_by: Optional[str] = None) -> Statement:
    """Nth record (1-based), newest first by ``order_by``.

    With no ``order_by`` the store's natural row order is used.

    Raises:
        ValueError: ``n`` < 1, or ``order_by`` is not a column of the record
    """
    if n < 1:
        raise ValueError(f"ordinal must be >= 1, got {n}")
    table = _table(descriptor)
    if order_by:
        if not descriptor.has_column(order_by):
            raise ValueError(f"{descriptor.table_name} has no column {order_by!r}")
        sql = f"SELECT * FROM {table} ORDER BY {quote_identifier(order_by)} DESC LIMIT 1 OFFSET :offset"
    else:
        sql = f"SELECT * FROM {table} LIMIT 1 OFFSET :offset"
    return Statement(sql, {"offset": n - 1})


# =============================================================================
# INSERT / UPDATE / DELETE
# =============================================================================


def insert(descriptor: RecordDescriptor, record: Any) -> Statement:
    fields = descriptor.insert_fields
    columns = ", ".join(quote_identifier(f.name) for f in fields)
    values = ", ".join(f":{f.name}" for f in fields)
    return Statement(
        f"INSERT INTO {_table(descriptor)} ({columns}) VALUES ({values})",
        to_storage_params(fields, record),
    )


def update(descriptor: RecordDescriptor, record: Any) -> Statement:
    pk = _require_pk(descriptor)
    fields = descriptor.update_fields
    pairs = ", ".join(f"{quote_identifier(f.name)} = :{f.name}" for f in fields)
    params = to_storage_params(fields, record)
    params[pk.name] = int(getattr(record, pk.name))
    return Statement(
        f"UPDATE {_table(descriptor)} SET {pairs} WHERE {quote_identifier(pk.name)} = :{pk.name}",
        params,
    )


def delete_where(
    descriptor: RecordDescriptor,
    predicate: str,
    params: Optional[Dict[str, Any]] = None,
) -> Statement:
    """DELETE with a caller-supplied predicate fragment.

    The predicate is trusted SQL; values belong in ``params``.
    """
    return Statement(f"DELETE FROM {_table(descriptor)} WHERE {predicate}", dict(params or {}))


def delete_by_id(descriptor: RecordDescriptor, record_id: int) -> Statement:
    pk = _require_pk(descriptor)
    return delete_where(descriptor, f"{quote_identifier(pk.name)} = :{pk.name}", {pk.name: int(record_id)})


def delete_by_ids(descriptor: RecordDescriptor, ids: Sequence[int]) -> Statement:
    pk = _require_pk(descriptor)
    params = _id_placeholders(ids)
    placeholders = ", ".join(f":{name}" for name in params)
    return delete_where(descriptor, f"{quote_identifier(pk.name)} IN ({placeholders})", params)


def delete_all(descriptor: RecordDescriptor) -> Statement:
    pk = _require_pk(descriptor)
    return delete_where(descriptor, f"{quote_identifier(pk.name)} > 0")
