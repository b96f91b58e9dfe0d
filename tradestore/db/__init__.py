"""
Record-mapping layer over the embedded SQLite store.

Exports:
    - DataAccess: executor for reads, writes and schema operations
    - StoreConfig: explicit configuration handle naming the store file
    - get_connection / get_transaction: scoped connection context managers
    - register_record / column / describe: record type declaration
    - DBResult / Lookup: results returned across the DataAccess boundary
"""

from .engine import (
    StoreConfig,
    create_store_engine,
    dispose_engines,
    get_connection,
    get_transaction,
)
from .descriptor import (
    FieldDescriptor,
    RecordDescriptor,
    StorageKind,
    column,
    describe,
    register_record,
)
from .enums import enum_registry
from .exceptions import CoercionError, RecordDefinitionError, StoreError
from .result import DBResult, Lookup, LookupStatus
from .data_access import DataAccess

__all__ = [
    "StoreConfig",
    "create_store_engine",
    "dispose_engines",
    "get_connection",
    "get_transaction",
    "FieldDescriptor",
    "RecordDescriptor",
    "StorageKind",
    "column",
    "describe",
    "register_record",
    "enum_registry",
    "CoercionError",
    "RecordDefinitionError",
    "StoreError",
    "DBResult",
    "Lookup",
    "LookupStatus",
    "DataAccess",
]
