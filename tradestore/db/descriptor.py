"""Type Descriptor - column shape and constraints of a record type.

Record types are plain (non-table) SQLModel classes. Each field's storage
kind comes from its annotation, nullability from an ``Optional[...]``
wrapper, and key/constraint flags from the ``sqlmodel.Field`` metadata
built by ``column()``.

Descriptors are computed once per type, when the class is decorated with
``@register_record`` (or on the first ``describe()`` call otherwise).

Usage:
    @register_record
    class Quote(Record):
        id: Optional[int] = column(None, primary_key=True, autoincrement=True)
        symbol: str = column("", not_null=True)
        price: float = 0.0

    describe(Quote).column_names  # ('id', 'symbol', 'price')
"""

import logging
import types
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Dict, Mapping, Optional, Tuple, Type, Union, get_args, get_origin

from pydantic_core import PydanticUndefined
from sqlalchemy import BigInteger
from sqlmodel import Field, SQLModel

from .enums import enum_registry
from .exceptions import RecordDefinitionError

logger = logging.getLogger(__name__)


class StorageKind(str, Enum):
    INTEGER32 = "Integer32"
    INTEGER64 = "Integer64"
    DOUBLE = "Double"
    BOOLEAN = "Boolean"
    DATETIME = "DateTime"
    ENUMERATION = "Enumeration"
    TEXT = "Text"

    @property
    def is_integer(self) -> bool:
        return self in (StorageKind.INTEGER32, StorageKind.INTEGER64)


@dataclass(frozen=True)
class FieldDescriptor:
    """Storage metadata for one record field (one table column)."""

    name: str
    kind: StorageKind
    python_type: Any = str
    nullable: bool = False
    is_primary_key: bool = False
    is_auto_increment: bool = False
    is_not_null: bool = False
    enum_name: Optional[str] = None


@dataclass(frozen=True)
class RecordDescriptor:
    """Ordered field descriptors for a record type and its table name."""

    record_type: type
    table_name: str
    fields: Tuple[FieldDescriptor, ...]

    @property
    def column_names(self) -> Tuple[str, ...]:
        return tuple(f.name for f in self.fields)

    @property
    def primary_key(self) -> Optional[FieldDescriptor]:
        for f in self.fields:
            if f.is_primary_key:
                return f
        return None

    @property
    def insert_fields(self) -> Tuple[FieldDescriptor, ...]:
        """Fields supplied on INSERT (the store assigns auto-increment keys)."""
        return tuple(f for f in self.fields if not f.is_auto_increment)

    @property
    def update_fields(self) -> Tuple[FieldDescriptor, ...]:
        """Fields written by UPDATE ... SET (never the primary key)."""
        return tuple(f for f in self.fields if not f.is_primary_key)

    def field(self, name: str) -> FieldDescriptor:
        for f in self.fields:
            if f.name == name:
                return f
        raise KeyError(f"{self.table_name} has no column {name!r}")

    def has_column(self, name: str) -> bool:
        return name in self.column_names


_REGISTRY: Dict[type, RecordDescriptor] = {}


def column(
    default: Any = PydanticUndefined,
    *,
    primary_key: bool = False,
    autoincrement: bool = False,
    not_null: bool = False,
    big: bool = False,
    default_factory: Any = None,
) -> Any:
    """Declare a record field with its column constraints.

    Args:
        default: Field default (required when omitted)
        primary_key: Column is the table's primary key
        autoincrement: Key is assigned by the store on insert
        not_null: Column is declared NOT NULL with its kind's default
        big: Integer column holds 64-bit values
        default_factory: Callable producing the default

    Returns:
        sqlmodel FieldInfo carrying the metadata
    """
    kwargs: Dict[str, Any] = {}
    if primary_key:
        kwargs["primary_key"] = True
    if autoincrement:
        kwargs["sa_column_kwargs"] = {"autoincrement": True}
    if not_null:
        kwargs["nullable"] = False
    if big:
        kwargs["sa_type"] = BigInteger
    if default_factory is not None:
        return Field(default_factory=default_factory, **kwargs)
    return Field(default=default, **kwargs)


def _unwrap(annotation: Any) -> Tuple[Any, bool]:
    """Strip Annotated/Optional wrappers; return (inner type, nullable)."""
    nullable = False
    while True:
        origin = get_origin(annotation)
        if origin is Annotated:
            annotation = get_args(annotation)[0]
            continue
        if origin is Union or origin is types.UnionType:
            args = get_args(annotation)
            inner = [a for a in args if a is not type(None)]
            if len(inner) < len(args):
                nullable = True
            if len(inner) == 1:
                annotation = inner[0]
                continue
        return annotation, nullable


def _is_big(field_info: Any) -> bool:
    sa_type = getattr(field_info, "sa_type", None)
    if isinstance(sa_type, type):
        return issubclass(sa_type, BigInteger)
    return isinstance(sa_type, BigInteger)


def _storage_kind(python_type: Any, field_info: Any) -> StorageKind:
    if not isinstance(python_type, type):
        return StorageKind.TEXT
    # Enum before int: IntEnum members are ints too
    if issubclass(python_type, Enum):
        return StorageKind.ENUMERATION
    if issubclass(python_type, bool):
        return StorageKind.BOOLEAN
    if issubclass(python_type, int):
        return StorageKind.INTEGER64 if _is_big(field_info) else StorageKind.INTEGER32
    if issubclass(python_type, float):
        return StorageKind.DOUBLE
    if issubclass(python_type, datetime):
        return StorageKind.DATETIME
    return StorageKind.TEXT


def _integer_valued(enum_type: Type[Enum]) -> bool:
    return all(isinstance(m.value, int) and not isinstance(m.value, bool) for m in enum_type)


def _describe_field(owner: str, name: str, field_info: Any) -> FieldDescriptor:
    python_type, nullable = _unwrap(field_info.annotation)
    kind = _storage_kind(python_type, field_info)

    sa_column_kwargs = getattr(field_info, "sa_column_kwargs", None)
    auto_increment = isinstance(sa_column_kwargs, Mapping) and sa_column_kwargs.get("autoincrement") is True

    enum_name = None
    if kind is StorageKind.ENUMERATION:
        # Stored in an INTEGER column and read back by name or number
        if not _integer_valued(python_type):
            raise RecordDefinitionError(
                f"{owner}.{name}: enumeration {python_type.__name__} must have integer values"
            )
        enum_registry.register(python_type)
        enum_name = python_type.__name__

    return FieldDescriptor(
        name=name,
        kind=kind,
        python_type=python_type,
        nullable=nullable,
        is_primary_key=getattr(field_info, "primary_key", False) is True,
        is_auto_increment=auto_increment,
        is_not_null=getattr(field_info, "nullable", None) is False,
        enum_name=enum_name,
    )


def build_descriptor(record_type: Type[SQLModel], table: Optional[str] = None) -> RecordDescriptor:
    """Derive the descriptor of a record type without registering it.

    Raises:
        RecordDefinitionError: More than one primary key, an auto-increment
            column that is not an integer primary key, or an enumeration
            field whose members are not integer-valued
    """
    fields = tuple(
        _describe_field(record_type.__name__, name, info)
        for name, info in record_type.model_fields.items()
    )

    keys = [f.name for f in fields if f.is_primary_key]
    if len(keys) > 1:
        raise RecordDefinitionError(
            f"{record_type.__name__} declares more than one primary key: {', '.join(keys)}"
        )
    for f in fields:
        if f.is_auto_increment and not (f.is_primary_key and f.kind.is_integer):
            raise RecordDefinitionError(
                f"{record_type.__name__}.{f.name}: autoincrement requires an integer primary key"
            )

    return RecordDescriptor(
        record_type=record_type,
        table_name=table or record_type.__name__,
        fields=fields,
    )


def register_record(record_type: Optional[type] = None, *, table: Optional[str] = None):
    """Class decorator registering a record type's descriptor once.

    Usable bare (``@register_record``) or with a table override
    (``@register_record(table="quotes")``).
    """

    def decorate(cls: type) -> type:
        descriptor = build_descriptor(cls, table=table)
        _REGISTRY[cls] = descriptor
        logger.debug("Registered record type %s -> table %s", cls.__name__, descriptor.table_name)
        return cls

    if record_type is not None:
        return decorate(record_type)
    return decorate


def describe(record_type: type) -> RecordDescriptor:
    """Return the registered descriptor, registering the type on first use."""
    descriptor = _REGISTRY.get(record_type)
    if descriptor is None:
        descriptor = build_descriptor(record_type)
        _REGISTRY[record_type] = descriptor
    return descriptor
