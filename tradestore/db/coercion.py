"""Value Coercion Engine - typed values to and from their stored form.

To storage, every value is rendered as text the way the plug-in has always
written rows (SQLite column affinity turns numeric text back into numbers).
From storage, the boxed value delivered by the driver is converted by the
field's storage kind, and a whole row is validated into a record.
"""

import logging
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Type, TypeVar

from pydantic import ValidationError

from tradestore.core.log_helper import LogLevel, log

from .descriptor import FieldDescriptor, StorageKind, describe
from .enums import EnumRegistry, enum_registry
from .exceptions import CoercionError

logger = logging.getLogger(__name__)

T = TypeVar("T")

_TRUE_TEXT = frozenset({"true"})
_FALSE_TEXT = frozenset({"false"})


class _Skip:
    """Marker for a field whose conversion was skipped."""


SKIP = _Skip()


# =============================================================================
# To storage
# =============================================================================


def format_datetime(value: datetime) -> str:
    """``YYYY-MM-DD HH:MM:SS``; any timezone is dropped, not converted."""
    return value.replace(tzinfo=None).isoformat(sep=" ", timespec="seconds")


def to_storage(field: FieldDescriptor, value: Any) -> Optional[str]:
    """Render a field value as its stored text.

    Datetimes use seconds precision without a timezone suffix. Absent or
    empty values become ``"0"``, except on nullable fields where ``None``
    stays NULL.
    """
    if value is None:
        return None if field.nullable else "0"
    if isinstance(value, datetime):
        return format_datetime(value)
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, bool):
        return "1" if value else "0"
    text = str(value)
    if text == "":
        return "0"
    return text


def to_storage_params(descriptor_fields, record: Any) -> Dict[str, Optional[str]]:
    """Bind parameters for the given fields of a record, in field order."""
    return {f.name: to_storage(f, getattr(record, f.name)) for f in descriptor_fields}


# =============================================================================
# From storage
# =============================================================================


def parse_datetime(value: Any) -> datetime:
    """Parse the store's datetime text (``YYYY-MM-DD HH:MM:SS[.ffffff]``)."""
    if isinstance(value, datetime):
        return value
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1]
    return datetime.fromisoformat(text)


def to_bool(value: Any, nullable: bool = False) -> Optional[bool]:
    """Normalize a stored boolean.

    Accepts native booleans, integers (0/1) and text. Nullable fields read
    numeric text through int() first; other text accepts true/false
    (any case) as well as numeric strings.
    """
    if value is None:
        return None if nullable else False
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return bool(value)
    if isinstance(value, (bytes, str)):
        text = value.decode() if isinstance(value, bytes) else value
        text = text.strip()
        if nullable:
            try:
                return bool(int(text))
            except ValueError:
                pass
        lowered = text.lower()
        if lowered in _TRUE_TEXT:
            return True
        if lowered in _FALSE_TEXT:
            return False
        try:
            return bool(int(float(text)))
        except ValueError:
            raise ValueError(f"{value!r} is not a recognized boolean") from None
    return False


def to_enum(value: Any, enum_type: Type[Enum]) -> Enum:
    """Parse a stored enumeration by member name or integer value."""
    if isinstance(value, enum_type):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return enum_type(int(value))
    text = str(value).strip()
    if text in enum_type.__members__:
        return enum_type[text]
    for name, member in enum_type.__members__.items():
        if name.lower() == text.lower():
            return member
    return enum_type(int(text))


def from_storage(
    field: FieldDescriptor,
    value: Any,
    registry: EnumRegistry = enum_registry,
) -> Any:
    """Convert a boxed row value to the field's in-memory type.

    Returns ``SKIP`` when an enumeration value cannot be resolved; the
    failure is logged and the field keeps its declared default.

    Raises:
        ValueError / TypeError: The value cannot be converted
    """
    kind = field.kind

    if kind is StorageKind.BOOLEAN:
        return to_bool(value, nullable=field.nullable)

    if value is None:
        return None

    if kind.is_integer:
        if isinstance(value, float):
            return int(value)
        return int(str(value).strip()) if isinstance(value, (str, bytes)) else int(value)
    if kind is StorageKind.DOUBLE:
        return float(value)
    if kind is StorageKind.DATETIME:
        return parse_datetime(value)
    if kind is StorageKind.ENUMERATION:
        enum_type = registry.resolve(field.enum_name or "")
        if enum_type is None:
            log(LogLevel.Error, f"Converting Enum ({field.enum_name})", logger)
            return SKIP
        try:
            return to_enum(value, enum_type)
        except (KeyError, ValueError):
            log(LogLevel.Error, f"Converting Enum ({field.enum_name}): {value!r}", logger)
            return SKIP
    return value


def hydrate(record_type: Type[T], row: Mapping[str, Any]) -> T:
    """Build a record from a fetched row.

    Raises:
        CoercionError: A field could not be converted or the converted
            values fail record validation. No partial record is returned.
    """
    descriptor = describe(record_type)
    values: Dict[str, Any] = {}

    for field in descriptor.fields:
        try:
            converted = from_storage(field, row[field.name])
        except (KeyError, ValueError, TypeError, OverflowError) as e:
            raise CoercionError(f"{field.name}. {e}", field_name=field.name) from e
        if converted is SKIP:
            continue
        values[field.name] = converted

    try:
        return record_type.model_validate(values)
    except ValidationError as e:
        names = ", ".join(str(err["loc"][0]) for err in e.errors() if err.get("loc"))
        raise CoercionError(f"{names}. {e}", field_name=names or None) from e
