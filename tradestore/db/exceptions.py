"""Exceptions raised inside the store layer.

Only RecordDefinitionError escapes to callers (at class definition time).
Store and coercion failures are caught by DataAccess and reported through
DBResult envelopes, booleans or empty sequences.
"""

from typing import Optional


class StoreError(Exception):
    """Base exception for store layer errors."""

    pass


class RecordDefinitionError(StoreError):
    """Raised when a record type declares inconsistent column metadata."""

    pass


class CoercionError(StoreError):
    """Raised when a stored value cannot be converted to its field's kind."""

    def __init__(self, message: str, field_name: Optional[str] = None):
        super().__init__(message)
        self.field_name = field_name
