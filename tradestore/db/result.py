"""Result values returned across the DataAccess boundary."""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


@dataclass
class DBResult:
    """Success/failure envelope returned by every mutating operation.

    A fresh envelope reports success; the operation that produced it sets
    ``success`` to False and fills ``error_msg`` when the store fails.
    """

    success: bool = True
    error_msg: str = ""

    @classmethod
    def failure(cls, message: str) -> "DBResult":
        return cls(success=False, error_msg=message)

    def __bool__(self) -> bool:
        return self.success


class LookupStatus(str, Enum):
    FOUND = "found"
    NOT_FOUND = "not_found"
    INVALID = "invalid"  # row exists but could not be converted to a record
    ERROR = "error"  # the store could not be read


@dataclass
class Lookup(Generic[T]):
    """Outcome of a single-record fetch.

    Distinguishes "no such row", "row found but hydration failed" and
    "store read failed", all of which carry ``record=None``.
    """

    status: LookupStatus
    record: Optional[T] = None
    error_msg: str = ""

    @classmethod
    def found(cls, record: T) -> "Lookup[T]":
        return cls(status=LookupStatus.FOUND, record=record)

    @classmethod
    def missing(cls) -> "Lookup[T]":
        return cls(status=LookupStatus.NOT_FOUND)

    @classmethod
    def invalid(cls, message: str) -> "Lookup[T]":
        return cls(status=LookupStatus.INVALID, error_msg=message)

    @classmethod
    def error(cls, message: str) -> "Lookup[T]":
        return cls(status=LookupStatus.ERROR, error_msg=message)

    @property
    def is_found(self) -> bool:
        return self.status is LookupStatus.FOUND

    def __bool__(self) -> bool:
        return self.is_found
