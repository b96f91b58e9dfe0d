"""Base class and common helpers for store record types."""

from datetime import datetime, timezone
from typing import Optional

from pydantic import ConfigDict
from sqlmodel import SQLModel

from tradestore.db import column


def utc_now() -> datetime:
    """Naive UTC timestamp at seconds precision (the store's resolution)."""
    return datetime.now(timezone.utc).replace(tzinfo=None, microsecond=0)


class Record(SQLModel):
    """Base for all record types (plain SQLModel, no ORM table mapping)."""

    model_config = ConfigDict(
        from_attributes=True,
        arbitrary_types_allowed=True,
    )


class AutoIdRecord(Record):
    """Record keyed by a store-assigned integer ``id``."""

    id: Optional[int] = column(None, primary_key=True, autoincrement=True, not_null=True)
