"""Quote model - Last-price snapshots per symbol."""

from datetime import datetime

from tradestore.db import column, register_record
from .base import AutoIdRecord, utc_now


@register_record
class Quote(AutoIdRecord):
    symbol: str = column("", not_null=True)
    price: float = 0.0
    as_of: datetime = column(default_factory=utc_now)
