"""TradeXref model - Links between related broker orders."""

from datetime import datetime

from tradestore.db import column, register_record
from .base import AutoIdRecord, utc_now


@register_record
class TradeXref(AutoIdRecord):
    """Cross reference from a primary broker order to a secondary one."""

    primary_tda_id: int = column(0, not_null=True, big=True)
    secondary_tda_id: int = column(0, not_null=True, big=True)
    date_entered: datetime = column(default_factory=utc_now, not_null=True)
