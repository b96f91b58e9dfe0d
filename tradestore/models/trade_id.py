"""TradeId model - Single-row counter for host engine trade ids."""

from tradestore.db import column, register_record
from .base import AutoIdRecord


@register_record
class TradeId(AutoIdRecord):
    next_zorro_id: int = column(0, not_null=True)
