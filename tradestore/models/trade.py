"""Trade model - Orders placed through the broker plug-in."""

from datetime import datetime

from tradestore.db import column, register_record
from .base import AutoIdRecord, utc_now


@register_record
class Trade(AutoIdRecord):
    """An order placed with the broker, keyed to the host engine's trade id."""

    asset: str = column("", not_null=True)
    asset_type: str = column("", not_null=True)
    order_type: str = column("", not_null=True)
    instruction: str = column("", not_null=True)  # BUY, SELL, SELL_SHORT, BUY_TO_COVER
    td_trade_id: int = column(0, not_null=True, big=True)  # Broker order id
    zorro_trade_id: int = column(0, not_null=True)  # Host engine trade id
    quantity: int = column(0, not_null=True)
    price: float = 0.0
    open: float = 0.0
    close: float = 0.0
    cost: float = 0.0
    profit: float = 0.0
    filled: int = 0
    status: str = ""
    status_code: int = 0
    order_json: str = column("", not_null=True)
    entered: datetime = column(default_factory=utc_now, not_null=True)
