"""Record types stored by the broker plug-in."""

from .base import AutoIdRecord, Record, utc_now

# Trading tables
from .trade import Trade
from .trade_xref import TradeXref
from .trade_id import TradeId

# Market data / diagnostics
from .quote import Quote
from .log_record import LogRecord

__all__ = [
    "AutoIdRecord",
    "Record",
    "utc_now",
    # Trading
    "Trade",
    "TradeXref",
    "TradeId",
    # Market data / diagnostics
    "Quote",
    "LogRecord",
]
