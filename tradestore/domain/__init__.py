"""Domain layer - Broker-facing operations on the store.

This layer turns broker use cases into DataAccess calls (no SQL beyond
simple lookups, no broker I/O).

Usage:
    from tradestore.db import DataAccess, StoreConfig
    from tradestore.domain import TradeOperations

    access = DataAccess(StoreConfig(database_path="Data/tda.db"))
    TradeOperations.create_tables(access)
    zorro_id = TradeOperations.save(access, trade)
"""

from .trade_operations import TradeOperations
from .quote_operations import QuoteOperations

__all__ = [
    "TradeOperations",
    "QuoteOperations",
]
