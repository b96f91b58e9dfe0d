"""Domain operations for Quote model - Last-price history."""

from typing import List, Optional, Sequence

from tradestore.db import DataAccess
from tradestore.models import Quote


class QuoteOperations:
    """Quote history reads and writes."""

    @staticmethod
    def record(access: DataAccess, quote: Quote) -> bool:
        """Store one quote; its ``id`` is filled in on success."""
        return access.insert(quote)

    @staticmethod
    def record_many(access: DataAccess, quotes: Sequence[Quote]) -> bool:
        """Store a batch of quotes in one transaction (all or nothing)."""
        return access.insert_all(quotes)

    @staticmethod
    def latest(access: DataAccess) -> Optional[Quote]:
        """Most recently inserted quote, or None."""
        return access.get_most_recent(Quote).record

    @staticmethod
    def nth_latest(access: DataAccess, n: int) -> Optional[Quote]:
        """Nth newest quote by ``as_of`` (1 = newest), or None."""
        return access.get_ordinal_record(Quote, n, order_by="as_of").record

    @staticmethod
    def for_symbol(access: DataAccess, symbol: str) -> List[Quote]:
        """All quotes for a symbol, newest first."""
        return access.get_records_by_sql(
            Quote,
            'SELECT * FROM "Quote" WHERE symbol = :symbol ORDER BY as_of DESC',
            {"symbol": symbol},
        )
