"""Domain operations for Trade, TradeXref and TradeId - broker-facing use cases."""

import logging
from typing import Callable, List, Optional

from tradestore.core.log_helper import LogLevel, log
from tradestore.db import DataAccess, DBResult, LookupStatus
from tradestore.models import Trade, TradeId, TradeXref

logger = logging.getLogger(__name__)

FIRST_ZORRO_TRADE_ID = 1000


class TradeOperations:
    """Trade bookkeeping shared by the broker integration layer.

    Keep this class focused on data access only - the broker calls decide
    what to store.
    """

    @staticmethod
    def create_tables(access: DataAccess, overwrite: bool = False) -> bool:
        """Create the Trade, TradeXref and TradeId tables if they do not exist.

        Args:
            access: Store executor
            overwrite: Drop and recreate the tables

        Returns:
            True if every table is ready, False at the first failure (logged)
        """
        result = access.create_tables(Trade, TradeXref, TradeId, overwrite=overwrite)
        if not result.success:
            log(LogLevel.Error, result.error_msg, logger)
        return result.success

    @staticmethod
    def get_by_zorro_id(access: DataAccess, zorro_trade_id: int) -> Optional[Trade]:
        """Get the trade stored under a host engine trade id.

        Returns:
            Trade if exactly one matches, None otherwise
        """
        trades = access.get_records_by_sql(
            Trade,
            'SELECT * FROM "Trade" WHERE zorro_trade_id = :zorro_trade_id',
            {"zorro_trade_id": zorro_trade_id},
        )
        return trades[0] if len(trades) == 1 else None

    @staticmethod
    def get_by_td_id(access: DataAccess, td_trade_id: int) -> List[Trade]:
        """Get trades for a broker order id."""
        return access.get_records_by_sql(
            Trade,
            'SELECT * FROM "Trade" WHERE td_trade_id = :td_trade_id',
            {"td_trade_id": td_trade_id},
        )

    @staticmethod
    def next_zorro_trade_id(access: DataAccess) -> int:
        """Hand out the next host engine trade id.

        The counter lives in the single TradeId row. The first call seeds it
        (returning 1000 and storing 1001); later calls return the stored
        value and advance it.

        Returns:
            The id, or -1 if the counter could not be read or written
        """
        lookup = access.get_ordinal_record(TradeId, 1)

        if lookup.is_found:
            counter = lookup.record
            next_id = counter.next_zorro_id
            counter.next_zorro_id += 1
            if not access.update(counter).success:
                return -1
            return next_id

        if lookup.status is not LookupStatus.NOT_FOUND:
            log(LogLevel.Error, f"TradeId counter unreadable. {lookup.error_msg}", logger)
            return -1

        counter = TradeId(next_zorro_id=FIRST_ZORRO_TRADE_ID + 1)
        if not access.insert(counter):
            return -1
        return FIRST_ZORRO_TRADE_ID

    @staticmethod
    def save(access: DataAccess, trade: Trade) -> int:
        """Assign a host engine trade id and store the trade.

        The trade is inserted unless one with the same host id already
        exists.

        Returns:
            The assigned host engine trade id, or -1 on failure
        """
        zorro_id = TradeOperations.next_zorro_trade_id(access)
        if zorro_id < 0:
            return -1

        trade.zorro_trade_id = zorro_id
        if TradeOperations.get_by_zorro_id(access, zorro_id) is None:
            if not access.insert(trade):
                return -1
        return zorro_id

    @staticmethod
    def link(access: DataAccess, primary_tda_id: int, secondary_tda_id: int) -> bool:
        """Record that two broker orders belong together."""
        return access.insert(
            TradeXref(primary_tda_id=primary_tda_id, secondary_tda_id=secondary_tda_id)
        )

    @staticmethod
    def get_linked(access: DataAccess, primary_tda_id: int) -> List[TradeXref]:
        return access.get_records_by_sql(
            TradeXref,
            'SELECT * FROM "TradeXref" WHERE primary_tda_id = :primary_tda_id',
            {"primary_tda_id": primary_tda_id},
        )

    @staticmethod
    def purge(access: DataAccess, keep: Callable["Trade", bool]) -> DBResult:
        """Delete stored trades the caller no longer recognizes.

        Args:
            access: Store executor
            keep: Returns False for trades to delete (e.g. cancelled or
                unknown at the broker)

        Returns:
            DBResult of the delete (success when nothing needed deleting)
        """
        stale = [t.id for t in access.get_all_records(Trade) if not keep(t)]
        if stale:
            logger.info(f"Purging {len(stale)} stale trades")
        return access.delete_by_ids(Trade, stale)
