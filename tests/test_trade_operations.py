"""
Tests for the broker-facing domain operations.
"""
import sqlite3
from datetime import datetime

import pytest
from sqlalchemy.exc import OperationalError

from tradestore.domain import QuoteOperations, TradeOperations
from tradestore.models import Quote, Trade, TradeId, TradeXref


@pytest.fixture
def trades(access):
    assert TradeOperations.create_tables(access)
    return access


def _trade(td_trade_id, status="WORKING"):
    return Trade(
        asset="AAPL",
        asset_type="EQUITY",
        order_type="MARKET",
        instruction="BUY",
        td_trade_id=td_trade_id,
        quantity=5,
        status=status,
        order_json="{}",
    )


class TestTradeIds:
    def test_counter_is_seeded_then_advanced(self, trades):
        assert TradeOperations.next_zorro_trade_id(trades) == 1000
        assert TradeOperations.next_zorro_trade_id(trades) == 1001
        assert TradeOperations.next_zorro_trade_id(trades) == 1002

        counters = trades.get_all_records(TradeId)
        assert len(counters) == 1
        assert counters[0].next_zorro_id == 1003

    def test_counter_without_table_fails(self, access):
        assert TradeOperations.next_zorro_trade_id(access) == -1

    def test_counter_read_failure_does_not_reseed(self, trades, monkeypatch):
        for _ in range(3):
            TradeOperations.next_zorro_trade_id(trades)

        def _disk_error(statement):
            raise OperationalError(statement.sql, {}, sqlite3.OperationalError("disk I/O error"))

        with monkeypatch.context() as m:
            m.setattr(trades, "_fetch_rows", _disk_error)
            assert TradeOperations.next_zorro_trade_id(trades) == -1

        counters = trades.get_all_records(TradeId)
        assert [c.next_zorro_id for c in counters] == [1003]
        assert TradeOperations.next_zorro_trade_id(trades) == 1003


class TestSave:
    def test_save_assigns_host_id(self, trades):
        trade = _trade(111)

        zorro_id = TradeOperations.save(trades, trade)

        assert zorro_id == 1000
        stored = TradeOperations.get_by_zorro_id(trades, zorro_id)
        assert stored is not None
        assert stored.td_trade_id == 111
        assert stored.id == trade.id

    def test_get_by_td_id(self, trades):
        TradeOperations.save(trades, _trade(222))
        TradeOperations.save(trades, _trade(222))
        TradeOperations.save(trades, _trade(333))

        assert [t.zorro_trade_id for t in TradeOperations.get_by_td_id(trades, 222)] == [1000, 1001]

    def test_unknown_host_id(self, trades):
        assert TradeOperations.get_by_zorro_id(trades, 4242) is None


class TestLinks:
    def test_link_and_get_linked(self, trades):
        assert TradeOperations.link(trades, 10, 11)
        assert TradeOperations.link(trades, 10, 12)
        assert TradeOperations.link(trades, 20, 21)

        linked = TradeOperations.get_linked(trades, 10)

        assert [x.secondary_tda_id for x in linked] == [11, 12]
        assert all(isinstance(x, TradeXref) for x in linked)


class TestPurge:
    def test_purge_deletes_rejected_trades(self, trades):
        for td_id, status in ((1, "FILLED"), (2, "CANCELED"), (3, "CANCELED")):
            TradeOperations.save(trades, _trade(td_id, status))

        result = TradeOperations.purge(trades, lambda t: t.status != "CANCELED")

        assert result.success
        assert [t.td_trade_id for t in trades.get_all_records(Trade)] == [1]

    def test_purge_with_nothing_stale(self, trades):
        TradeOperations.save(trades, _trade(1))

        assert TradeOperations.purge(trades, lambda t: True).success
        assert len(trades.get_all_records(Trade)) == 1


class TestQuotes:
    @pytest.fixture
    def quotes(self, access):
        access.create_table(Quote)
        return access

    def test_latest_and_nth_latest(self, quotes):
        assert QuoteOperations.latest(quotes) is None

        assert QuoteOperations.record_many(
            quotes,
            [
                Quote(symbol="MSFT", price=310.0, as_of=datetime(2024, 1, 3)),
                Quote(symbol="MSFT", price=300.0, as_of=datetime(2024, 1, 1)),
                Quote(symbol="IBM", price=160.0, as_of=datetime(2024, 1, 2)),
            ],
        )

        assert QuoteOperations.latest(quotes).symbol == "IBM"
        assert QuoteOperations.nth_latest(quotes, 1).price == 310.0
        assert QuoteOperations.nth_latest(quotes, 2).symbol == "IBM"
        assert QuoteOperations.nth_latest(quotes, 0) is None

    def test_for_symbol_newest_first(self, quotes):
        QuoteOperations.record(quotes, Quote(symbol="MSFT", price=1.0, as_of=datetime(2024, 1, 1)))
        QuoteOperations.record(quotes, Quote(symbol="MSFT", price=2.0, as_of=datetime(2024, 1, 2)))
        QuoteOperations.record(quotes, Quote(symbol="IBM", price=3.0, as_of=datetime(2024, 1, 3)))

        assert [q.price for q in QuoteOperations.for_symbol(quotes, "MSFT")] == [2.0, 1.0]
