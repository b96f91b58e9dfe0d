from datetime import datetime

from sqlalchemy import text

from tradestore.db import column, get_connection, register_record
from tradestore.models import AutoIdRecord, Quote, Trade, TradeId, TradeXref


def _columns(store_config, table):
    with get_connection(store_config) as conn:
        rows = conn.execute(text(f"PRAGMA table_info({table})")).mappings().all()
    return [(r["name"], r["type"], r["notnull"], r["pk"]) for r in rows]


def test_create_table_builds_quote_columns(access, store_config):
    result = access.create_table(Quote)

    assert result.success
    assert result.error_msg == ""
    assert access.table_exists(Quote)
    assert _columns(store_config, "Quote") == [
        ("id", "INTEGER", 0, 1),
        ("symbol", "NVARCHAR", 1, 0),
        ("price", "DOUBLE", 0, 0),
        ("as_of", "DATETIME", 0, 0),
    ]


def test_create_table_twice_keeps_data(access):
    access.create_table(Quote)
    access.insert(Quote(symbol="MSFT", price=312.5))

    result = access.create_table(Quote)

    assert result.success
    assert len(access.get_all_records(Quote)) == 1


def test_overwrite_recreates_empty_table(access, store_config):
    access.create_table(Quote)
    access.insert_all([Quote(symbol=s, price=1.0) for s in ("A", "B", "C")])
    before = _columns(store_config, "Quote")

    result = access.create_table(Quote, overwrite=True)

    assert result.success
    assert access.get_all_records(Quote) == []
    assert _columns(store_config, "Quote") == before


def test_column_defaults_apply(access, store_config):
    access.create_table(Quote)
    access.execute("INSERT INTO Quote (symbol) VALUES (:symbol)", {"symbol": "IBM"})

    quote = access.get_most_recent(Quote).record

    assert quote.price == 0.0
    assert isinstance(quote.as_of, datetime)


def test_create_tables_in_order(access):
    result = access.create_tables(Trade, TradeXref, TradeId)

    assert result.success
    assert all(access.table_exists(t) for t in (Trade, TradeXref, TradeId))


def test_create_table_failure_is_reported(unconfigured_access):
    result = unconfigured_access.create_table(Quote)

    assert not result.success
    assert "not set" in result.error_msg


def test_create_table_on_unwritable_path(tmp_path):
    from tradestore.db import DataAccess, StoreConfig

    access = DataAccess(StoreConfig(database_path=str(tmp_path / "missing" / "tda.db")))

    result = access.create_table(Quote)

    assert not result.success
    assert result.error_msg


def test_drop_and_reset_autoincrement(access):
    access.create_table(Quote)
    first = Quote(symbol="A", price=1.0)
    access.insert(first)
    access.delete_all(Quote)

    assert access.reset_autoincrement(Quote).success
    second = Quote(symbol="B", price=1.0)
    access.insert(second)
    assert second.id == first.id

    assert access.drop_table(Quote).success
    assert not access.table_exists(Quote)


def test_db_size(access, unconfigured_access):
    access.create_table(Quote)

    assert access.get_db_size() > 0
    assert unconfigured_access.get_db_size() == 0


@register_record
class Order(AutoIdRecord):
    symbol: str = column("", not_null=True)
    limit: float = 0.0


def test_keyword_named_record_round_trips(access):
    assert access.create_table(Order).success
    assert access.table_exists(Order)

    order = Order(symbol="MSFT", limit=310.0)
    assert access.insert(order)

    stored = access.get_most_recent(Order).record
    assert stored.id == order.id
    assert stored.limit == 310.0
    assert access.get_ordinal_record(Order, 1, order_by="limit").record.symbol == "MSFT"
    assert access.delete_by_id(Order, order.id).success
    assert access.drop_table(Order).success
