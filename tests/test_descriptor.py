from datetime import datetime
from enum import Enum
from typing import Optional

import pytest

from tradestore.core.log_helper import LogLevel
from tradestore.db import RecordDefinitionError, StorageKind, column, describe, enum_registry, register_record
from tradestore.models import LogRecord, Quote, Record, Trade


def test_quote_fields_in_declaration_order():
    descriptor = describe(Quote)

    assert descriptor.table_name == "Quote"
    assert descriptor.column_names == ("id", "symbol", "price", "as_of")


def test_storage_kinds_follow_annotations():
    descriptor = describe(Trade)

    assert descriptor.field("asset").kind is StorageKind.TEXT
    assert descriptor.field("quantity").kind is StorageKind.INTEGER32
    assert descriptor.field("td_trade_id").kind is StorageKind.INTEGER64
    assert descriptor.field("price").kind is StorageKind.DOUBLE
    assert descriptor.field("entered").kind is StorageKind.DATETIME


def test_constraint_flags_from_column_metadata():
    descriptor = describe(Quote)
    pk = descriptor.primary_key

    assert pk.name == "id"
    assert pk.is_auto_increment
    assert descriptor.field("symbol").is_not_null
    assert not descriptor.field("price").is_not_null
    assert not descriptor.field("price").is_primary_key


def test_optional_marks_field_nullable_and_unwraps_kind():
    source = describe(LogRecord).field("source")

    assert source.nullable
    assert source.kind is StorageKind.TEXT
    assert describe(Quote).field("id").nullable
    assert describe(Quote).field("id").kind is StorageKind.INTEGER32


def test_enum_fields_are_registered_enumerations():
    level = describe(LogRecord).field("level")

    assert level.kind is StorageKind.ENUMERATION
    assert level.enum_name == "LogLevel"
    assert enum_registry.resolve("LogLevel") is LogLevel


def test_insert_and_update_fields_skip_key():
    descriptor = describe(Quote)

    assert [f.name for f in descriptor.insert_fields] == ["symbol", "price", "as_of"]
    assert [f.name for f in descriptor.update_fields] == ["symbol", "price", "as_of"]


class Side(Enum):
    BUY = 1
    SELL = 2


class Fill(Record):
    id: Optional[int] = column(None, primary_key=True, autoincrement=True)
    side: Side = Side.BUY
    partial: bool = False
    note: Optional[bytes] = None
    at: Optional[datetime] = None


def test_unregistered_type_is_described_on_first_use():
    descriptor = describe(Fill)

    assert describe(Fill) is descriptor
    assert descriptor.field("side").kind is StorageKind.ENUMERATION
    assert descriptor.field("partial").kind is StorageKind.BOOLEAN
    assert descriptor.field("note").kind is StorageKind.TEXT
    assert descriptor.field("at").kind is StorageKind.DATETIME
    assert "Side" in enum_registry


def test_table_name_override():
    @register_record(table="fills_archive")
    class ArchivedFill(Record):
        id: int = column(0, primary_key=True)

    assert describe(ArchivedFill).table_name == "fills_archive"


def test_two_primary_keys_rejected():
    with pytest.raises(RecordDefinitionError):

        @register_record
        class TwoKeys(Record):
            a: int = column(0, primary_key=True)
            b: int = column(0, primary_key=True)


def test_autoincrement_requires_integer_key():
    with pytest.raises(RecordDefinitionError):

        @register_record
        class TextKey(Record):
            code: str = column("", primary_key=True, autoincrement=True)


class Venue(str, Enum):
    NYSE = "N"
    NASDAQ = "Q"


def test_text_valued_enumeration_rejected():
    with pytest.raises(RecordDefinitionError, match="Venue must have integer values"):

        @register_record
        class Listing(Record):
            id: int = column(0, primary_key=True)
            venue: Venue = Venue.NYSE

    assert "Venue" not in enum_registry
