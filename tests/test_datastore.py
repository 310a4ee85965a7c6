"""Tests for the SQLAlchemy store adapter."""

import pytest
from sqlalchemy import Column, Integer, MetaData, String, Table, inspect, select, text
from sqlalchemy import exc as sa_exc

from app.services.datastore import (
    StoreError,
    StoreErrorKind,
    TableState,
    classify_error,
)
from app.services.type_inference import ColumnType


def make_orders_table(engine, name="temp_shopee_data"):
    metadata = MetaData()
    table = Table(
        name,
        metadata,
        Column("id", Integer, primary_key=True),
        Column("order_id", String, unique=True),
        Column("quantity", Integer),
    )
    metadata.create_all(engine)
    return table


def test_table_state(store, engine):
    assert store.table_state("temp_shopee_data") == TableState.MISSING
    make_orders_table(engine)
    assert store.table_state("temp_shopee_data") == TableState.EXISTS


def test_create_table_from_column_types(store, engine):
    store.create_table("temp_new_data", {
        "order_id": ColumnType.INTEGER,
        "price": ColumnType.DECIMAL,
        "paid": ColumnType.BOOLEAN,
        "product": ColumnType.TEXT,
    })

    columns = [c["name"] for c in inspect(engine).get_columns("temp_new_data")]
    assert columns == ["id", "order_id", "price", "paid", "product", "created_at"]


def test_create_table_is_idempotent(store):
    store.create_table("temp_new_data", {"a": ColumnType.TEXT})
    store.create_table("temp_new_data", {"a": ColumnType.TEXT})
    assert store.table_state("temp_new_data") == TableState.EXISTS


def test_insert_rows(store, engine):
    table = make_orders_table(engine)
    assert store.insert_rows("temp_shopee_data", [
        {"order_id": "A1", "quantity": 2},
        {"order_id": "A2", "quantity": None},
    ]) == 2

    with engine.connect() as conn:
        rows = conn.execute(select(table.c.order_id, table.c.quantity).order_by(table.c.id)).all()
    assert rows == [("A1", 2), ("A2", None)]


def test_insert_nothing(store):
    assert store.insert_rows("whatever", []) == 0


def test_missing_table_is_undefined_table(store):
    with pytest.raises(StoreError) as exc_info:
        store.insert_rows("no_such_table", [{"a": 1}])
    assert exc_info.value.kind == StoreErrorKind.UNDEFINED_TABLE


def test_unknown_column_is_undefined_column(store, engine):
    make_orders_table(engine)
    with pytest.raises(StoreError) as exc_info:
        store.insert_rows("temp_shopee_data", [{"order_id": "A1", "colour": "red"}])
    assert exc_info.value.kind == StoreErrorKind.UNDEFINED_COLUMN


def test_constraint_violation_rolls_back_the_batch(store, engine):
    table = make_orders_table(engine)
    with pytest.raises(StoreError) as exc_info:
        store.insert_rows("temp_shopee_data", [
            {"order_id": "A1", "quantity": 1},
            {"order_id": "A1", "quantity": 2},
        ])
    assert exc_info.value.kind == StoreErrorKind.CONSTRAINT_VIOLATION
    assert "UNIQUE" in exc_info.value.message.upper()

    with engine.connect() as conn:
        assert conn.execute(select(table.c.id)).all() == []


def test_value_the_driver_cannot_bind_is_invalid_data(store, engine):
    table = make_orders_table(engine)
    with pytest.raises(StoreError) as exc_info:
        store.insert_rows("temp_shopee_data", [
            {"order_id": "A1", "quantity": 1},
            {"order_id": "A2", "quantity": 99999999999999999999},
        ])
    assert exc_info.value.kind == StoreErrorKind.INVALID_DATA
    assert "too large" in exc_info.value.message

    with engine.connect() as conn:
        assert conn.execute(select(table.c.id)).all() == []


def test_error_message_is_driver_message(store):
    with pytest.raises(StoreError) as exc_info:
        store.insert_rows("no_such_table", [{"a": 1}])
    assert "[SQL:" not in str(exc_info.value)


def test_classify_sqlite_operational_errors(engine):
    with pytest.raises(sa_exc.OperationalError) as exc_info:
        with engine.connect() as conn:
            conn.execute(text("INSERT INTO missing_table (a) VALUES (1)"))
    assert classify_error(exc_info.value) == StoreErrorKind.UNDEFINED_TABLE


def test_classify_uses_sqlstate_when_present():
    class PgError(Exception):
        pgcode = "42703"

    error = sa_exc.ProgrammingError("INSERT ...", {}, PgError("column does not exist"))
    assert classify_error(error) == StoreErrorKind.UNDEFINED_COLUMN


def test_classify_unknown():
    assert classify_error(RuntimeError("boom")) == StoreErrorKind.UNKNOWN
