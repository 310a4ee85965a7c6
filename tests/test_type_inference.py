"""Tests for column type inference and value coercion."""

import math

import pytest

from app.services.type_inference import (
    ColumnType,
    coerce_record,
    coerce_value,
    infer_column_types,
    infer_type,
    sample_column,
    to_number,
)


class TestInferType:
    def test_boolean_literals(self):
        assert infer_type(["1", "0", "yes", "no"]) == ColumnType.BOOLEAN

    def test_boolean_is_case_insensitive(self):
        assert infer_type(["TRUE", "False", "Yes", "NO"]) == ColumnType.BOOLEAN

    def test_python_bools(self):
        assert infer_type([True, False, "yes"]) == ColumnType.BOOLEAN

    def test_ones_and_zeros_prefer_boolean_over_integer(self):
        assert infer_type(["1", "0", "1"]) == ColumnType.BOOLEAN

    def test_integers(self):
        assert infer_type(["1", "2", "-3", "40"]) == ColumnType.INTEGER

    def test_whole_floats_count_as_integers(self):
        assert infer_type(["1.0", "2", "1e3"]) == ColumnType.INTEGER

    def test_decimal(self):
        assert infer_type(["1", "2.5", "3"]) == ColumnType.DECIMAL

    def test_infinity_is_decimal(self):
        assert infer_type(["1", "Infinity"]) == ColumnType.DECIMAL

    def test_text(self):
        assert infer_type(["a", "b"]) == ColumnType.TEXT

    def test_one_text_value_makes_column_text(self):
        assert infer_type(["1", "2", "n/a"]) == ColumnType.TEXT

    def test_nan_is_not_a_number(self):
        assert infer_type(["1", "NaN"]) == ColumnType.TEXT

    def test_empty_sample_is_text(self):
        assert infer_type([]) == ColumnType.TEXT

    def test_hex_literal_is_numeric(self):
        assert infer_type(["0x1f", "2"]) == ColumnType.INTEGER

    def test_deterministic(self):
        values = ["3", "4.25", "7"]
        assert {infer_type(values) for _ in range(5)} == {ColumnType.DECIMAL}


class TestToNumber:
    @pytest.mark.parametrize("value,expected", [
        ("42", 42.0),
        (" 7 ", 7.0),
        ("", 0.0),
        ("   ", 0.0),
        (".5", 0.5),
        ("-2.5e2", -250.0),
        ("0b11", 3.0),
        (5, 5.0),
        (True, 1.0),
    ])
    def test_numbers(self, value, expected):
        assert to_number(value) == expected

    @pytest.mark.parametrize("value", ["abc", "1,000", "1_000", "NaN", "inf", "12abc", float("nan")])
    def test_not_numbers(self, value):
        assert to_number(value) is None

    def test_infinity(self):
        assert to_number("-Infinity") == -math.inf


class TestSampling:
    def test_sample_skips_empty_values(self):
        records = [{"a": ""}, {"a": None}, {"a": "x"}, {}, {"a": "y"}]
        assert sample_column(records, "a") == ["x", "y"]

    def test_sample_is_capped(self):
        records = [{"a": str(i)} for i in range(250)]
        sample = sample_column(records, "a", sample_size=100)
        assert len(sample) == 100
        assert sample[-1] == "99"

    def test_values_after_sample_are_ignored(self):
        records = [{"n": str(i)} for i in range(2, 102)] + [{"n": "not a number"}]
        assert infer_column_types(records, ["n"]) == {"n": ColumnType.INTEGER}

    def test_empty_values_do_not_count_towards_sample(self):
        records = [{"n": ""} for _ in range(150)] + [{"n": "2.5"}]
        assert infer_column_types(records, ["n"]) == {"n": ColumnType.DECIMAL}

    def test_all_columns_typed(self):
        records = [
            {"id": "1", "price": "9.99", "active": "yes", "name": "Mug", "note": ""},
            {"id": "2", "price": "12", "active": "no", "name": "Cup", "note": ""},
        ]
        types = infer_column_types(records, ["id", "price", "active", "name", "note"])
        assert types == {
            "id": ColumnType.INTEGER,
            "price": ColumnType.DECIMAL,
            "active": ColumnType.BOOLEAN,
            "name": ColumnType.TEXT,
            "note": ColumnType.TEXT,
        }


class TestCoerceValue:
    @pytest.mark.parametrize("column_type", list(ColumnType))
    def test_none_and_empty_become_none(self, column_type):
        assert coerce_value(None, column_type) is None
        assert coerce_value("", column_type) is None

    @pytest.mark.parametrize("column_type", list(ColumnType))
    def test_idempotent_on_none(self, column_type):
        once = coerce_value(None, column_type)
        assert coerce_value(once, column_type) is None

    @pytest.mark.parametrize("value,expected", [
        ("42", 42),
        ("-7", -7),
        ("3.9", 3),
        ("12abc", 12),
        ("  5", 5),
        ("1e3", 1),
        ("0x1f", 31),
        ("abc", None),
        (8, 8),
        (2.7, 2),
    ])
    def test_integer(self, value, expected):
        assert coerce_value(value, ColumnType.INTEGER) == expected

    @pytest.mark.parametrize("value,expected", [
        ("2.5", 2.5),
        ("2.5kg", 2.5),
        ("-.5", -0.5),
        ("1e3", 1000.0),
        ("7", 7.0),
        ("kg", None),
    ])
    def test_decimal(self, value, expected):
        assert coerce_value(value, ColumnType.DECIMAL) == expected

    @pytest.mark.parametrize("value,expected", [
        ("true", True), ("1", True), ("YES", True), ("y", True), (True, True),
        ("false", False), ("0", False), ("No", False), ("n", False), (False, False),
        ("maybe", None), ("2", None),
    ])
    def test_boolean(self, value, expected):
        assert coerce_value(value, ColumnType.BOOLEAN) is expected

    def test_text_is_stringified(self):
        assert coerce_value(12, ColumnType.TEXT) == "12"
        assert coerce_value(" padded ", ColumnType.TEXT) == " padded "

    def test_coerce_record_defaults_unknown_columns_to_text(self):
        record = {"qty": "3", "extra": 5}
        assert coerce_record(record, {"qty": ColumnType.INTEGER}) == {"qty": 3, "extra": "5"}
