"""
Tests for type inference and value coercion
"""

from datetime import date

import pytest

from tabquery.core.errors import ExecError
from tabquery.core.types import (
    Column,
    DataType,
    build_typed_table,
    coerce_literal,
    convert_value,
    infer_columns,
    parse_date,
)
from tabquery.readers.base import RawTable


def infer(*values):
    """Type of a single column holding the given values"""
    raw = RawTable(header=("c",), rows=tuple((v,) for v in values))
    return infer_columns(raw)[0].type


class TestInference:
    """Test per-column type inference"""

    def test_integer(self):
        assert infer("1", "-2", "+30") == DataType.INTEGER

    def test_float(self):
        assert infer("1", "2.5", "1e3") == DataType.FLOAT

    def test_boolean(self):
        assert infer("true", "FALSE", "True") == DataType.BOOLEAN

    def test_date(self):
        assert infer("2024-01-15", "2023-12-31") == DataType.DATE

    def test_string_fallback(self):
        assert infer("1", "two") == DataType.STRING

    def test_blanks_ignored(self):
        assert infer("", "4", "  ") == DataType.INTEGER

    def test_all_blank_is_string(self):
        assert infer("", "") == DataType.STRING

    def test_no_rows_is_string(self):
        assert infer() == DataType.STRING

    def test_zero_and_one_are_not_boolean(self):
        assert infer("0", "1") == DataType.INTEGER

    def test_mixed_dates_and_numbers(self):
        assert infer("2024-01-15", "5") == DataType.STRING

    def test_inference_is_deterministic(self):
        raw = RawTable(
            ("id", "score", "flag", "when", "note"),
            (
                ("1", "9.5", "true", "2024-01-15", "a"),
                ("", "", "", "", ""),
                ("3", "7", "FALSE", "2024/02/01", "4"),
            ),
        )

        first = infer_columns(raw)
        second = infer_columns(raw)

        assert first == second
        assert [c.type for c in first] == [
            DataType.INTEGER,
            DataType.FLOAT,
            DataType.BOOLEAN,
            DataType.DATE,
            DataType.STRING,
        ]

    def test_column_order_and_repr(self):
        raw = RawTable(("id", "name"), (("1", "Alice"), ("2", "")))

        assert repr(infer_columns(raw)) == "[id: INTEGER, name: STRING]"


class TestConversion:
    """Test field conversion"""

    def test_blank_is_null(self):
        for dtype in DataType:
            assert convert_value(" ", dtype) is None

    def test_values(self):
        assert convert_value(" 42 ", DataType.INTEGER) == 42
        assert convert_value("2.5", DataType.FLOAT) == 2.5
        assert convert_value("TRUE", DataType.BOOLEAN) is True
        assert convert_value("15.01.2024", DataType.DATE) == date(2024, 1, 15)

    def test_string_keeps_raw_value(self):
        assert convert_value(" padded ", DataType.STRING) == " padded "

    @pytest.mark.parametrize("text", ["2024-01-15", "2024/01/15", "01/15/2024", "15.01.2024"])
    def test_date_formats(self, text):
        assert parse_date(text) == date(2024, 1, 15)

    def test_invalid_date(self):
        assert parse_date("2024-02-30") is None

    def test_build_typed_table(self):
        raw = RawTable(("id", "score"), (("1", "9.5"), ("2", "")))
        table = build_typed_table(raw)

        assert table.columns == (Column("id", DataType.INTEGER), Column("score", DataType.FLOAT))
        assert table.rows == ((1, 9.5), (2, None))
        assert list(table.iter_dicts())[1] == {"id": 2, "score": None}


class TestCoerceLiteral:
    """Test literal coercion at comparison boundaries"""

    def test_numeric_untouched(self):
        assert coerce_literal(8, DataType.FLOAT) == 8
        assert coerce_literal(8.5, DataType.INTEGER) == 8.5

    def test_text_to_date(self):
        assert coerce_literal("2024-01-15", DataType.DATE) == date(2024, 1, 15)

    def test_text_to_number(self):
        assert coerce_literal("25", DataType.INTEGER) == 25
        assert coerce_literal("2.5", DataType.INTEGER) == 2.5

    def test_anything_to_string(self):
        assert coerce_literal(5, DataType.STRING) == "5"
        assert coerce_literal(True, DataType.STRING) == "true"

    def test_incompatible(self):
        with pytest.raises(ExecError, match="Cannot compare STRING value 'abc' with INTEGER column"):
            coerce_literal("abc", DataType.INTEGER)

    def test_number_to_boolean_rejected(self):
        with pytest.raises(ExecError):
            coerce_literal(1, DataType.BOOLEAN)
