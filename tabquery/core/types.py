"""Type system for tabquery.

This module provides the column types, per-column type inference over a
decoded table, value coercion, and the typed table representation.
"""

import re
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any, Iterable, List, Optional, Sequence, Tuple

from tabquery.core.errors import ExecError
from tabquery.readers.base import RawTable


class DataType(Enum):
    """Column types supported by tabquery."""

    INTEGER = "INTEGER"
    FLOAT = "FLOAT"
    BOOLEAN = "BOOLEAN"
    DATE = "DATE"
    STRING = "STRING"

    def __str__(self) -> str:
        return self.value

    def is_numeric(self) -> bool:
        """Check if type is numeric (INTEGER or FLOAT)."""
        return self in (DataType.INTEGER, DataType.FLOAT)

    def is_comparable(self, other: "DataType") -> bool:
        """Check if values of this type can be compared with values of another type."""
        if self == other:
            return True
        return self.is_numeric() and other.is_numeric()

    @staticmethod
    def of_value(value: Any) -> Optional["DataType"]:
        """Type of a Python value, or None for null."""
        if value is None:
            return None
        if isinstance(value, bool):
            return DataType.BOOLEAN
        if isinstance(value, int):
            return DataType.INTEGER
        if isinstance(value, float):
            return DataType.FLOAT
        if isinstance(value, date):
            return DataType.DATE
        return DataType.STRING


# Inference tries these in order; STRING is the fallback.
INFERENCE_ORDER = (DataType.BOOLEAN, DataType.INTEGER, DataType.FLOAT, DataType.DATE)

_INTEGER = re.compile(r"[+-]?\d+")
_FLOAT = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")

DATE_FORMATS = (
    "%Y-%m-%d",  # ISO: 2024-01-15
    "%Y/%m/%d",  # 2024/01/15
    "%m/%d/%Y",  # US: 01/15/2024
    "%d.%m.%Y",  # EU with dots: 15.01.2024
)


def parse_date(value: str) -> Optional[date]:
    """Try to parse a date using the recognized calendar formats.

    Args:
        value: String to parse

    Returns:
        date object if successful, None otherwise
    """
    value = value.strip()

    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(value, fmt).date()
        except ValueError:
            continue

    return None


def matches_type(value: str, dtype: DataType) -> bool:
    """Check whether a non-empty, stripped string is a valid value of dtype."""
    if dtype == DataType.BOOLEAN:
        return value.lower() in ("true", "false")
    if dtype == DataType.INTEGER:
        return _INTEGER.fullmatch(value) is not None
    if dtype == DataType.FLOAT:
        return _FLOAT.fullmatch(value) is not None
    if dtype == DataType.DATE:
        return parse_date(value) is not None
    return True


def convert_value(value: str, dtype: DataType) -> Any:
    """Convert a raw field to the Python value for dtype.

    Empty or whitespace-only fields are null for every type.

    Examples:
        >>> convert_value("42", DataType.INTEGER)
        42
        >>> convert_value("", DataType.FLOAT) is None
        True
        >>> convert_value("2024-01-15", DataType.DATE)
        datetime.date(2024, 1, 15)
    """
    stripped = value.strip()
    if not stripped:
        return None

    if dtype == DataType.BOOLEAN:
        return stripped.lower() == "true"
    if dtype == DataType.INTEGER:
        return int(stripped)
    if dtype == DataType.FLOAT:
        return float(stripped)
    if dtype == DataType.DATE:
        return parse_date(stripped)
    return value


@dataclass(frozen=True)
class Column:
    """A named, typed column."""

    name: str
    type: DataType

    def __repr__(self) -> str:
        return f"{self.name}: {self.type}"


class ColumnTypeTracker:
    """Narrows the candidate types of one column as values are seen.

    Values can be fed incrementally, so inference does not require more
    than one pass over the rows.
    """

    def __init__(self):
        self.candidates = list(INFERENCE_ORDER)
        self.non_empty = 0

    def update(self, value: str) -> None:
        stripped = value.strip()
        if not stripped:
            return
        self.non_empty += 1
        if self.candidates:
            self.candidates = [t for t in self.candidates if matches_type(stripped, t)]

    def result(self) -> DataType:
        if self.non_empty == 0 or not self.candidates:
            return DataType.STRING
        return self.candidates[0]


def infer_columns(table: RawTable) -> List[Column]:
    """Infer one type per column from every value of the column.

    Args:
        table: Decoded table of string fields

    Returns:
        Columns in header order

    Examples:
        >>> raw = RawTable(("id", "name"), (("1", "Alice"), ("2", "")))
        >>> infer_columns(raw)
        [id: INTEGER, name: STRING]
    """
    trackers = [ColumnTypeTracker() for _ in table.header]

    for row in table.rows:
        for tracker, value in zip(trackers, row):
            tracker.update(value)

    return [Column(name, tracker.result()) for name, tracker in zip(table.header, trackers)]


@dataclass(frozen=True)
class TypedTable:
    """A decoded table whose values are coerced to the inferred column types."""

    columns: Tuple[Column, ...]
    rows: Tuple[Tuple[Any, ...], ...]

    @property
    def column_names(self) -> List[str]:
        return [column.name for column in self.columns]

    def __len__(self) -> int:
        return len(self.rows)

    def iter_dicts(self) -> Iterable[dict]:
        names = self.column_names
        for row in self.rows:
            yield dict(zip(names, row))


def build_typed_table(table: RawTable, columns: Optional[Sequence[Column]] = None) -> TypedTable:
    """Coerce every field of a raw table to its column type.

    Args:
        table: Decoded table of string fields
        columns: Previously inferred columns (inferred here if omitted)

    Returns:
        TypedTable
    """
    if columns is None:
        columns = infer_columns(table)

    types = [column.type for column in columns]
    rows = tuple(
        tuple(convert_value(value, dtype) for value, dtype in zip(row, types))
        for row in table.rows
    )
    return TypedTable(columns=tuple(columns), rows=rows)


def coerce_literal(value: Any, dtype: DataType) -> Any:
    """Coerce a literal for comparison against a value of dtype.

    Only lossless conversions are performed: text that parses as the target
    type, integer to float, and any literal to its text form for STRING.
    Numeric literals are left untouched against numeric types.

    Args:
        value: Literal value (int, float, str or bool)
        dtype: Type of the other operand

    Returns:
        The coerced value

    Raises:
        ExecError: If the literal cannot be represented as dtype
    """
    if value is None:
        return None

    literal_type = DataType.of_value(value)
    if literal_type.is_comparable(dtype):
        return value

    if dtype == DataType.STRING:
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, date):
            return value.isoformat()
        return str(value)

    if isinstance(value, str):
        stripped = value.strip()
        if stripped and matches_type(stripped, dtype):
            return convert_value(stripped, dtype)
        if dtype == DataType.INTEGER and stripped and matches_type(stripped, DataType.FLOAT):
            return float(stripped)

    raise ExecError(f"Cannot compare {literal_type} value {value!r} with {dtype} column")
