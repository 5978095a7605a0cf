"""
Query result snapshot

A ResultTable holds the typed output columns and the rows of a query.
It is fully materialized: iterating it twice gives the same rows.
"""

import csv
import io
import json
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, Iterator, List, Tuple

from tabquery.core.types import Column


def _to_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


def _to_json_value(value: Any) -> Any:
    if isinstance(value, date):
        return value.isoformat()
    return value


@dataclass(frozen=True)
class ResultTable:
    """
    Output of a SELECT: ordered typed columns plus ordered rows

    Example:
        >>> result = query("SELECT name FROM people.csv WHERE age > 30")
        >>> result.column_names
        ['name']
        >>> result.to_dicts()
        [{'name': 'Charlie'}]
    """

    columns: Tuple[Column, ...]
    rows: Tuple[Tuple[Any, ...], ...]

    @property
    def column_names(self) -> List[str]:
        return [column.name for column in self.columns]

    def __len__(self) -> int:
        return len(self.rows)

    def __iter__(self) -> Iterator[Dict[str, Any]]:
        names = self.column_names
        for row in self.rows:
            yield dict(zip(names, row))

    def to_dicts(self) -> List[Dict[str, Any]]:
        """Rows as a list of dictionaries"""
        return list(self)

    def to_csv(self, delimiter: str = ",") -> str:
        """
        Render as CSV with a header row

        Nulls become empty fields, booleans true/false, dates ISO 8601.
        """
        output = io.StringIO()
        writer = csv.writer(output, delimiter=delimiter, lineterminator="\n")
        writer.writerow(self.column_names)
        for row in self.rows:
            writer.writerow([_to_text(value) for value in row])
        return output.getvalue()

    def to_json(self, indent: Any = None) -> str:
        """Render as a JSON array of objects (dates as ISO 8601 strings)"""
        records = [{k: _to_json_value(v) for k, v in row.items()} for row in self]
        return json.dumps(records, indent=indent)

    def to_dataframe(self):
        """
        Convert to pandas DataFrame

        Returns:
            pandas.DataFrame with one column per result column

        Note:
            Requires pandas (pip install tabquery[pandas]).
        """
        try:
            import pandas as pd
        except ImportError:
            raise ImportError("Pandas is required for to_dataframe(). Install with: pip install tabquery[pandas]")

        return pd.DataFrame(list(self.rows), columns=self.column_names)

    def __repr__(self) -> str:
        cols = ", ".join(repr(column) for column in self.columns)
        return f"ResultTable({cols}; {len(self.rows)} rows)"
