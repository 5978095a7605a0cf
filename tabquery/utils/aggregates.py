"""
Aggregate functions for GROUP BY and implicit single-group queries

One aggregator instance accumulates one aggregate call for one group.
Operand types are settled when the statement is bound (see
aggregate_result_type), so update() only ever receives values of the
column type, or None for null.
"""

import operator
from typing import Any, Callable, Dict, Optional, Type

from tabquery.core.errors import ExecError
from tabquery.core.types import DataType


class Aggregator:
    """Accumulates values of one group; nulls are skipped unless noted"""

    def update(self, value: Any) -> None:
        raise NotImplementedError

    def result(self) -> Any:
        raise NotImplementedError


class CountAggregator(Aggregator):
    """
    COUNT(column) counts non-null values, COUNT(*) counts rows

    Args:
        count_star: Count every row, null or not
    """

    def __init__(self, count_star: bool = False):
        self.count_star = count_star
        self.count = 0

    def update(self, value: Any) -> None:
        if value is not None or self.count_star:
            self.count += 1

    def result(self) -> int:
        return self.count


class SumAggregator(Aggregator):
    """SUM keeps the column type: integers add up to an integer"""

    def __init__(self):
        self.total: Optional[Any] = None

    def update(self, value: Any) -> None:
        if value is not None:
            self.total = value if self.total is None else self.total + value

    def result(self) -> Optional[Any]:
        return self.total


class AvgAggregator(SumAggregator):
    """AVG is always a float, null for a group without values"""

    def __init__(self):
        super().__init__()
        self.count = 0

    def update(self, value: Any) -> None:
        if value is not None:
            super().update(value)
            self.count += 1

    def result(self) -> Optional[float]:
        if not self.count:
            return None
        return self.total / self.count


class _ExtremumAggregator(Aggregator):
    """Keeps the value that wins every pairwise comparison"""

    beats: Callable[[Any, Any], bool]

    def __init__(self):
        self.best: Optional[Any] = None

    def update(self, value: Any) -> None:
        if value is None:
            return
        if self.best is None or type(self).beats(value, self.best):
            self.best = value

    def result(self) -> Optional[Any]:
        return self.best


class MinAggregator(_ExtremumAggregator):
    beats = operator.lt


class MaxAggregator(_ExtremumAggregator):
    beats = operator.gt


AGGREGATORS: Dict[str, Type[Aggregator]] = {
    "SUM": SumAggregator,
    "AVG": AvgAggregator,
    "MIN": MinAggregator,
    "MAX": MaxAggregator,
}


def create_aggregator(function: str, column: Optional[str]) -> Aggregator:
    """
    New aggregator for one group

    Args:
        function: COUNT, SUM, AVG, MIN or MAX (any case)
        column: Aggregated column, None for COUNT(*)

    Raises:
        ValueError: If function is not an aggregate
    """
    name = function.upper()
    if name == "COUNT":
        return CountAggregator(count_star=column is None)
    try:
        return AGGREGATORS[name]()
    except KeyError:
        raise ValueError(f"Unknown aggregate function: {function}") from None


def aggregate_result_type(function: str, column_type: Optional[DataType]) -> DataType:
    """
    Type produced by an aggregate over a column of column_type

    COUNT accepts any column. The others need INTEGER or FLOAT.

    Raises:
        ExecError: For SUM/AVG/MIN/MAX over a non-numeric column
    """
    name = function.upper()
    if name == "COUNT":
        return DataType.INTEGER
    if column_type is None or not column_type.is_numeric():
        raise ExecError(f"{name} needs a numeric column, got {column_type}")
    return DataType.FLOAT if name == "AVG" else column_type
