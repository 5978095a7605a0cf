"""
Grouping and aggregation

Rows are bucketed by the values of the grouping columns in a dict, which
keeps buckets in order of first appearance. Each bucket holds one
aggregator per aggregate call.
"""

from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any

from tabquery.core.types import DataType
from tabquery.operators.base import Operator
from tabquery.sql.ast_nodes import AggregateCall
from tabquery.utils.aggregates import Aggregator, create_aggregator


@dataclass(frozen=True)
class AggregateSpec:
    """An aggregate call, the row key its result is stored under, and its type"""

    call: AggregateCall
    key: str
    dtype: DataType


class GroupByOperator(Operator):
    """
    Emits one row per group: the grouping values plus every aggregate

    Null grouping values form a group of their own. Without grouping
    columns all input is a single group, and that group exists even when
    the input is empty (so COUNT(*) over no rows is 0, not missing).

    Note: every group is held in memory until the input is exhausted.
    """

    def __init__(
        self,
        source: Operator,
        group_by_columns: list[str],
        aggregates: list[AggregateSpec],
    ):
        """
        Args:
            source: Operator producing the rows to group
            group_by_columns: Grouping columns, possibly none
            aggregates: Aggregates evaluated for each group
        """
        super().__init__(source)
        self.group_by_columns = group_by_columns
        self.aggregates = aggregates

    def __iter__(self) -> Iterator[dict[str, Any]]:
        buckets: dict[tuple, list[Aggregator]] = {}
        columns = self.group_by_columns

        for row in self.child:
            key = tuple(row[column] for column in columns)
            if key not in buckets:
                buckets[key] = self._new_bucket()
            for aggregator, spec in zip(buckets[key], self.aggregates):
                aggregator.update(None if spec.call.column is None else row[spec.call.column])

        if not columns and not buckets:
            buckets[()] = self._new_bucket()

        for key, bucket in buckets.items():
            out = dict(zip(columns, key))
            out.update((spec.key, aggregator.result()) for spec, aggregator in zip(self.aggregates, bucket))
            yield out

    def _new_bucket(self) -> list[Aggregator]:
        return [create_aggregator(spec.call.function, spec.call.column) for spec in self.aggregates]

    def __repr__(self) -> str:
        aggs = ", ".join(repr(spec.call) for spec in self.aggregates)
        return f"GroupBy(keys={self.group_by_columns}, aggregates=[{aggs}])"
