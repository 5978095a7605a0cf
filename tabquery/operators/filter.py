"""
Filter operator - implements WHERE clause

Evaluates a bound predicate and only yields rows that match.
"""

from collections.abc import Iterator
from typing import Any

from tabquery.core.expressions import BoundExpression
from tabquery.operators.base import Operator


class Filter(Operator):
    """
    Filter operator - evaluates the WHERE predicate

    Pulls rows from child and only yields those for which the predicate
    is true. A predicate touching a null value is false.
    """

    def __init__(self, child: Operator, predicate: BoundExpression):
        """
        Initialize filter operator

        Args:
            child: Child operator to pull rows from
            predicate: Bound boolean expression
        """
        super().__init__(child)
        self.predicate = predicate

    def __iter__(self) -> Iterator[dict[str, Any]]:
        for row in self.child:
            if self.predicate.evaluate(row):
                yield row

    def __repr__(self) -> str:
        return f"Filter({self.predicate!r})"
