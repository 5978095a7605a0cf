"""
OrderBy Operator

Sorts rows by one or more keys with ASC/DESC directions.
"""

from typing import Any, Dict, Iterator, List, Tuple

from tabquery.core.expressions import BoundExpression
from tabquery.operators.base import Operator


class OrderByOperator(Operator):
    """
    ORDER BY operator

    Stable multi-key sort: nulls sort first in ascending order and last in
    descending order, and rows with equal keys keep their input order.

    Note: This operator materializes all data in memory.
    """

    def __init__(self, source: Operator, keys: List[Tuple[BoundExpression, bool]]):
        """
        Initialize OrderBy operator

        Args:
            source: Source operator
            keys: (bound key expression, descending) pairs, most significant first
        """
        super().__init__(source)
        self.keys = keys

    def __iter__(self) -> Iterator[Dict[str, Any]]:
        rows = list(self.child)

        # Sorting by the least significant key first; Python's sort is stable,
        # also with reverse=True
        for expression, descending in reversed(self.keys):
            rows.sort(key=lambda row: _null_first(expression.evaluate(row)), reverse=descending)

        yield from rows

    def __repr__(self) -> str:
        spec = ", ".join(
            f"{expression!r} {'DESC' if descending else 'ASC'}" for expression, descending in self.keys
        )
        return f"OrderBy({spec})"


def _null_first(value: Any) -> tuple:
    if value is None:
        return (0, 0)
    return (1, value)
