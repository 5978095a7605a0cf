"""
Project operator - implements the SELECT list

Computes the requested output columns from each row.
"""

from typing import Any, Dict, Iterator, List, Tuple

from tabquery.core.expressions import BoundExpression
from tabquery.operators.base import Operator


class Project(Operator):
    """
    Project operator - evaluates the SELECT expressions

    Each output row holds exactly the requested columns, in request order.
    """

    def __init__(self, child: Operator, outputs: List[Tuple[str, BoundExpression]]):
        """
        Initialize project operator

        Args:
            child: Child operator to pull rows from
            outputs: (output name, bound expression) pairs
        """
        super().__init__(child)
        self.outputs = outputs

    def __iter__(self) -> Iterator[Dict[str, Any]]:
        for row in self.child:
            yield {name: expression.evaluate(row) for name, expression in self.outputs}

    def __repr__(self) -> str:
        col_str = ", ".join(name for name, _ in self.outputs)
        return f"Project({col_str})"
