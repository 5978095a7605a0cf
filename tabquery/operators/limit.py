"""
Limit operator - implements LIMIT and OFFSET clauses

Skips the first OFFSET rows, yields at most LIMIT rows, then stops.
"""

from collections.abc import Iterator
from typing import Any, Optional

from tabquery.operators.base import Operator


class Limit(Operator):
    """
    Limit operator - restricts number of rows

    Stops pulling from the child as soon as enough rows were yielded.
    """

    def __init__(self, child: Operator, limit: Optional[int], offset: int = 0):
        """
        Initialize limit operator

        Args:
            child: Child operator to pull rows from
            limit: Maximum number of rows to yield (None for no limit)
            offset: Number of leading rows to skip
        """
        super().__init__(child)
        self.limit = limit
        self.offset = offset or 0

    def __iter__(self) -> Iterator[dict[str, Any]]:
        if self.limit == 0:
            return

        skipped = 0
        count = 0

        for row in self.child:
            if skipped < self.offset:
                skipped += 1
                continue

            yield row
            count += 1

            if self.limit is not None and count >= self.limit:
                break

    def __repr__(self) -> str:
        if self.offset:
            return f"Limit({self.limit}, offset={self.offset})"
        return f"Limit({self.limit})"
