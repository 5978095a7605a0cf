"""
Operator base class for pull-based (Volcano) execution

Each operator is an iterable of rows. Iterating the root pulls rows
through the whole chain one at a time; only sorting and grouping hold
their input in memory.
"""

from collections.abc import Iterator
from typing import Any, Optional


class Operator:
    """
    One stage of a query plan

    Rows are dictionaries keyed by column name. A stage reads its input by
    iterating `child`; the leaf stage (Scan) has no child.
    """

    def __init__(self, child: Optional["Operator"] = None):
        self.child = child

    def __iter__(self) -> Iterator[dict[str, Any]]:
        raise NotImplementedError(f"{self.__class__.__name__} must implement __iter__()")

    def explain(self, indent: int = 0) -> list[str]:
        """One line per stage, root first, children indented by two spaces"""
        lines = [" " * indent + repr(self)]
        if self.child is not None:
            lines.extend(self.child.explain(indent + 2))
        return lines

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"
