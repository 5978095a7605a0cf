"""
Scan operator - reads rows from a typed table

This is a leaf operator (has no child).
"""

from collections.abc import Iterator
from typing import Any

from tabquery.core.types import TypedTable
from tabquery.operators.base import Operator


class Scan(Operator):
    """
    Scan operator - wrapper around a TypedTable

    This is the leaf of the operator chain. It turns each typed row into
    a dictionary for the operators above it.
    """

    def __init__(self, table: TypedTable):
        super().__init__(child=None)
        self.table = table

    def __iter__(self) -> Iterator[dict[str, Any]]:
        yield from self.table.iter_dicts()

    def __repr__(self) -> str:
        return f"Scan({len(self.table)} rows)"
