"""
AST (Abstract Syntax Tree) node definitions for statements

These frozen dataclasses represent the parsed structure of a statement.
Two statement forms exist: SHOW COLUMNS and SELECT.
"""

from dataclasses import dataclass
from typing import Any, Iterator, Optional, Tuple, Union

AGGREGATE_FUNCTIONS = ("COUNT", "SUM", "AVG", "MIN", "MAX")
COMPARISON_OPERATORS = ("=", "!=", "<", "<=", ">", ">=")
ARITHMETIC_OPERATORS = ("+", "-", "*", "/", "%")
LOGICAL_OPERATORS = ("AND", "OR")


@dataclass(frozen=True)
class ColumnRef:
    """A bare column reference"""

    name: str

    def __repr__(self) -> str:
        return self.name


@dataclass(frozen=True)
class Literal:
    """A literal value: int, float, str or bool"""

    value: Any

    def __repr__(self) -> str:
        if isinstance(self.value, bool):
            return "TRUE" if self.value else "FALSE"
        if isinstance(self.value, str):
            escaped = self.value.replace("'", "''")
            return f"'{escaped}'"
        return str(self.value)


@dataclass(frozen=True)
class BinaryOp:
    """
    Binary expression

    Covers comparisons (=, !=, <, <=, >, >=), arithmetic (+, -, *, /, %)
    and the boolean connectives AND / OR.
    """

    left: "Expression"
    operator: str
    right: "Expression"

    def __repr__(self) -> str:
        return f"({self.left!r} {self.operator} {self.right!r})"


@dataclass(frozen=True)
class AggregateCall:
    """
    Aggregate function in the SELECT list

    Examples:
        COUNT(*), COUNT(id), SUM(amount), AVG(price), MIN(age), MAX(age)
    """

    function: str  # 'COUNT', 'SUM', 'AVG', 'MIN', 'MAX'
    column: Optional[str]  # None for COUNT(*)

    @property
    def default_name(self) -> str:
        if self.column is None:
            return self.function.lower()
        return f"{self.function.lower()}_{self.column}"

    def __repr__(self) -> str:
        return f"{self.function}({self.column or '*'})"


Expression = Union[ColumnRef, Literal, BinaryOp, AggregateCall]


@dataclass(frozen=True)
class SelectItem:
    """One projection entry: expression with optional AS alias"""

    expression: Expression
    alias: Optional[str] = None

    @property
    def output_name(self) -> str:
        """Name of the result column this item produces"""
        if self.alias:
            return self.alias
        if isinstance(self.expression, ColumnRef):
            return self.expression.name
        if isinstance(self.expression, AggregateCall):
            return self.expression.default_name
        return repr(self.expression)

    def __repr__(self) -> str:
        if self.alias:
            return f"{self.expression!r} AS {self.alias}"
        return repr(self.expression)


@dataclass(frozen=True)
class OrderByColumn:
    """
    A column in the ORDER BY clause

    Examples:
        name ASC, age DESC
    """

    column: str
    direction: str = "ASC"  # 'ASC' or 'DESC'

    @property
    def descending(self) -> bool:
        return self.direction == "DESC"

    def __repr__(self) -> str:
        return f"{self.column} {self.direction}"


@dataclass(frozen=True)
class ShowColumnsStatement:
    """SHOW COLUMNS FROM <locator>"""

    source: str

    def __repr__(self) -> str:
        return f"SHOW COLUMNS FROM {self.source}"


@dataclass(frozen=True)
class SelectStatement:
    """
    A complete SELECT statement

    Examples:
        SELECT * FROM data.csv
        SELECT name, age FROM data.csv WHERE age > 25
        SELECT city, COUNT(*) FROM data.csv GROUP BY city
        SELECT * FROM data.csv ORDER BY age DESC LIMIT 10 OFFSET 5
    """

    source: str
    items: Optional[Tuple[SelectItem, ...]] = None  # None for SELECT *
    where: Optional[Expression] = None
    group_by: Optional[Tuple[str, ...]] = None
    order_by: Optional[Tuple[OrderByColumn, ...]] = None
    limit: Optional[int] = None
    offset: Optional[int] = None

    @property
    def is_star(self) -> bool:
        return self.items is None

    @property
    def has_aggregates(self) -> bool:
        if self.items is None:
            return False
        return any(
            isinstance(node, AggregateCall)
            for item in self.items
            for node in walk(item.expression)
        )

    def __repr__(self) -> str:
        if self.items is None:
            parts = ["SELECT *"]
        else:
            parts = [f"SELECT {', '.join(repr(item) for item in self.items)}"]
        parts.append(f"FROM {self.source}")
        if self.where is not None:
            parts.append(f"WHERE {self.where!r}")
        if self.group_by:
            parts.append(f"GROUP BY {', '.join(self.group_by)}")
        if self.order_by:
            parts.append(f"ORDER BY {', '.join(repr(col) for col in self.order_by)}")
        if self.limit is not None:
            parts.append(f"LIMIT {self.limit}")
        if self.offset is not None:
            parts.append(f"OFFSET {self.offset}")
        return " ".join(parts)


Statement = Union[ShowColumnsStatement, SelectStatement]


def walk(expression: Expression) -> Iterator[Expression]:
    """Yield an expression and all of its sub-expressions, depth first"""
    yield expression
    if isinstance(expression, BinaryOp):
        yield from walk(expression.left)
        yield from walk(expression.right)


def free_columns(expression: Expression) -> Iterator[str]:
    """Yield column names referenced outside of any aggregate call"""
    if isinstance(expression, ColumnRef):
        yield expression.name
    elif isinstance(expression, BinaryOp):
        yield from free_columns(expression.left)
        yield from free_columns(expression.right)
