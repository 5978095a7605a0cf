"""
Expression binding and evaluation

AST expressions are bound against a schema (column name -> DataType)
before any row is read. Binding resolves column references, types every
node, and coerces literals at comparison boundaries, so evaluation itself
cannot hit a type error.
"""

import operator
from typing import Any, Callable, Dict, Mapping, Optional

from tabquery.core.errors import ExecError
from tabquery.core.types import DataType, coerce_literal
from tabquery.sql.ast_nodes import (
    ARITHMETIC_OPERATORS,
    COMPARISON_OPERATORS,
    AggregateCall,
    BinaryOp,
    ColumnRef,
    Expression,
    Literal,
)

Row = Dict[str, Any]

_COMPARATORS: Dict[str, Callable[[Any, Any], bool]] = {
    "=": operator.eq,
    "!=": operator.ne,
    "<": operator.lt,
    "<=": operator.le,
    ">": operator.gt,
    ">=": operator.ge,
}


class BoundExpression:
    """Base class for typed, evaluable expressions"""

    dtype: DataType

    def evaluate(self, row: Row) -> Any:
        raise NotImplementedError(f"{self.__class__.__name__} must implement evaluate()")


class ColumnValue(BoundExpression):
    """Reads one value from the row"""

    def __init__(self, name: str, dtype: DataType):
        self.name = name
        self.dtype = dtype

    def evaluate(self, row: Row) -> Any:
        return row[self.name]

    def __repr__(self) -> str:
        return f"ColumnValue({self.name}: {self.dtype})"


class Constant(BoundExpression):
    def __init__(self, value: Any, dtype: DataType):
        self.value = value
        self.dtype = dtype

    def evaluate(self, row: Row) -> Any:
        return self.value

    def __repr__(self) -> str:
        return f"Constant({self.value!r}: {self.dtype})"


class Comparison(BoundExpression):
    """Comparison of two comparable operands; false when either is null"""

    dtype = DataType.BOOLEAN

    def __init__(self, left: BoundExpression, op: str, right: BoundExpression):
        self.left = left
        self.op = op
        self.right = right
        self._compare = _COMPARATORS[op]

    def evaluate(self, row: Row) -> bool:
        left = self.left.evaluate(row)
        if left is None:
            return False
        right = self.right.evaluate(row)
        if right is None:
            return False
        return self._compare(left, right)

    def __repr__(self) -> str:
        return f"Comparison({self.left!r} {self.op} {self.right!r})"


class Arithmetic(BoundExpression):
    """Numeric arithmetic; null in, null out, division by zero gives null"""

    def __init__(self, left: BoundExpression, op: str, right: BoundExpression):
        self.left = left
        self.op = op
        self.right = right
        if op == "/" or DataType.FLOAT in (left.dtype, right.dtype):
            self.dtype = DataType.FLOAT
        else:
            self.dtype = DataType.INTEGER

    def evaluate(self, row: Row) -> Any:
        left = self.left.evaluate(row)
        right = self.right.evaluate(row)
        if left is None or right is None:
            return None

        op = self.op
        if op == "+":
            return left + right
        if op == "-":
            return left - right
        if op == "*":
            return left * right
        if right == 0:
            return None
        if op == "/":
            return left / right
        return left % right

    def __repr__(self) -> str:
        return f"Arithmetic({self.left!r} {self.op} {self.right!r})"


class Logical(BoundExpression):
    """AND / OR over boolean operands (null counts as false)"""

    dtype = DataType.BOOLEAN

    def __init__(self, left: BoundExpression, op: str, right: BoundExpression):
        self.left = left
        self.op = op
        self.right = right

    def evaluate(self, row: Row) -> bool:
        left = bool(self.left.evaluate(row))
        if self.op == "AND":
            return left and bool(self.right.evaluate(row))
        return left or bool(self.right.evaluate(row))

    def __repr__(self) -> str:
        return f"Logical({self.left!r} {self.op} {self.right!r})"


def resolve_column(name: str, schema: Mapping[str, DataType]) -> ColumnValue:
    """
    Bind a column reference

    Raises:
        ExecError: If the column does not exist
    """
    if name not in schema:
        available = ", ".join(schema) or "(none)"
        raise ExecError(f"Unknown column '{name}'. Available columns: {available}")
    return ColumnValue(name, schema[name])


def bind(
    expression: Expression,
    schema: Mapping[str, DataType],
    aggregates: Optional[Mapping[AggregateCall, str]] = None,
) -> BoundExpression:
    """
    Bind an AST expression against a schema

    Args:
        expression: Parsed expression
        schema: Column name -> type of the rows it will be evaluated on
        aggregates: After grouping, maps each aggregate call to the row key
            holding its result

    Returns:
        BoundExpression

    Raises:
        ExecError: Unknown column, incompatible operand types, or an
            aggregate used where no grouping stage produced it
    """
    if isinstance(expression, ColumnRef):
        return resolve_column(expression.name, schema)

    if isinstance(expression, Literal):
        return Constant(expression.value, DataType.of_value(expression.value))

    if isinstance(expression, AggregateCall):
        if aggregates is None or expression not in aggregates:
            raise ExecError(f"Aggregate {expression!r} is not allowed here")
        key = aggregates[expression]
        return ColumnValue(key, schema[key])

    if isinstance(expression, BinaryOp):
        left = bind(expression.left, schema, aggregates)
        right = bind(expression.right, schema, aggregates)
        op = expression.operator

        if op in COMPARISON_OPERATORS:
            return _bind_comparison(left, op, right)
        if op in ARITHMETIC_OPERATORS:
            for operand in (left, right):
                if not operand.dtype.is_numeric():
                    raise ExecError(
                        f"Operator '{op}' needs numeric operands, got {operand.dtype} in {expression!r}"
                    )
            return Arithmetic(left, op, right)
        # AND / OR
        for operand in (left, right):
            if operand.dtype != DataType.BOOLEAN:
                raise ExecError(
                    f"{op} needs boolean operands, got {operand.dtype} in {expression!r}"
                )
        return Logical(left, op, right)

    raise ExecError(f"Unsupported expression {expression!r}")


def _bind_comparison(left: BoundExpression, op: str, right: BoundExpression) -> Comparison:
    # Literals are coerced to the type of the other side
    if isinstance(right, Constant) and not isinstance(left, Constant):
        right = _coerced(right, left.dtype)
    elif isinstance(left, Constant) and not isinstance(right, Constant):
        left = _coerced(left, right.dtype)
    elif isinstance(left, Constant) and isinstance(right, Constant):
        right = _coerced(right, left.dtype)

    if not left.dtype.is_comparable(right.dtype):
        raise ExecError(f"Cannot compare {left.dtype} with {right.dtype} using '{op}'")

    if left.dtype == DataType.BOOLEAN and op not in ("=", "!="):
        raise ExecError(f"BOOLEAN values only support '=' and '!=', got '{op}'")

    return Comparison(left, op, right)


def _coerced(constant: Constant, dtype: DataType) -> Constant:
    value = coerce_literal(constant.value, dtype)
    return Constant(value, DataType.of_value(value))
