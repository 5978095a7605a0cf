"""
Query Executor - builds and runs operator chains from a SELECT AST

Every expression is bound against the table schema while the chain is
built, so unknown columns and type mismatches are reported before any
row is evaluated, even for an empty table.
"""

from typing import Dict, List, Optional, Tuple

from tabquery.core.errors import ExecError
from tabquery.core.expressions import BoundExpression, bind, resolve_column
from tabquery.core.result import ResultTable
from tabquery.core.types import Column, DataType, TypedTable
from tabquery.operators.base import Operator
from tabquery.operators.filter import Filter
from tabquery.operators.groupby import AggregateSpec, GroupByOperator
from tabquery.operators.limit import Limit
from tabquery.operators.orderby import OrderByOperator
from tabquery.operators.project import Project
from tabquery.operators.scan import Scan
from tabquery.sql.ast_nodes import AggregateCall, SelectStatement, walk
from tabquery.utils.aggregates import aggregate_result_type


class Executor:
    """
    Query executor - builds the operator chain from the AST

    Operator chain, built bottom-up:
        Limit (root)
          ↓
        Project
          ↓
        OrderBy
          ↓
        GroupBy
          ↓
        Filter
          ↓
        Scan (leaf)

    OrderBy sits below Project so that ORDER BY can name input columns that
    are not selected; the rows Project emits, and their order, are the
    same as if it ran first.
    """

    def execute(self, ast: SelectStatement, table: TypedTable) -> ResultTable:
        """
        Execute a SELECT against a typed table

        Args:
            ast: Parsed and validated SELECT statement
            table: Typed table decoded from the statement's source

        Returns:
            ResultTable snapshot

        Raises:
            ExecError: Unknown column, incompatible comparison or aggregate
        """
        plan, outputs = self._build_plan(ast, table)
        names = [name for name, _ in outputs]
        rows = tuple(tuple(row[name] for name in names) for row in plan)
        columns = tuple(Column(name, expression.dtype) for name, expression in outputs)
        return ResultTable(columns=columns, rows=rows)

    def explain(self, ast: SelectStatement, table: TypedTable) -> str:
        """
        Describe the operator chain (for debugging)

        Example output:
            Limit(10)
              Project(name)
                Filter(Comparison(ColumnValue(age: INTEGER) > Constant(25: INTEGER)))
                  Scan(5 rows)
        """
        plan, _ = self._build_plan(ast, table)
        return "\n".join(plan.explain())

    def _build_plan(
        self, ast: SelectStatement, table: TypedTable
    ) -> Tuple[Operator, List[Tuple[str, BoundExpression]]]:
        schema: Dict[str, DataType] = {column.name: column.type for column in table.columns}

        plan: Operator = Scan(table)

        if ast.where is not None:
            predicate = bind(ast.where, schema)
            if predicate.dtype != DataType.BOOLEAN:
                raise ExecError(f"WHERE clause must be a boolean condition, got {predicate.dtype}")
            plan = Filter(plan, predicate)

        aggregate_keys: Optional[Dict[AggregateCall, str]] = None
        calls = self._collect_aggregates(ast)
        if ast.group_by or calls:
            group_by = list(ast.group_by or ())
            for column in group_by:
                resolve_column(column, schema)

            specs = []
            aggregate_keys = {}
            for call in calls:
                column_type = None
                if call.column is not None:
                    column_type = resolve_column(call.column, schema).dtype
                key = f"#{call!r}"
                specs.append(AggregateSpec(call, key, aggregate_result_type(call.function, column_type)))
                aggregate_keys[call] = key

            plan = GroupByOperator(plan, group_by, specs)
            schema = {column: schema[column] for column in group_by}
            schema.update({spec.key: spec.dtype for spec in specs})

        if ast.is_star:
            outputs = [(column.name, resolve_column(column.name, schema)) for column in table.columns]
        else:
            outputs = [
                (item.output_name, bind(item.expression, schema, aggregate_keys))
                for item in ast.items
            ]

        if ast.order_by:
            by_name = dict(outputs)
            keys = []
            for order_col in ast.order_by:
                expression = by_name.get(order_col.column)
                if expression is None:
                    expression = resolve_column(order_col.column, schema)
                keys.append((expression, order_col.descending))
            plan = OrderByOperator(plan, keys)

        plan = Project(plan, outputs)

        if ast.limit is not None or ast.offset:
            plan = Limit(plan, ast.limit, ast.offset or 0)

        return plan, outputs

    def _collect_aggregates(self, ast: SelectStatement) -> List[AggregateCall]:
        """Distinct aggregate calls in the SELECT list, in order of appearance"""
        if ast.is_star:
            return []
        calls: List[AggregateCall] = []
        for item in ast.items:
            for node in walk(item.expression):
                if isinstance(node, AggregateCall) and node not in calls:
                    calls.append(node)
        return calls
