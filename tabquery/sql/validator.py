"""
Statement validation pass

Runs after parsing and before anything is loaded. Checks the rules that
do not need the resource schema: grouping validity and output naming.
Unknown columns can only be detected once the resource is decoded, so
they are left to the executor.
"""

from tabquery.core.errors import ValidationError
from tabquery.sql.ast_nodes import SelectStatement, Statement, free_columns


def validate(statement: Statement) -> Statement:
    """
    Validate a parsed statement

    Args:
        statement: Parsed statement

    Returns:
        The same statement, for chaining

    Raises:
        ValidationError: If grouping or naming rules are violated
    """
    if not isinstance(statement, SelectStatement):
        return statement

    if statement.limit is not None and statement.limit < 0:
        raise ValidationError(f"LIMIT must be non-negative, got {statement.limit}")
    if statement.offset is not None and statement.offset < 0:
        raise ValidationError(f"OFFSET must be non-negative, got {statement.offset}")

    _validate_grouping(statement)
    _validate_output_names(statement)
    return statement


def _validate_grouping(statement: SelectStatement) -> None:
    if statement.group_by:
        if statement.is_star:
            raise ValidationError("SELECT * cannot be combined with GROUP BY")

        grouped = set(statement.group_by)
        for item in statement.items:
            for column in free_columns(item.expression):
                if column not in grouped:
                    raise ValidationError(
                        f"Column '{column}' must appear in GROUP BY or be used in an aggregate function"
                    )
        return

    if statement.has_aggregates:
        for item in statement.items:
            for column in free_columns(item.expression):
                raise ValidationError(
                    f"Column '{column}' must appear in GROUP BY or be used in an aggregate function"
                )


def _validate_output_names(statement: SelectStatement) -> None:
    if statement.is_star:
        return

    seen = set()
    for item in statement.items:
        name = item.output_name
        if name in seen:
            raise ValidationError(
                f"Duplicate output column '{name}', give each occurrence its own alias (e.g. {name} AS {name}_1)"
            )
        seen.add(name)
