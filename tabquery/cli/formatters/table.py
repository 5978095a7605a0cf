"""
Rich table formatter for terminal output
"""

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from tabquery.cli.formatters.base import BaseFormatter
from tabquery.core.result import ResultTable


class TableFormatter(BaseFormatter):
    """Format results as a Rich table, column types in the header"""

    name = "table"

    def format(self, result: ResultTable, **kwargs) -> str:
        """
        Format results as a Rich table

        Args:
            result: Query result
            **kwargs: Options like 'no_color', 'show_footer'

        Returns:
            Formatted table string
        """
        if not result.columns:
            return "No columns."

        console = Console(force_terminal=not kwargs.get("no_color", False))
        narrow = console.width < 80 or len(result.columns) > 8

        table = Table(
            show_header=True,
            header_style="bold magenta",
            box=box.SIMPLE if narrow else box.HEAVY_HEAD,
        )
        for column in result.columns:
            table.add_column(
                f"{escape(column.name)}\n[dim]{column.type}[/dim]",
                style="cyan",
                overflow="ellipsis",
                max_width=kwargs.get("max_width", 15 if narrow else 30),
                no_wrap=narrow,
            )

        for row in result.rows:
            table.add_row(
                *(escape(str(value)) if value is not None else "[dim]NULL[/dim]" for value in row)
            )

        with console.capture() as capture:
            console.print(table)
            if kwargs.get("show_footer", True):
                count = len(result)
                console.print(f"[dim]{count} row{'s' if count != 1 else ''}[/dim]")

        return capture.get()
