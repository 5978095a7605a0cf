"""
Output formatters for the tabquery CLI, looked up by the --format value
"""

from typing import Dict, Type

from tabquery.cli.formatters.base import BaseFormatter
from tabquery.cli.formatters.csv import CSVFormatter
from tabquery.cli.formatters.json import JSONFormatter
from tabquery.cli.formatters.table import TableFormatter

FORMATTERS: Dict[str, Type[BaseFormatter]] = {
    formatter.name: formatter for formatter in (TableFormatter, JSONFormatter, CSVFormatter)
}

__all__ = ["BaseFormatter", "TableFormatter", "JSONFormatter", "CSVFormatter", "FORMATTERS", "get_formatter"]


def get_formatter(format_name: str) -> BaseFormatter:
    """
    Instantiate the formatter registered under format_name

    Raises:
        ValueError: If no formatter has that name
    """
    formatter = FORMATTERS.get(format_name.lower())
    if formatter is None:
        raise ValueError(f"Unknown format: {format_name}. Available formats: {', '.join(FORMATTERS)}")
    return formatter()
