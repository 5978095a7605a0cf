"""
CSV formatter for Unix-friendly output
"""

from tabquery.cli.formatters.base import BaseFormatter
from tabquery.core.result import ResultTable


class CSVFormatter(BaseFormatter):
    """Format results as CSV with a header row"""

    name = "csv"

    def format(self, result: ResultTable, **kwargs) -> str:
        return result.to_csv(delimiter=kwargs.get("delimiter", ","))
