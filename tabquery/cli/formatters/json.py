"""
JSON formatter for machine-readable output
"""

from tabquery.cli.formatters.base import BaseFormatter
from tabquery.core.result import ResultTable


class JSONFormatter(BaseFormatter):
    """Format results as a JSON array of objects"""

    name = "json"

    def format(self, result: ResultTable, **kwargs) -> str:
        if kwargs.get("compact", False):
            return result.to_json()
        return result.to_json(indent=kwargs.get("indent", 2))
