"""
Formatter interface: turn a ResultTable into printable text
"""

from tabquery.core.result import ResultTable


class BaseFormatter:
    """
    Renders a ResultTable for the terminal or a file

    Subclasses set `name` (the --format value) and implement format().
    Options they do not understand are ignored, so the CLI can pass the
    same keyword arguments to every formatter.
    """

    name = ""

    def format(self, result: ResultTable, **kwargs) -> str:
        raise NotImplementedError(f"{self.__class__.__name__} must implement format()")

    def get_name(self) -> str:
        return self.name
