"""
tabquery - SQL-shaped queries over a single tabular resource

This package lets a caller address a CSV, TSV or JSON document by path or
URL and either list its columns (SHOW COLUMNS FROM <locator>) or run a
constrained SELECT against it, entirely in memory.
"""

import logging

__version__ = "0.1.0"

# Main API
from tabquery.core.errors import (
    DecodeError,
    ExecError,
    LoadError,
    ParseError,
    ResolveError,
    TabQueryError,
    TypeInferenceError,
    ValidationError,
)
from tabquery.core.query import aquery, ashow_columns, example_sql, explain, query, show_columns
from tabquery.core.result import ResultTable
from tabquery.core.types import Column, DataType
from tabquery.sql.parser import parse

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "__version__",
    "query",
    "show_columns",
    "aquery",
    "ashow_columns",
    "example_sql",
    "explain",
    "parse",
    "Column",
    "DataType",
    "ResultTable",
    "TabQueryError",
    "ParseError",
    "ResolveError",
    "LoadError",
    "DecodeError",
    "TypeInferenceError",
    "ExecError",
    "ValidationError",
]
