"""
Main Query API - user-facing entry points for tabquery

Example:
    >>> from tabquery import query, show_columns
    >>> show_columns("SHOW COLUMNS FROM people.csv")
    [name: STRING, age: INTEGER]
    >>> result = query("SELECT name FROM people.csv WHERE age > 25 LIMIT 10")
    >>> for row in result:
    ...     print(row)
"""

import functools
from typing import List, Optional, Union

import anyio
import httpx

from tabquery.core.config import LoaderConfig
from tabquery.core.errors import ParseError
from tabquery.core.executor import Executor
from tabquery.core.result import ResultTable
from tabquery.core.types import Column, build_typed_table, infer_columns
from tabquery.readers.base import Format, RawTable
from tabquery.readers.cache import ResourceCache, default_cache
from tabquery.readers.fetcher import load
from tabquery.readers.locator import resolve
from tabquery.readers.registry import decode
from tabquery.sql.ast_nodes import SelectStatement, ShowColumnsStatement
from tabquery.sql.parser import parse
from tabquery.sql.validator import validate

EXAMPLE_URL = (
    "https://raw.githubusercontent.com/ai-aide/query-server/refs/heads/master/resource/owid-covid-latest.csv"
)

FormatHint = Union[str, Format, None]


def example_sql() -> str:
    """
    A fixed statement for smoke tests

    Runs against the public OWID COVID-19 "latest" CSV.
    """
    return (
        "SELECT total_deaths, new_deaths AS new_deaths_1 "
        f"FROM {EXAMPLE_URL} "
        "WHERE new_deaths >= 5 AND total_deaths > 29.0 "
        "ORDER BY total_deaths, new_deaths DESC LIMIT 10 OFFSET 0"
    )


async def _load_table(
    source: str,
    format: FormatHint,
    config: Optional[LoaderConfig],
    cache: Optional[ResourceCache],
    client: Optional[httpx.AsyncClient],
) -> RawTable:
    locator = resolve(source, format)
    data = await load(locator, config=config, cache=cache, client=client)
    return decode(data, locator.format)


async def ashow_columns(
    statement: str,
    format: FormatHint = None,
    *,
    config: Optional[LoaderConfig] = None,
    cache: Optional[ResourceCache] = default_cache,
    client: Optional[httpx.AsyncClient] = None,
) -> List[Column]:
    """
    Report the columns of the resource named in a statement

    Args:
        statement: "SHOW COLUMNS FROM <locator>" (a SELECT is accepted too,
            its FROM locator is described)
        format: Format hint; wins over the locator's extension
        config: Fetch policy (default: from TABQUERY_* environment variables)
        cache: Resource cache, or None to always fetch
        client: Optional httpx client for remote locators

    Returns:
        Columns in resource order with their inferred types

    Raises:
        ParseError, ValidationError, ResolveError, LoadError, DecodeError
    """
    ast = validate(parse(statement))
    raw = await _load_table(ast.source, format, config, cache, client)
    return infer_columns(raw)


async def aquery(
    statement: str,
    format: FormatHint = None,
    *,
    config: Optional[LoaderConfig] = None,
    cache: Optional[ResourceCache] = default_cache,
    client: Optional[httpx.AsyncClient] = None,
) -> ResultTable:
    """
    Run a SELECT statement against the resource it names

    Args:
        statement: SELECT statement, e.g. "SELECT name FROM data.csv WHERE age > 25"
        format: Format hint; wins over the locator's extension
        config: Fetch policy (default: from TABQUERY_* environment variables)
        cache: Resource cache, or None to always fetch
        client: Optional httpx client for remote locators

    Returns:
        ResultTable snapshot

    Raises:
        ParseError, ValidationError, ResolveError, LoadError, DecodeError, ExecError
    """
    ast = validate(parse(statement))
    if isinstance(ast, ShowColumnsStatement):
        raise ParseError("query() expects a SELECT statement, use show_columns() for SHOW COLUMNS")

    raw = await _load_table(ast.source, format, config, cache, client)
    table = build_typed_table(raw, infer_columns(raw))
    return Executor().execute(ast, table)


def show_columns(
    statement: str,
    format: FormatHint = None,
    *,
    config: Optional[LoaderConfig] = None,
    cache: Optional[ResourceCache] = default_cache,
) -> List[Column]:
    """Blocking version of ashow_columns()"""
    return anyio.run(functools.partial(ashow_columns, statement, format, config=config, cache=cache))


def query(
    statement: str,
    format: FormatHint = None,
    *,
    config: Optional[LoaderConfig] = None,
    cache: Optional[ResourceCache] = default_cache,
) -> ResultTable:
    """
    Blocking version of aquery()

    Examples:
        >>> result = query("SELECT COUNT(*) FROM scores.csv")
        >>> result.to_dicts()
        [{'count': 3}]
    """
    return anyio.run(functools.partial(aquery, statement, format, config=config, cache=cache))


def explain(
    statement: str,
    format: FormatHint = None,
    *,
    config: Optional[LoaderConfig] = None,
    cache: Optional[ResourceCache] = default_cache,
) -> str:
    """Describe the operator chain a SELECT statement would run"""
    ast = validate(parse(statement))
    if not isinstance(ast, SelectStatement):
        raise ParseError("explain() expects a SELECT statement")

    raw = anyio.run(functools.partial(_load_table, ast.source, format, config, cache, None))
    table = build_typed_table(raw, infer_columns(raw))
    return Executor().explain(ast, table)
