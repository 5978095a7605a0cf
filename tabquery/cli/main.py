"""
tabquery CLI - query CSV/TSV/JSON resources with SQL

Usage:
    tabquery query "<SELECT ...>" [options]
    tabquery columns "SHOW COLUMNS FROM <locator>" [options]
    tabquery example
"""

import logging
import sys
import time
from typing import Optional

import click

from tabquery import __version__, example_sql
from tabquery import query as query_fn
from tabquery import show_columns as show_columns_fn
from tabquery.cli.formatters import get_formatter
from tabquery.core.errors import TabQueryError
from tabquery.core.result import ResultTable
from tabquery.core.types import Column, DataType
from tabquery.readers.base import Format

FORMAT_HINT = click.Choice([fmt.value for fmt in Format], case_sensitive=False)


@click.group()
@click.version_option(version=__version__, prog_name="tabquery")
@click.option("--verbose", "-v", is_flag=True, help="Log fetch and cache activity to stderr")
def cli(verbose: bool):
    """
    tabquery - Query CSV, TSV and JSON resources with SQL

    A resource is addressed by path or URL in the FROM clause.
    """
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
            stream=sys.stderr,
        )


@cli.command()
@click.argument("sql", type=str)
@click.option(
    "--format-hint",
    "-F",
    type=FORMAT_HINT,
    default=None,
    help="Format of the resource (default: from the locator's extension)",
)
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice(["table", "json", "csv"], case_sensitive=False),
    default="table",
    help="Output format (default: table)",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(),
    default=None,
    help="Write output to file instead of stdout",
)
@click.option("--no-color", is_flag=True, help="Disable colored output")
@click.option("--time", "-t", "show_time", is_flag=True, help="Show execution time")
def query(
    sql: str,
    format_hint: Optional[str],
    output_format: str,
    output: Optional[str],
    no_color: bool,
    show_time: bool,
):
    """
    Execute a SELECT statement

    Examples:

        \b
        $ tabquery query "SELECT * FROM data.csv WHERE age > 25"

        \b
        $ tabquery query "SELECT city, COUNT(*) FROM data.csv GROUP BY city" -f json

        \b
        $ tabquery query "SELECT * FROM https://example.com/export" -F csv -o out.csv
    """
    start_time = time.time()
    try:
        result = query_fn(sql, format_hint)
    except TabQueryError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if output and output_format == "table":
        if output.endswith(".json"):
            output_format = "json"
        elif output.endswith(".csv"):
            output_format = "csv"

    _emit(result, output_format, output, no_color)

    if show_time:
        click.echo(f"Processed {len(result)} rows in {time.time() - start_time:.3f}s", err=True)


@cli.command()
@click.argument("sql", type=str)
@click.option(
    "--format-hint",
    "-F",
    type=FORMAT_HINT,
    default=None,
    help="Format of the resource (default: from the locator's extension)",
)
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice(["table", "json", "csv"], case_sensitive=False),
    default="table",
    help="Output format (default: table)",
)
@click.option("--no-color", is_flag=True, help="Disable colored output")
def columns(sql: str, format_hint: Optional[str], output_format: str, no_color: bool):
    """
    List the columns of a resource

    Examples:

        \b
        $ tabquery columns "SHOW COLUMNS FROM data.csv"
    """
    try:
        column_list = show_columns_fn(sql, format_hint)
    except TabQueryError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    # Rendered as a two-column result so every formatter applies
    result = ResultTable(
        columns=(Column("name", DataType.STRING), Column("type", DataType.STRING)),
        rows=tuple((column.name, column.type.value) for column in column_list),
    )
    _emit(result, output_format, None, no_color)


@cli.command()
def example():
    """Print a sample statement"""
    click.echo(example_sql())


def _emit(result: ResultTable, output_format: str, output: Optional[str], no_color: bool) -> None:
    formatter = get_formatter(output_format)
    output_text = formatter.format(
        result,
        no_color=no_color or output is not None or not sys.stdout.isatty(),
        show_footer=output is None,
    )

    if output:
        with open(output, "w") as f:
            f.write(output_text)
        click.echo(f"Results written to {output} ({output_format} format)", err=True)
    else:
        click.echo(output_text, nl=not output_text.endswith("\n"))


if __name__ == "__main__":
    cli()
