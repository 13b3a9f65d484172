"""CLI interface for Excel to SQL Converter."""

import sys
from pathlib import Path
from typing import Optional

import click

from shared.cli import create_table, error, handle_errors, info, print_table, success
from shared.logger import setup_logger

from .converter import DEFAULT_TABLE_NAME, ScriptGenerator, normalize_statement
from .reader import load_file
from .table import ExcelToSQLError


@click.command()
@click.argument("input_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--table",
    "-t",
    default=DEFAULT_TABLE_NAME,
    show_default=True,
    help="Table name",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Output SQL file (print to stdout if not specified)",
)
@click.option(
    "--multiline",
    is_flag=True,
    help="One statement per line instead of a single line",
)
@click.option(
    "--show-schema",
    is_flag=True,
    help="Print the inferred column types",
)
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
@handle_errors
def main(
    input_file: Path,
    table: str,
    output: Optional[Path],
    multiline: bool,
    show_schema: bool,
    verbose: bool,
):
    """
    Excel to SQL Converter - Generate SQL from the first worksheet of a workbook.

    Infers a column type per column and generates CREATE TABLE + INSERT statements.
    CSV files are accepted as well.

    Examples:

        \b
        # Single-line script on stdout
        excel2sql sales.xlsx

        \b
        # Custom table name, saved to file
        excel2sql sales.xlsx --table sales --output sales.sql

        \b
        # Readable output and inferred types
        excel2sql data.csv --multiline --show-schema
    """
    # Setup logging
    log_level = "DEBUG" if verbose else "INFO"
    setup_logger(__name__, level=log_level)

    info(f"Converting {input_file}")

    try:
        data = load_file(input_file)
        generator = ScriptGenerator(table_name=table)

        columns = generator.infer_schema(data)

        if show_schema:
            schema = create_table(title=f"{table} schema", columns=["Column", "Type"])
            for column in columns:
                schema.add_row(column.name, column.type.value)
            print_table(schema)

        statements = [normalize_statement(stmt) for stmt in generator.generate(data, columns)]
        sql = "\n".join(statements) if multiline else " ".join(statements)

        if output:
            output.write_text(sql + "\n", encoding="utf-8")
            info(f"SQL written to: {output}")
        else:
            click.echo(sql)

        success(f"Generated {len(statements)} statement(s)")
        sys.exit(0)

    except (ExcelToSQLError, ValueError) as e:
        error(f"Conversion failed: {e}")
        if verbose:
            raise
        sys.exit(1)


if __name__ == "__main__":
    main()
