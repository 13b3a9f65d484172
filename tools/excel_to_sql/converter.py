"""Core schema inference and SQL script generation."""

import re
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence

from shared.logger import get_logger

from .table import Cell, InputShapeError, Table

logger = get_logger(__name__)

DEFAULT_TABLE_NAME = "ExcelTable"

INT_MIN = -2147483648
INT_MAX = 2147483647

_INTEGER_RE = re.compile(r"^-?[0-9]+$")
_NUMBER_RE = re.compile(r"^[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?$")


class ColumnType(str, Enum):
    """SQL column types, valued by their SQL text."""

    INTEGER = "INT"
    DECIMAL = "DECIMAL(18,2)"
    NUMERIC_TEXT = "VARCHAR(10)"
    TEXT = "VARCHAR(512)"


@dataclass
class ColumnDefinition:
    """Definition of a table column."""

    name: str
    type: ColumnType


def _is_integer(value: str) -> bool:
    """Check if value is a base-10 integer within the 32-bit signed range."""
    value = value.strip()
    if not _INTEGER_RE.match(value):
        return False
    try:
        number = int(value)
    except ValueError:
        # Longer than the interpreter will convert, far outside 32 bits
        return False
    return INT_MIN <= number <= INT_MAX


def _is_number(value: str) -> bool:
    """Check if value is a general decimal number."""
    return bool(_NUMBER_RE.match(value.strip()))


def infer_column_type(values: Sequence[Cell]) -> ColumnType:
    """
    Infer the SQL type of a column from all of its values.

    Missing cells count as empty strings, and the empty string never
    parses as a number, so an all-missing column is TEXT. A column with
    no rows is TEXT as well.

    Args:
        values: Every cell of the column, header excluded

    Returns:
        ColumnType for the whole column
    """
    texts = ["" if value is None else value for value in values]

    if not texts:
        return ColumnType.TEXT

    if all(_is_integer(v) for v in texts):
        return ColumnType.INTEGER

    if all(_is_number(v) for v in texts):
        if any("." in v for v in texts):
            return ColumnType.DECIMAL
        # Numeric but not a 32-bit integer: "+5", "1e5", 9999999999
        return ColumnType.NUMERIC_TEXT

    return ColumnType.TEXT


def quote_value(value: Cell) -> str:
    """Render a cell as a SQL literal."""
    if value is None:
        return "NULL"
    escaped = value.replace("'", "''")
    return f"'{escaped}'"


def normalize_statement(sql: str) -> str:
    """Strip line breaks and surrounding whitespace from a statement."""
    return sql.replace("\r", "").replace("\n", "").strip()


class ScriptGenerator:
    """
    Generate a CREATE TABLE + INSERT script from a Table.

    Column names are used verbatim; they are neither quoted nor sanitized.
    """

    def __init__(self, table_name: str = DEFAULT_TABLE_NAME):
        """
        Initialize script generator.

        Args:
            table_name: Name of the table in the generated SQL
        """
        if not table_name or not table_name.strip():
            raise ValueError("Table name must not be empty")
        self.table_name = table_name
        logger.debug(f"Initialized ScriptGenerator for table: {table_name}")

    def _check_columns(self, table: Table) -> None:
        if not table.columns:
            raise InputShapeError("Table has no columns")

    def infer_schema(self, table: Table) -> List[ColumnDefinition]:
        """
        Infer one column definition per table column.

        Args:
            table: Input table

        Returns:
            List of ColumnDefinition objects, in column order
        """
        self._check_columns(table)

        columns = []
        for index, name in enumerate(table.columns):
            col_type = infer_column_type(table.column_values(index))
            logger.debug(f"Column {name}: {col_type.value}")
            columns.append(ColumnDefinition(name=name, type=col_type))

        return columns

    def generate_create_table(
        self,
        table: Table,
        columns: Optional[List[ColumnDefinition]] = None,
    ) -> str:
        """
        Generate CREATE TABLE statement.

        Args:
            table: Input table
            columns: Pre-computed column definitions (inferred if None)

        Returns:
            SQL CREATE TABLE statement
        """
        self._check_columns(table)

        if columns is None:
            columns = self.infer_schema(table)
        elif [col.name for col in columns] != list(table.columns):
            raise InputShapeError("Column definitions do not match the table columns")

        lines = [f"CREATE TABLE {self.table_name} ("]
        lines.append(",\n".join(f"    {col.name} {col.type.value}" for col in columns))
        lines.append(");")

        return "\n".join(lines)

    def generate_insert_statements(self, table: Table) -> List[str]:
        """
        Generate one INSERT statement per row.

        Args:
            table: Input table

        Returns:
            List of INSERT statements, in row order
        """
        self._check_columns(table)

        column_list = ", ".join(table.columns)
        statements = []

        for row in table.rows:
            value_list = ", ".join(quote_value(value) for value in row)
            statements.append(
                f"INSERT INTO {self.table_name} ({column_list}) VALUES ({value_list});"
            )

        logger.info(f"Generated {len(statements)} INSERT statement(s)")
        return statements

    def generate(
        self,
        table: Table,
        columns: Optional[List[ColumnDefinition]] = None,
    ) -> List[str]:
        """
        Generate the full script as a list of statements.

        Args:
            table: Input table
            columns: Pre-computed column definitions (inferred if None)

        Returns:
            CREATE TABLE statement followed by the INSERT statements

        Raises:
            InputShapeError: If the table has no columns
        """
        if columns is None:
            columns = self.infer_schema(table)
        logger.info(f"Generating {self.table_name} script for {len(columns)} columns")

        statements = [self.generate_create_table(table, columns)]
        statements.extend(self.generate_insert_statements(table))
        return statements

    def render(self, table: Table) -> str:
        """
        Generate the script as a single line of text.

        Args:
            table: Input table

        Returns:
            Normalized statements joined with single spaces
        """
        return " ".join(normalize_statement(stmt) for stmt in self.generate(table))
