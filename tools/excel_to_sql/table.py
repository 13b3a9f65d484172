"""Tabular input model for the SQL script generator."""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

# A cell is its text, or None when the spreadsheet cell holds no data
Cell = Optional[str]


class ExcelToSQLError(Exception):
    """Base error for the Excel to SQL tool."""


class InputShapeError(ExcelToSQLError, ValueError):
    """Table is not a valid rectangular grid of text cells."""


class WorkbookError(ExcelToSQLError, ValueError):
    """Upload or file could not be decoded into a table."""


@dataclass(frozen=True)
class Table:
    """
    Header names and rows of text cells.

    Rows are positionally aligned to columns. Construction validates the
    shape, so a Table that exists is always rectangular.

    Attributes:
        columns: Column names, unique, in sheet order
        rows: Rows of cells, each as wide as columns
    """

    columns: Tuple[str, ...]
    rows: Tuple[Tuple[Cell, ...], ...] = field(default_factory=tuple)

    def __post_init__(self):
        columns = tuple(self.columns)
        rows = tuple(tuple(row) for row in self.rows)

        seen = set()
        for name in columns:
            if not isinstance(name, str):
                raise InputShapeError(f"Column name must be text, got {type(name).__name__}: {name!r}")
            if name in seen:
                raise InputShapeError(f"Duplicate column name: {name}")
            seen.add(name)

        for row_number, row in enumerate(rows, start=1):
            if len(row) != len(columns):
                raise InputShapeError(
                    f"Row {row_number} has {len(row)} values, expected {len(columns)}"
                )
            for value in row:
                if value is not None and not isinstance(value, str):
                    raise InputShapeError(
                        f"Row {row_number} holds a non-text value: {value!r}"
                    )

        # Frozen dataclass, bypass __setattr__ to store the normalized tuples
        object.__setattr__(self, "columns", columns)
        object.__setattr__(self, "rows", rows)

    @classmethod
    def from_rows(cls, columns: Sequence[str], rows: Sequence[Sequence[Cell]]) -> "Table":
        """Build a table from any sequences of names and rows."""
        return cls(columns=columns, rows=rows)

    @property
    def row_count(self) -> int:
        return len(self.rows)

    def column_values(self, index: int) -> List[Cell]:
        """All cells of one column, header excluded."""
        return [row[index] for row in self.rows]
