"""Excel to SQL Converter - Generate CREATE TABLE + INSERT scripts from spreadsheets."""

from .converter import ColumnType, ScriptGenerator, infer_column_type
from .table import InputShapeError, Table, WorkbookError

__all__ = [
    "ColumnType",
    "InputShapeError",
    "ScriptGenerator",
    "Table",
    "WorkbookError",
    "infer_column_type",
]
