"""Read uploaded workbooks and CSV files into a Table."""

import base64
import binascii
import csv
import io
import zipfile
from datetime import date, datetime, time, timedelta
from pathlib import Path
from typing import Any, Iterable, List, Sequence

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from shared.logger import get_logger

from .table import Cell, InputShapeError, Table, WorkbookError

logger = get_logger(__name__)

WORKBOOK_EXTENSIONS = ("xlsx", "xlsm")
CSV_EXTENSIONS = ("csv",)
SUPPORTED_EXTENSIONS = WORKBOOK_EXTENSIONS + CSV_EXTENSIONS


def decode_upload(content: str) -> bytes:
    """
    Decode a base64 upload.

    A "data:...;base64," prefix and embedded whitespace are accepted.

    Args:
        content: Base64 text

    Returns:
        Decoded bytes

    Raises:
        WorkbookError: If content is not valid base64
    """
    if content.startswith("data:") and "," in content:
        content = content.split(",", 1)[1]
    content = "".join(content.split())

    try:
        return base64.b64decode(content, validate=True)
    except (binascii.Error, ValueError) as e:
        raise WorkbookError(f"File is not valid base64: {e}") from e


def cell_text(value: Any) -> Cell:
    """Convert a worksheet value to cell text (None stays missing)."""
    if value is None:
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, float) and value.is_integer() and abs(value) < 1e15:
        return str(int(value))
    if isinstance(value, datetime):
        if value.time() == time(0):
            return value.date().isoformat()
        return value.isoformat(sep=" ")
    if isinstance(value, (date, time)):
        return value.isoformat()
    if isinstance(value, timedelta):
        return str(value)
    return str(value)


def _is_blank(value: Cell) -> bool:
    return value is None or value.strip() == ""


def _parse_header(cells: Sequence[Cell]) -> List[str]:
    header = list(cells)
    while header and _is_blank(header[-1]):
        header.pop()

    for position, name in enumerate(header, start=1):
        if _is_blank(name):
            raise WorkbookError(f"Header cell {position} is empty")

    return header


def _build_table(lines: Iterable[Sequence[Cell]]) -> Table:
    """
    Build a Table from raw lines of cells.

    The first non-blank line is the header. Blank lines are skipped and
    short lines are padded with missing cells.
    """
    header = None
    rows = []

    for line_number, cells in enumerate(lines, start=1):
        if all(_is_blank(v) for v in cells):
            continue

        if header is None:
            header = _parse_header(cells)
            continue

        width = len(header)
        if any(not _is_blank(v) for v in cells[width:]):
            raise InputShapeError(
                f"Line {line_number} has values beyond the last header column ({width} columns)"
            )

        row = list(cells[:width])
        row.extend([None] * (width - len(row)))
        rows.append(row)

    if header is None:
        logger.warning("No header row found, table is empty")
        return Table(columns=())

    logger.info(f"Read {len(rows)} rows with {len(header)} columns")
    return Table.from_rows(header, rows)


def read_workbook(data: bytes) -> Table:
    """
    Read the first worksheet of an xlsx workbook.

    Args:
        data: Workbook bytes

    Returns:
        Table with the first row as header

    Raises:
        WorkbookError: If the workbook cannot be opened
    """
    try:
        workbook = load_workbook(io.BytesIO(data), read_only=True, data_only=True)
    except (InvalidFileException, zipfile.BadZipFile, KeyError, OSError) as e:
        raise WorkbookError(f"Cannot open workbook: {e}") from e

    try:
        sheet = workbook.worksheets[0]
        logger.debug(f"Reading worksheet: {sheet.title}")
        lines = [
            [cell_text(value) for value in values]
            for values in sheet.iter_rows(values_only=True)
        ]
    finally:
        workbook.close()

    return _build_table(lines)


def read_csv(text: str) -> Table:
    """
    Read CSV text.

    Empty fields are missing cells.

    Args:
        text: CSV content

    Returns:
        Table with the first row as header
    """
    try:
        lines = [
            [value if value != "" else None for value in record]
            for record in csv.reader(io.StringIO(text))
        ]
    except csv.Error as e:
        raise WorkbookError(f"Cannot parse CSV: {e}") from e

    return _build_table(lines)


def load_table(data: bytes, extension: str) -> Table:
    """
    Read file bytes into a Table based on the file extension.

    Args:
        data: File content
        extension: File extension, with or without the leading dot

    Returns:
        Table

    Raises:
        WorkbookError: If the extension is unsupported or the file unreadable
    """
    ext = extension.strip().lower().lstrip(".")
    logger.debug(f"Loading {len(data)} bytes as {ext or '<none>'}")

    if ext in WORKBOOK_EXTENSIONS:
        return read_workbook(data)

    if ext in CSV_EXTENSIONS:
        try:
            text = data.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise WorkbookError(f"CSV file is not UTF-8: {e}") from e
        return read_csv(text)

    raise WorkbookError(
        f"Unsupported file extension: {extension!r} (expected one of {', '.join(SUPPORTED_EXTENSIONS)})"
    )


def load_file(path: Path) -> Table:
    """Read a workbook or CSV file from disk."""
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")

    logger.info(f"Loading {path}")
    return load_table(path.read_bytes(), path.suffix)
