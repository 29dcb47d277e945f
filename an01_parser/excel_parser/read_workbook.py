# an01_parser/excel_parser/read_workbook.py

"""Decoding of an uploaded XLSX file into the in-memory `Workbook` model.

Purpose:
    The rest of the parser never touches openpyxl objects. This module loads
    the raw bytes once, walks every sheet in workbook order and copies the
    cell values into plain, rectangular grids anchored at `A1`.

    Formula cells contribute their cached values (`data_only=True`). Dates
    and booleans are converted to text because an AN01 grid only knows
    text, numbers and empty cells.
"""

import logging
import zipfile
from datetime import date, datetime, time
from io import BytesIO
from typing import Any, List

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException
from openpyxl.worksheet.worksheet import Worksheet

from ..exceptions import WorkbookDecodingError
from ..models import CellValue, Sheet, Workbook

log = logging.getLogger(__name__)

DATE_FORMAT = "%d/%m/%Y"
TIME_FORMAT = "%H:%M"


def normalize_cell(value: Any) -> CellValue:
    """Maps an openpyxl cell value onto text, number or empty text."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, (int, float, str)):
        return value
    if isinstance(value, datetime):
        return value.strftime(DATE_FORMAT)
    if isinstance(value, date):
        return value.strftime(DATE_FORMAT)
    if isinstance(value, time):
        return value.strftime(TIME_FORMAT)
    return str(value)


def read_sheet(ws: Worksheet) -> Sheet:
    """Copies one worksheet into a rectangular grid of normalised cells."""
    rows: List[List[CellValue]] = [
        [normalize_cell(value) for value in row] for row in ws.iter_rows(values_only=True)
    ]
    width = max((len(row) for row in rows), default=0)
    for row in rows:
        row.extend([""] * (width - len(row)))

    log.debug(f"Sheet '{ws.title}': {len(rows)} rows x {width} columns")
    return Sheet(name=ws.title, rows=rows)


def read_workbook(file_bytes: bytes) -> Workbook:
    """Decodes XLSX/XLSM bytes into a `Workbook`.

    Args:
        file_bytes (bytes): Raw content of the uploaded file.

    Returns:
        Workbook: Every worksheet in workbook order. Chart sheets are ignored.

    Raises:
        WorkbookDecodingError: If the bytes are not a readable workbook.
    """
    try:
        wb = load_workbook(BytesIO(file_bytes), data_only=True)
    except (InvalidFileException, zipfile.BadZipFile, KeyError, ValueError, OSError) as e:
        raise WorkbookDecodingError(f"Unable to read the workbook: {e}") from e

    try:
        sheets = [read_sheet(ws) for ws in wb.worksheets]
    finally:
        wb.close()

    log.info(f"Workbook decoded: {len(sheets)} sheet(s) {[s.name for s in sheets]}")
    return Workbook(sheets=sheets)
