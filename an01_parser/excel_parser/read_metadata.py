# an01_parser/excel_parser/read_metadata.py

"""Module for reading the labelled header blocks of AN01 sheets.

Purpose:
    Two kinds of header blocks exist:

    - the top of every lot sheet, where labels ("N° de consultation",
      "Acheteur", "Taux de TVA", ...) are followed somewhere to the right by
      their value. `extract_metadata` turns it into a `Metadata` record;
    - the "Synthèse" sheet, where rows 2 to 8 are plain label/value pairs in
      columns A and B. `read_global_metadata` returns them as a dict.
"""

import logging
from typing import Dict, Optional, Sequence

from ..constants import (
    DEFAULT_CONSULTATION,
    DEFAULT_METADATA_VALUE,
    DEFAULT_TVA,
    GLOBAL_METADATA_FIRST_ROW,
    GLOBAL_METADATA_LABEL_COL,
    GLOBAL_METADATA_LAST_ROW,
    GLOBAL_METADATA_VALUE_COL,
    METADATA_FIELD_KEYWORDS,
    METADATA_KEY_TVA,
    METADATA_SCAN_ROWS,
)
from ..helpers.cell_values import cell_text, is_blank, is_number, round2
from ..models import CellValue, Metadata, Row

log = logging.getLogger(__name__)


def find_value_in_row(row: Row, keyword: str) -> Optional[str]:
    """Returns the first non-blank cell to the right of the cell containing `keyword`.

    The keyword cell is the first one whose upper-cased text contains
    `keyword`; the last cell of the row can never be a keyword cell since
    nothing follows it.
    """
    for j in range(len(row) - 1):
        if keyword in cell_text(row[j]).upper():
            for value in row[j + 1:]:
                if not is_blank(value):
                    return cell_text(value)
    return None


def _format_tva(value: CellValue) -> Optional[str]:
    """0.2 -> "20%", "5,5 %" -> "5,5 %"; None for cells that are not a rate."""
    if is_number(value) and 0 < value < 1:
        return f"{round2(value * 100):g}%"
    if isinstance(value, str) and "%" in value:
        return value
    return None


def extract_metadata(rows: Sequence[Row]) -> Metadata:
    """Extracts the consultation header from the first rows of a sheet.

    Logic:
        1.  Only the first `METADATA_SCAN_ROWS` (25) rows are examined.
        2.  For every row the cells are joined and upper-cased; each keyword
            (CONSULTATION, DATE, DESCRIPTION, ACHETEUR, DEMANDEUR) found in
            the joined text triggers `find_value_in_row`.
        3.  A row mentioning TVA is scanned cell by cell: a fraction between
            0 and 1 or a text containing "%" becomes the rate.
        4.  Rows are not de-duplicated: a later row matching the same keyword
            overwrites what an earlier row found.

    Args:
        rows (Sequence[Row]): Grid of the sheet.

    Returns:
        Metadata: Found values, defaults ("Non spécifié", "-", "20%") elsewhere.
    """
    values: Dict[str, str] = {
        "consultation": DEFAULT_CONSULTATION,
        "date": DEFAULT_METADATA_VALUE,
        "description": DEFAULT_METADATA_VALUE,
        "buyer": DEFAULT_METADATA_VALUE,
        "requester": DEFAULT_METADATA_VALUE,
        "tva": DEFAULT_TVA,
    }

    for row in rows[:METADATA_SCAN_ROWS]:
        if not row:
            continue
        row_text = " ".join(cell_text(cell) for cell in row).upper()

        for field_name, keyword in METADATA_FIELD_KEYWORDS.items():
            if keyword in row_text:
                found = find_value_in_row(row, keyword)
                if found:
                    values[field_name] = found

        if METADATA_KEY_TVA in row_text:
            for cell in row:
                tva = _format_tva(cell)
                if tva is not None:
                    values["tva"] = tva

    return Metadata(**values)


def read_global_metadata(rows: Sequence[Row]) -> Dict[str, str]:
    """Reads label/value pairs of rows 2-8 (columns A and B) of the "Synthèse" sheet.

    Rows with an empty label are ignored; a repeated label keeps its last value.
    """
    global_metadata: Dict[str, str] = {}
    for row in rows[GLOBAL_METADATA_FIRST_ROW:GLOBAL_METADATA_LAST_ROW + 1]:
        if len(row) <= GLOBAL_METADATA_VALUE_COL:
            continue
        label = cell_text(row[GLOBAL_METADATA_LABEL_COL]).strip()
        if label:
            global_metadata[label] = cell_text(row[GLOBAL_METADATA_VALUE_COL]).strip()

    log.debug(f"Global metadata: {len(global_metadata)} label(s)")
    return global_metadata
