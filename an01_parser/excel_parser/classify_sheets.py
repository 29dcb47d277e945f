# an01_parser/excel_parser/classify_sheets.py

"""
Module for identifying the role of every sheet in an AN01 workbook.

Purpose:
    Sheet names are typed by hand ("Lot 1", "LOT 2 - Nettoyage", "AN01",
    "QT-Lot 1", "Analyse QT", "Synthèse"), so the parser cannot rely on fixed
    positions. This module decides:

    - which sheet holds the global metadata ("Synthèse");
    - which sheets hold a lot's offer table;
    - which sheet holds the technical scoring matrix of a given lot.

    Lot-sheet selection is an ordered chain of selectors
    (`LOT_SHEET_SELECTORS`): each one returns a list of names or an empty
    list, and the first non-empty answer wins.
"""

import logging
import re
from typing import Callable, List, Optional, Sequence

from ..constants import (
    SHEET_AN01_MARKER,
    SHEET_GENERIC_QT_NAME,
    SHEET_LOT_MARKER,
    SHEET_LOT_WORD,
    SHEET_QT_MARKER,
    SHEET_SYNTHESIS_NAME,
)
from ..exceptions import NoSheetsError
from ..helpers.cell_values import normalize_label

log = logging.getLogger(__name__)

SheetSelector = Callable[[Sequence[str]], List[str]]


def find_synthesis_sheet(sheet_names: Sequence[str]) -> Optional[str]:
    """Returns the "Synthèse" sheet name (case and accents ignored), if any."""
    for name in sheet_names:
        if normalize_label(name) == SHEET_SYNTHESIS_NAME:
            return name
    return None


def select_named_lot_sheets(sheet_names: Sequence[str]) -> List[str]:
    """Every sheet mentioning "LOT" that is not a technical ("QT") sheet."""
    selected = []
    for name in sheet_names:
        upper = name.upper()
        if SHEET_LOT_MARKER in upper and SHEET_QT_MARKER not in upper and SHEET_GENERIC_QT_NAME not in upper:
            selected.append(name)
    return selected


def select_an01_sheet(sheet_names: Sequence[str]) -> List[str]:
    """Legacy single-lot exports: the first sheet mentioning "AN01"."""
    for name in sheet_names:
        if SHEET_AN01_MARKER in name.upper():
            return [name]
    return []


def select_first_sheet(sheet_names: Sequence[str]) -> List[str]:
    return list(sheet_names[:1])


LOT_SHEET_SELECTORS: List[SheetSelector] = [
    select_named_lot_sheets,
    select_an01_sheet,
    select_first_sheet,
]


def find_lot_sheets(sheet_names: Sequence[str]) -> List[str]:
    """Selects the sheets to be parsed as lots.

    Args:
        sheet_names (Sequence[str]): Sheet names in workbook order.

    Returns:
        List[str]: Result of the first selector of `LOT_SHEET_SELECTORS`
        that found something.

    Raises:
        NoSheetsError: If the workbook has no sheets at all.
    """
    if not sheet_names:
        raise NoSheetsError("The workbook contains no sheets: no 'Lot' or 'AN01' sheet found.")

    for selector in LOT_SHEET_SELECTORS:
        selected = selector(sheet_names)
        if selected:
            log.debug(f"Lot sheets chosen by {selector.__name__}: {selected}")
            return selected

    # select_first_sheet always answers for a non-empty workbook
    raise NoSheetsError("No lot sheet could be identified.")


def _strip_lot_word(lot_sheet_name: str) -> str:
    """Removes the first "lot" (any case) and trims: "Lot 3" -> "3"."""
    return re.sub(SHEET_LOT_WORD, "", lot_sheet_name, count=1, flags=re.IGNORECASE).strip()


def find_technical_sheet(sheet_names: Sequence[str], lot_sheet_name: str) -> Optional[str]:
    """Finds the technical scoring ("QT") sheet of a lot.

    A sheet matches when its upper-cased name contains "QT" and either the
    full lot sheet name or the lot identifier without the word "lot"
    ("QT-Lot 1", "QT 1" for "Lot 1"). Sheets are tested in workbook order.
    The generic "Analyse QT" sheet is the fallback.

    Returns:
        Optional[str]: The technical sheet name, or None.
    """
    lot_upper = lot_sheet_name.upper()
    identifier = _strip_lot_word(lot_sheet_name).upper()

    for name in sheet_names:
        upper = name.upper()
        if SHEET_QT_MARKER not in upper:
            continue
        if lot_upper in upper or (identifier and identifier in upper):
            return name

    for name in sheet_names:
        if name.strip().upper() == SHEET_GENERIC_QT_NAME:
            return name

    return None
