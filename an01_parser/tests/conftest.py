# an01_parser/tests/conftest.py
"""
Pytest configuration.
Shared fixtures: grid builders for AN01 sheets and an in-memory XLSX writer.
"""

import sys
from io import BytesIO
from pathlib import Path

import pytest
from openpyxl import Workbook as XlsxWorkbook

# Project root on the Python path
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))

from an01_parser.models import Sheet, Workbook  # noqa: E402

OFFER_HEADER = [
    "Raison sociale",
    "Rang final",
    "Note finale",
    "Rang financier",
    "Note financière",
    "Rang technique",
    "Note technique",
    "Montant TTC",
]


def _pad(rows, width=None):
    width = width or max((len(row) for row in rows), default=0)
    return [list(row) + [""] * (width - len(row)) for row in rows]


def build_lot_rows(offer_rows, metadata_rows=None, trailing_rows=None):
    """Grid of a lot sheet: metadata block, header, sub-header, offers, summary."""
    rows = list(metadata_rows or [["Analyse des offres"]])
    rows.append(OFFER_HEADER)
    rows.append(["", "", "", "", "", "", "", "HT + TVA"])
    rows.extend(offer_rows)
    rows.extend(trailing_rows or [["Moyenne des offres", "", "", "", "", "", "", 0]])
    return _pad(rows, 8)


@pytest.fixture
def lot_rows_factory():
    return build_lot_rows


@pytest.fixture
def scenario_a_rows():
    """Two offers of 100 000 and 90 000, the second one ranked first."""
    return build_lot_rows(
        [
            ["ALPHA SARL", 2, 85.5, 2, 50, 1, 35.5, 100000],
            ["BETA SAS", 1, 90, 1, 60, 2, 30, 90000],
        ]
    )


@pytest.fixture
def technical_rows():
    """QT sheet with ALPHA SARL in column 3 and BETA SAS in column 5."""
    return _pad(
        [
            ["N°", "Note max", "Critère", "Note ALPHA SARL", "Commentaire", "Note BETA SAS", "Commentaire"],
            ["1", 20, "Méthodologie", 15, "Bon mémoire", 12.5, "Moyen"],
            ["2", 10, "Délais", "8,5", "", "NC", "Non chiffré"],
            ["", "", "Total", 23.5, "", 12.5, ""],
            ["3", 5, "Après le total", 5, "", 5, ""],
        ]
    )


@pytest.fixture
def make_workbook():
    """Builds an in-memory `Workbook` from a {sheet name: rows} mapping."""

    def _make(sheets):
        return Workbook(sheets=[Sheet(name=name, rows=_pad(rows)) for name, rows in sheets.items()])

    return _make


@pytest.fixture
def make_xlsx_bytes():
    """Writes a real XLSX file in memory from a {sheet name: rows} mapping."""

    def _make(sheets):
        wb = XlsxWorkbook()
        wb.remove(wb.active)
        for name, rows in sheets.items():
            ws = wb.create_sheet(title=name)
            for row in rows:
                ws.append([None if value == "" else value for value in row])
        buffer = BytesIO()
        wb.save(buffer)
        return buffer.getvalue()

    return _make
