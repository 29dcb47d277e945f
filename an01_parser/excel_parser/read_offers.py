# an01_parser/excel_parser/read_offers.py

"""Module for reading the offer table of a lot sheet.

Purpose:
    The offer table starts under a header row whose first cell reads
    "Raison sociale". One sub-header row follows, then one row per bidder
    until a summary section ("Calcul des gains", "Moyenne des offres",
    "Prix histo", "Offre retenue") begins.

    Columns are positional, whatever their header says:

    | col | 0    | 1          | 2           | 3              | 4               |
    |-----|------|------------|-------------|----------------|-----------------|
    |     | name | rank final | score final | rank financial | score financial |

    | col | 5              | 6               | 7          |
    |-----|----------------|-----------------|------------|
    |     | rank technical | score technical | amount TTC |

    A row only becomes an `Offer` when its amount rounded to the cent is
    strictly positive.
"""

import logging
from typing import List, Optional, Sequence

from ..constants import (
    OFFER_COL_AMOUNT_TTC,
    OFFER_COL_NAME,
    OFFER_COL_RANK_FINAL,
    OFFER_COL_RANK_FINANCIAL,
    OFFER_COL_RANK_TECHNICAL,
    OFFER_COL_SCORE_FINAL,
    OFFER_COL_SCORE_FINANCIAL,
    OFFER_COL_SCORE_TECHNICAL,
    OFFER_DATA_OFFSET,
    TABLE_PARSE_HEADER,
    TABLE_PARSE_STOP_MARKERS,
)
from ..helpers.cell_values import cell_text, is_blank, parse_amount, parse_rank, parse_score, round2
from ..models import CellValue, Offer, Row

log = logging.getLogger(__name__)


def _cell(row: Row, index: int) -> CellValue:
    return row[index] if index < len(row) else ""


def find_header_row(rows: Sequence[Row]) -> Optional[int]:
    """Index of the first row whose first cell is "Raison sociale" (trimmed, any case)."""
    for index, row in enumerate(rows):
        if row and cell_text(row[0]).strip().lower() == TABLE_PARSE_HEADER:
            return index
    return None


def is_summary_row(first_cell: CellValue) -> bool:
    first_cell_text = cell_text(first_cell).lower()
    return any(marker in first_cell_text for marker in TABLE_PARSE_STOP_MARKERS)


def parse_offer_row(row: Row, row_index: int) -> Optional[Offer]:
    """Builds an `Offer` from one table row, or None when the rounded amount is not positive."""
    amount = parse_amount(_cell(row, OFFER_COL_AMOUNT_TTC))
    if amount is None:
        return None
    amount_ttc = round2(amount)
    if amount_ttc <= 0:
        return None

    return Offer(
        id=row_index,
        name=cell_text(row[OFFER_COL_NAME]),
        rank_final=parse_rank(_cell(row, OFFER_COL_RANK_FINAL)),
        score_final=parse_score(_cell(row, OFFER_COL_SCORE_FINAL)),
        rank_financial=parse_rank(_cell(row, OFFER_COL_RANK_FINANCIAL)),
        score_financial=parse_score(_cell(row, OFFER_COL_SCORE_FINANCIAL)),
        rank_technical=parse_rank(_cell(row, OFFER_COL_RANK_TECHNICAL)),
        score_technical=parse_score(_cell(row, OFFER_COL_SCORE_TECHNICAL)),
        amount_ttc=amount_ttc,
    )


def extract_offers(rows: Sequence[Row]) -> List[Offer]:
    """Extracts the offers of a lot sheet.

    Logic:
        1.  Find the "Raison sociale" header row; without it the sheet has
            no offer table and an empty list is returned.
        2.  Start two rows below the header.
        3.  Skip rows with a blank first cell.
        4.  Stop at the first summary row (the row itself is excluded).
        5.  Keep rows whose amount, rounded to 2 decimals, is strictly positive.

    Args:
        rows (Sequence[Row]): Grid of the lot sheet.

    Returns:
        List[Offer]: Offers in sheet order.
    """
    header_index = find_header_row(rows)
    if header_index is None:
        log.debug("No 'Raison sociale' header row found")
        return []

    offers: List[Offer] = []
    for row_index in range(header_index + OFFER_DATA_OFFSET, len(rows)):
        row = rows[row_index]
        if not row or is_blank(row[OFFER_COL_NAME]):
            continue
        if is_summary_row(row[OFFER_COL_NAME]):
            log.debug(f"Summary row reached at index {row_index}: '{cell_text(row[OFFER_COL_NAME])}'")
            break

        offer = parse_offer_row(row, row_index)
        if offer is None:
            log.debug(f"Row {row_index} dropped: no positive amount")
            continue
        offers.append(offer)

    return offers
