# an01_parser/excel_parser/read_technical_analysis.py

"""
Module for reading the technical scoring matrix ("QT" sheet) of a lot.

Purpose:
    A QT sheet holds one row per technical criterion and, for every
    candidate, a score column followed by a comment column:

    | col | 0     | 1         | 2         | 3..                          |
    |-----|-------|-----------|-----------|------------------------------|
    | 0   |       |           |           | "Note SARL DUPONT", comment  |
    | 1.. | label | max score | criterion | score, comment, score, ...   |

    Candidate columns are found by matching the header cells against the
    offer names of the lot. The match is a substring test, so names are
    tried longest first: "DUPONT" must not claim the column of
    "DUPONT ET FILS".
"""

import logging
from typing import Dict, List, Sequence, Tuple

from ..constants import (
    TECH_CRITERION_NAME_COL,
    TECH_FIRST_CANDIDATE_COL,
    TECH_FIRST_DATA_ROW,
    TECH_HEADER_ROW,
    TECH_MAX_SCORE_COL,
    TECH_STOP_MARKER,
    TECH_STOP_PREFIX,
)
from ..helpers.cell_values import parse_criterion_score
from ..models import CandidateTechnicalAnalysis, CellValue, Row, TechnicalCriterion

log = logging.getLogger(__name__)


def _cell(row: Row, index: int) -> CellValue:
    return row[index] if index < len(row) else ""


def map_candidate_columns(header_row: Row, candidate_names: Sequence[str]) -> List[Tuple[str, int]]:
    """Maps candidate names to their score column in the header row.

    Args:
        header_row (Row): First row of the QT sheet.
        candidate_names (Sequence[str]): Offer names of the lot.

    Returns:
        List[Tuple[str, int]]: (candidate name, column index) pairs in column
        order. Only the first column of a candidate is kept; candidates
        without a column are absent.
    """
    sorted_names = sorted(candidate_names, key=len, reverse=True)
    column_map: List[Tuple[str, int]] = []
    mapped: set = set()

    for col_index in range(TECH_FIRST_CANDIDATE_COL, len(header_row)):
        cell = header_row[col_index]
        if not isinstance(cell, str):
            continue
        header_text = cell.strip().lower()
        match = next((name for name in sorted_names if name.lower() in header_text), None)
        if match is not None and match not in mapped:
            mapped.add(match)
            column_map.append((match, col_index))

    return column_map


def _is_end_of_criteria(criterion_name: str) -> bool:
    lower = criterion_name.lower()
    return lower == "" or lower.startswith(TECH_STOP_PREFIX) or TECH_STOP_MARKER in lower


def extract_technical_analysis(rows: Sequence[Row], candidate_names: Sequence[str]) -> List[CandidateTechnicalAnalysis]:
    """Extracts the per-candidate criteria scores of a QT sheet.

    Logic:
        1.  Map candidates to columns with `map_candidate_columns`; no mapped
            candidate means an empty result.
        2.  From the second row on, the criterion name is read in column C.
            Rows without a text criterion are skipped; a blank (whitespace
            only) name, a name starting with "total" or containing
            "note technique globale" ends the matrix.
        3.  Column B holds the max score, kept as is.
        4.  For every candidate, the cell of its column is the score and the
            next cell the comment. Empty scores add no criterion.

    Args:
        rows (Sequence[Row]): Grid of the QT sheet.
        candidate_names (Sequence[str]): Offer names of the lot.

    Returns:
        List[CandidateTechnicalAnalysis]: One entry per mapped candidate, in
        column order.
    """
    if len(rows) <= TECH_HEADER_ROW:
        return []

    column_map = map_candidate_columns(rows[TECH_HEADER_ROW], candidate_names)
    if not column_map:
        log.debug("No candidate column found in the technical sheet header")
        return []

    criteria_by_candidate: Dict[str, List[TechnicalCriterion]] = {name: [] for name, _ in column_map}

    for row in rows[TECH_FIRST_DATA_ROW:]:
        raw_name = _cell(row, TECH_CRITERION_NAME_COL)
        if not isinstance(raw_name, str) or raw_name == "":
            continue
        criterion_name = raw_name.strip()
        if _is_end_of_criteria(criterion_name):
            break

        max_score = _cell(row, TECH_MAX_SCORE_COL)

        for candidate_name, col_index in column_map:
            score = parse_criterion_score(_cell(row, col_index))
            if score is None:
                continue
            comment = _cell(row, col_index + 1)
            criteria_by_candidate[candidate_name].append(
                TechnicalCriterion(
                    name=criterion_name,
                    score=score,
                    max_score=max_score if max_score != "" else None,
                    comment=comment if isinstance(comment, str) and comment != "" else None,
                )
            )

    return [
        CandidateTechnicalAnalysis(candidate_name=name, criteria=criteria_by_candidate[name])
        for name, _ in column_map
    ]
