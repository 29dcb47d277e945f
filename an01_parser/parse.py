"""
Main orchestrator module for AN01 bid-analysis workbooks.

Purpose:
    Entry point of the extraction. It takes an uploaded workbook (raw bytes or
    an already decoded `Workbook`) and returns a `GlobalAnalysisResult`.

Main sequence:
1.  Decoding. The bytes are decoded into sheets and grids by `read_workbook`.

2.  Global metadata. If a "Synthèse" sheet exists, its label/value rows
    become `global_metadata`.

3.  Lot sheets. `find_lot_sheets` picks the sheets to analyse. Each one is
    processed on its own: metadata, offers, statistics and, when a matching
    QT sheet exists, the technical matrix. A sheet that raises or has no
    offers is logged and skipped; the other lots are not affected.

4.  Final check. If no lot survived, `NoValidLotsError` is raised. Otherwise
    lots are sorted by the number at the end of their name ("Lot 2" before
    "Lot 10"), falling back to alphabetical order.

Usage:
    python -m an01_parser.parse analyse.xlsx [-o result.json]
"""

import argparse
import logging
import re
import sys
from functools import cmp_to_key
from pathlib import Path
from typing import List, Optional

from anyio import to_thread

from .excel_parser.calculate_stats import calculate_stats
from .excel_parser.classify_sheets import find_lot_sheets, find_synthesis_sheet, find_technical_sheet
from .excel_parser.read_metadata import extract_metadata, read_global_metadata
from .excel_parser.read_offers import extract_offers
from .excel_parser.read_technical_analysis import extract_technical_analysis
from .excel_parser.read_workbook import read_workbook
from .exceptions import AnalysisParsingError, NoValidLotsError
from .logger import setup_application_logging
from .models import GlobalAnalysisResult, Lot, Workbook

log = logging.getLogger(__name__)

_TRAILING_NUMBER_RE = re.compile(r"(\d+)\s*$")


def _trailing_number(name: str) -> int:
    match = _TRAILING_NUMBER_RE.search(name)
    return int(match.group(1)) if match else 0


def compare_lot_names(a: str, b: str) -> int:
    """Numeric order when both names end with a non-zero number, alphabetical otherwise."""
    num_a, num_b = _trailing_number(a), _trailing_number(b)
    if num_a and num_b and num_a != num_b:
        return -1 if num_a < num_b else 1

    key_a, key_b = (a.casefold(), a), (b.casefold(), b)
    if key_a == key_b:
        return 0
    return -1 if key_a < key_b else 1


def sort_lots(lots: List[Lot]) -> List[Lot]:
    return sorted(lots, key=cmp_to_key(lambda x, y: compare_lot_names(x.lot_name, y.lot_name)))


def parse_lot_sheet(workbook: Workbook, sheet_name: str) -> Optional[Lot]:
    """Runs the full per-lot pipeline on one sheet.

    Returns:
        Optional[Lot]: The lot, or None when the sheet has no offer.

    Raises:
        Exception: Whatever a sub-parser raises; `parse_analysis_workbook`
        turns it into a skipped lot.
    """
    rows = workbook.get_sheet(sheet_name).rows

    metadata = extract_metadata(rows)
    offers = extract_offers(rows)
    if not offers:
        log.warning(f"Sheet '{sheet_name}' skipped: no offers found.")
        return None

    stats = calculate_stats(offers)

    technical_analysis = None
    technical_sheet_name = find_technical_sheet(workbook.sheet_names, sheet_name)
    if technical_sheet_name:
        log.debug(f"Technical sheet for '{sheet_name}': '{technical_sheet_name}'")
        technical_analysis = extract_technical_analysis(
            workbook.get_sheet(technical_sheet_name).rows,
            [offer.name for offer in offers],
        )

    return Lot(
        lot_name=sheet_name,
        metadata=metadata,
        offers=offers,
        stats=stats,
        technical_analysis=technical_analysis,
    )


def parse_analysis_workbook(workbook: Workbook) -> GlobalAnalysisResult:
    """Extracts every lot of a decoded AN01 workbook.

    Args:
        workbook (Workbook): Decoded workbook.

    Returns:
        GlobalAnalysisResult: Sorted lots and the global metadata.

    Raises:
        NoSheetsError: If the workbook has no sheets.
        NoValidLotsError: If no lot sheet produced offers.
    """
    sheet_names = workbook.sheet_names

    global_metadata = {}
    synthesis_sheet_name = find_synthesis_sheet(sheet_names)
    if synthesis_sheet_name:
        global_metadata = read_global_metadata(workbook.get_sheet(synthesis_sheet_name).rows)

    lot_sheet_names = find_lot_sheets(sheet_names)
    log.info(f"Lot sheets to analyse: {lot_sheet_names}")

    lots: List[Lot] = []
    for sheet_name in lot_sheet_names:
        try:
            lot = parse_lot_sheet(workbook, sheet_name)
        except Exception:
            log.warning(f"Error while parsing sheet '{sheet_name}', lot skipped.", exc_info=True)
            continue
        if lot is not None:
            lots.append(lot)

    if not lots:
        raise NoValidLotsError(
            f"No valid offer data found in the identified sheets: {lot_sheet_names}",
            sheet_names=lot_sheet_names,
        )

    log.info(f"{len(lots)} lot(s) extracted out of {len(lot_sheet_names)} sheet(s).")
    return GlobalAnalysisResult(lots=sort_lots(lots), global_metadata=global_metadata)


def parse_analysis_bytes(file_bytes: bytes) -> GlobalAnalysisResult:
    """Decodes an uploaded XLSX file and extracts its analysis."""
    return parse_analysis_workbook(read_workbook(file_bytes))


async def parse_analysis_file(file_bytes: bytes) -> GlobalAnalysisResult:
    """Async entry point: runs `parse_analysis_bytes` in a worker thread."""
    return await to_thread.run_sync(parse_analysis_bytes, file_bytes)


def parse_analysis_path(xlsx_path: str) -> GlobalAnalysisResult:
    source_path = Path(xlsx_path).resolve()
    log.info(f"--- Processing file: {source_path} ---")
    try:
        return parse_analysis_bytes(source_path.read_bytes())
    except AnalysisParsingError as e:
        e.file_path = str(source_path)
        raise


def main(argv: Optional[List[str]] = None) -> int:
    cli_parser = argparse.ArgumentParser(
        description="Extracts lots, offers and savings from an AN01 bid-analysis workbook.",
        formatter_class=argparse.RawTextHelpFormatter,
    )
    cli_parser.add_argument("xlsx_path", type=str, help="Path to the AN01 XLSX workbook.")
    cli_parser.add_argument("-o", "--output", type=str, default=None, help="Write the JSON result to this file.")
    args = cli_parser.parse_args(argv)

    setup_application_logging()

    input_file = Path(args.xlsx_path)
    if not input_file.is_file():
        log.error(f"Input XLSX file not found: {input_file.resolve()}")
        return 1

    try:
        result = parse_analysis_path(args.xlsx_path)
    except AnalysisParsingError as e:
        log.error(f"Extraction failed for '{e.file_path}': {e}")
        return 1

    payload = result.model_dump_json(by_alias=True, indent=2)
    if args.output:
        Path(args.output).write_text(payload, encoding="utf-8")
        log.info(f"Result saved to: {args.output}")
    else:
        print(payload)
    return 0


if __name__ == "__main__":
    sys.exit(main())
