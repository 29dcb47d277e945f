# an01_parser/excel_parser/__init__.py
"""
Excel Parser Module

Parsers for the sheets of an AN01 bid-analysis workbook:

- Workbook decoding (bytes -> sheets and grids)
- Sheet classification (lot, technical and synthesis sheets)
- Metadata, offer table and technical matrix extraction
- Savings statistics
"""

from .calculate_stats import calculate_stats
from .classify_sheets import find_lot_sheets, find_synthesis_sheet, find_technical_sheet
from .read_metadata import extract_metadata, find_value_in_row, read_global_metadata
from .read_offers import extract_offers, find_header_row
from .read_technical_analysis import extract_technical_analysis, map_candidate_columns
from .read_workbook import read_sheet, read_workbook

__all__ = [
    # Decoding
    "read_workbook",
    "read_sheet",
    # Sheet classification
    "find_lot_sheets",
    "find_synthesis_sheet",
    "find_technical_sheet",
    # Data extraction
    "extract_metadata",
    "read_global_metadata",
    "extract_offers",
    "extract_technical_analysis",
    "calculate_stats",
    # Utilities
    "find_value_in_row",
    "find_header_row",
    "map_candidate_columns",
]
