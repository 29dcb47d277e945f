"""
AN01 bid-analysis workbook parser.

Turns an uploaded "analyse des offres" spreadsheet into a typed
`GlobalAnalysisResult`: one entry per procurement lot with its offers,
savings statistics and optional technical scoring matrix.
"""

from .models import GlobalAnalysisResult
from .parse import parse_analysis_bytes, parse_analysis_file, parse_analysis_workbook

__all__ = [
    "GlobalAnalysisResult",
    "parse_analysis_bytes",
    "parse_analysis_file",
    "parse_analysis_workbook",
]
