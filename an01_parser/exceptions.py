"""
Custom exceptions of the AN01 parser.

Only the fatal cases are exceptions: an unreadable file, a workbook without
sheets and a workbook where no lot produced offers. Problems inside one lot
sheet or one cell are absorbed by the parsers and never reach the caller.
"""


class AnalysisParsingError(Exception):
    """Base exception for AN01 workbook parsing errors."""

    def __init__(self, message: str, file_path: str = None):
        super().__init__(message)
        self.file_path = file_path


class WorkbookDecodingError(AnalysisParsingError):
    """The uploaded bytes could not be decoded as a spreadsheet workbook."""

    pass


class NoSheetsError(AnalysisParsingError):
    """The workbook contains no sheet at all."""

    pass


class NoValidLotsError(AnalysisParsingError):
    """None of the candidate lot sheets produced a valid offer table."""

    def __init__(self, message: str, sheet_names: list = None, file_path: str = None):
        super().__init__(message, file_path)
        self.sheet_names = sheet_names or []


class ConfigurationError(Exception):
    """Invalid application configuration."""

    pass
