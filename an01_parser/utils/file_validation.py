# an01_parser/utils/file_validation.py
import logging
import zipfile
from io import BytesIO
from typing import Optional

from fastapi import HTTPException, UploadFile
from fastapi.concurrency import run_in_threadpool
from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from ..config import Settings, get_settings

logger = logging.getLogger(__name__)

MAX_UNZIPPED_SIZE = 200 * 1024 * 1024  # 200 MB (anti zip-bomb)
MAX_ZIP_ENTRIES = 5000
READ_CHUNK_SIZE = 512 * 1024  # 512 KB


def _ext_ok(filename: Optional[str], allowed_extensions: list[str]) -> bool:
    if not filename:
        return False
    name = filename.lower()
    return any(name.endswith(ext) for ext in allowed_extensions)


async def _read_limited(upload_file: UploadFile, max_size: int) -> bytes:
    """Reads the upload in chunks and stops as soon as `max_size` is exceeded."""
    total = 0
    chunks = []
    while True:
        chunk = await upload_file.read(READ_CHUNK_SIZE)
        if not chunk:
            break
        total += len(chunk)
        if total > max_size:
            raise HTTPException(
                status_code=413,
                detail=f"File too large. Maximum {max_size // (1024 * 1024)} MB.",
            )
        chunks.append(chunk)
    return b"".join(chunks)


def _zip_guard(xlsx_bytes: bytes) -> None:
    """Checks the XLSX container as a ZIP archive before openpyxl opens it."""
    try:
        with zipfile.ZipFile(BytesIO(xlsx_bytes)) as zf:
            infos = zf.infolist()
            if len(infos) == 0 or len(infos) > MAX_ZIP_ENTRIES:
                raise HTTPException(status_code=400, detail="Invalid XLSX archive (suspicious structure).")
            total_unzipped = 0
            for info in infos:
                total_unzipped += info.file_size
                if total_unzipped > MAX_UNZIPPED_SIZE:
                    raise HTTPException(status_code=400, detail="Uncompressed size too large (possible zip bomb).")
    except zipfile.BadZipFile:
        raise HTTPException(status_code=400, detail="The file is not a valid XLSX (corrupted archive).")


def _openpyxl_quick_checks(xlsx_bytes: bytes, max_sheets: int, max_rows_per_sheet: int) -> None:
    """
    Synchronous part, run in a threadpool:
    - the workbook opens with openpyxl;
    - it has at most `max_sheets` sheets;
    - no sheet has more than `max_rows_per_sheet` non-empty rows.
    """
    wb = None
    try:
        wb = load_workbook(BytesIO(xlsx_bytes), read_only=True, data_only=True)
        sheetnames = wb.sheetnames
        logger.info("Found sheets: %s", sheetnames)

        if len(sheetnames) > max_sheets:
            raise HTTPException(status_code=400, detail=f"Too many sheets: {len(sheetnames)} (max {max_sheets}).")

        for name in sheetnames:
            ws = wb[name]
            # read_only max_row is unreliable, count rows holding data instead
            actual_rows = 0
            for row in ws.iter_rows(max_row=max_rows_per_sheet + 1):
                if any(cell.value is not None for cell in row):
                    actual_rows += 1
            if actual_rows > max_rows_per_sheet:
                raise HTTPException(
                    status_code=400,
                    detail=f"Sheet '{name}' has too many rows: more than {max_rows_per_sheet}.",
                )
    except InvalidFileException as e:
        logger.exception("InvalidFileException")
        raise HTTPException(status_code=400, detail="The file is not a valid Excel file.") from e
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("Unexpected error in _openpyxl_quick_checks")
        raise HTTPException(
            status_code=400,
            detail="Error while checking the Excel file. Make sure the file is not corrupted.",
        ) from e
    finally:
        if wb is not None:
            wb.close()


async def validate_excel_upload_file(upload_file: UploadFile, settings: Optional[Settings] = None) -> bytes:
    """
    Validates an uploaded AN01 workbook before parsing.

    Checks:
      1) Extension (settings.allowed_extensions).
      2) Chunked read limited to settings.max_file_size, HTTP 413 beyond it.
      3) Anti ZIP-bomb: archive structure, entry count, uncompressed size.
      4) openpyxl can open it (in a threadpool).
      5) Sheet count and rows per sheet within the configured limits.

    Returns:
      bytes: the file content.
    """
    settings = settings or get_settings()
    logger.info("Validating upload: filename=%s, content_type=%s", upload_file.filename, upload_file.content_type)

    if not _ext_ok(upload_file.filename, settings.allowed_extensions):
        allowed = ", ".join(sorted(settings.allowed_extensions))
        logger.error("Extension check failed: filename=%s, allowed=%s", upload_file.filename, allowed)
        raise HTTPException(status_code=400, detail=f"The file must be one of: {allowed}")

    try:
        file_bytes = await _read_limited(upload_file, settings.max_file_size)
    except HTTPException:
        raise
    except Exception:
        logger.exception("File read failed")
        raise HTTPException(status_code=500, detail="Unable to read the file.")

    _zip_guard(file_bytes)

    await run_in_threadpool(
        _openpyxl_quick_checks,
        file_bytes,
        settings.max_sheets,
        settings.max_rows_per_sheet,
    )

    logger.info("Upload validated: %d bytes", len(file_bytes))
    return file_bytes
