"""FastAPI service exposing the AN01 bid-analysis extractor.

The service accepts an AN01 workbook upload, validates it and returns the
extracted analysis synchronously: lots, offers, savings statistics and the
technical scoring matrices, serialised with camelCase keys.

Endpoints:
- POST /analyze-an01/: upload an XLSX/XLSM workbook, get a GlobalAnalysisResult.
- GET /health: liveness check.
"""

import logging

from fastapi import FastAPI, File, HTTPException, UploadFile
from fastapi.middleware.cors import CORSMiddleware

from an01_parser.config import settings, validate_required_settings
from an01_parser.exceptions import ConfigurationError, NoSheetsError, NoValidLotsError, WorkbookDecodingError
from an01_parser.logger import setup_application_logging
from an01_parser.models import GlobalAnalysisResult
from an01_parser.parse import parse_analysis_file
from an01_parser.utils.file_validation import validate_excel_upload_file

try:
    validate_required_settings(settings)
except ConfigurationError as e:
    logging.warning(f"Configuration warning: {e}")

setup_application_logging(log_to_file=not settings.debug)
logger = logging.getLogger("api")

app = FastAPI(
    title=settings.app_title,
    description=settings.app_description,
    version=settings.app_version,
    debug=settings.debug,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)


@app.get("/health", tags=["Monitoring"])
async def health_check():
    return {"status": "ok", "service": "an01-parser", "version": settings.app_version}


@app.post("/analyze-an01/", tags=["AN01 Analysis"], response_model=GlobalAnalysisResult)
async def analyze_an01_workbook(file: UploadFile = File(...)):
    """Parses an uploaded AN01 workbook.

    - 400: the upload is not an acceptable or readable workbook;
    - 413: the upload exceeds MAX_FILE_SIZE;
    - 422: no lot with offers could be extracted.
    """
    try:
        file_bytes = await validate_excel_upload_file(file, settings)
        result = await parse_analysis_file(file_bytes)
    except HTTPException:
        raise
    except WorkbookDecodingError as e:
        logger.warning("Undecodable workbook '%s': %s", file.filename, e)
        raise HTTPException(status_code=400, detail=str(e))
    except (NoSheetsError, NoValidLotsError) as e:
        logger.warning("No analysis extracted from '%s': %s", file.filename, e)
        raise HTTPException(status_code=422, detail=str(e))
    except Exception as e:
        logger.exception("Analysis error for '%s': %s", file.filename, e)
        raise HTTPException(status_code=500, detail="Error while analysing the file")
    finally:
        await file.close()

    logger.info("File '%s' analysed: %d lot(s)", file.filename, len(result.lots))
    return result


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=9000, reload=settings.debug)
