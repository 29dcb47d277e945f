"""
Logging setup for the AN01 parser.

Provides a centralised configuration with:
- a rotating log file under `LOG_DIR`
- coloured console output
- quieter third-party loggers

Modules only call `logging.getLogger(__name__)`; the entry points (CLI and
web service) call `setup_application_logging()` once at start-up.
"""

import logging
import logging.handlers
import sys
from typing import Optional

from .config import get_settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_FILE_NAME = "an01_parser.log"
LOG_FILE_MAX_SIZE = 10 * 1024 * 1024  # 10MB
LOG_FILE_BACKUP_COUNT = 5


class ColoredFormatter(logging.Formatter):
    """Console formatter colouring the level name."""

    COLORS = {
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def format(self, record):
        record = logging.makeLogRecord(record.__dict__)
        log_color = self.COLORS.get(record.levelname, "")
        record.levelname = f"{log_color}{record.levelname}{self.RESET}"
        return super().format(record)


def setup_logging(
    name: Optional[str] = None,
    level: Optional[str] = None,
    log_to_file: bool = True,
    log_to_console: bool = True,
) -> logging.Logger:
    """
    Configures a logger.

    Args:
        name: Logger name (root logger by default)
        level: DEBUG, INFO, WARNING, ERROR or CRITICAL; LOG_LEVEL when omitted
        log_to_file: Write to `<LOG_DIR>/an01_parser.log`
        log_to_console: Write to stdout

    Returns:
        logging.Logger: The configured logger
    """
    settings = get_settings()

    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, (level or settings.log_level).upper()))
    logger.handlers.clear()

    if log_to_file:
        settings.log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            settings.log_dir / LOG_FILE_NAME,
            maxBytes=LOG_FILE_MAX_SIZE,
            backupCount=LOG_FILE_BACKUP_COUNT,
            encoding="utf-8",
        )
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(file_handler)

    if log_to_console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(ColoredFormatter(LOG_FORMAT))
        logger.addHandler(console_handler)

    return logger


def configure_third_party_loggers():
    """Lowers the verbosity of noisy libraries."""
    logging.getLogger("openpyxl").setLevel(logging.WARNING)
    logging.getLogger("multipart").setLevel(logging.WARNING)
    logging.getLogger("python_multipart").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


def setup_application_logging(log_to_file: bool = True) -> logging.Logger:
    """Configures the `an01_parser` logger tree and the third-party loggers."""
    logger = setup_logging("an01_parser", log_to_file=log_to_file)
    configure_third_party_loggers()
    logger.debug("Logging configured")
    return logger
