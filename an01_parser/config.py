"""
Application configuration module.

Centralises the settings of the AN01 parser service. Values come from the
environment or a `.env` file, are validated by pydantic and fall back to
defaults suitable for local use.
"""

from pathlib import Path
from typing import List

from dotenv import load_dotenv
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigurationError

# .env values become visible to os.environ as well
load_dotenv()

SUPPORTED_EXTENSIONS = (".xlsx", ".xlsm")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
MAX_FILE_SIZE_LIMIT = 500 * 1024 * 1024  # 500MB


class Settings(BaseSettings):
    """Service settings: application info, upload limits, logging and CORS."""

    app_title: str = "AN01 Analysis Parser"
    app_description: str = "Extraction of lots, offers and savings from AN01 bid-analysis workbooks."
    app_version: str = "1.0.0"
    debug: bool = False

    # Logging
    log_level: str = "INFO"
    log_dir: Path = Path("logs")

    # Uploads
    max_file_size: int = 20 * 1024 * 1024  # 20MB
    allowed_extensions: List[str] = list(SUPPORTED_EXTENSIONS)
    max_sheets: int = 50
    max_rows_per_sheet: int = 5000

    # CORS
    cors_origins: List[str] = ["*"]
    cors_allow_credentials: bool = True
    cors_allow_methods: List[str] = ["*"]
    cors_allow_headers: List[str] = ["*"]

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}")
        return level

    @field_validator("max_file_size")
    @classmethod
    def validate_max_file_size(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("max_file_size must be positive")
        if value > MAX_FILE_SIZE_LIMIT:
            raise ValueError("max_file_size cannot exceed 500MB")
        return value

    @field_validator("allowed_extensions")
    @classmethod
    def validate_allowed_extensions(cls, value: List[str]) -> List[str]:
        extensions = [ext.lower() for ext in value]
        for ext in extensions:
            if ext not in SUPPORTED_EXTENSIONS:
                raise ValueError(f"Extension {ext} not supported")
        return extensions


def get_settings() -> Settings:
    """Returns a fresh `Settings` instance read from the current environment."""
    return Settings()


def validate_required_settings(settings: Settings) -> None:
    """
    Checks the settings that pydantic cannot validate on its own.

    Raises:
        ConfigurationError: Listing every problem found.
    """
    errors = []

    if settings.max_sheets <= 0:
        errors.append("MAX_SHEETS must be positive")
    if settings.max_rows_per_sheet <= 0:
        errors.append("MAX_ROWS_PER_SHEET must be positive")
    if not settings.allowed_extensions:
        errors.append("ALLOWED_EXTENSIONS cannot be empty")

    try:
        settings.log_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        errors.append(f"LOG_DIR '{settings.log_dir}' cannot be created: {e}")

    if errors:
        raise ConfigurationError("Configuration errors: " + "; ".join(errors))


settings = get_settings()
