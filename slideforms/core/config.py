"""Application configuration using Pydantic v2 Settings.

Centralized configuration that loads from environment variables
and provides type-safe access throughout the application.
"""

import logging
import shutil
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    All settings have sensible defaults and can be overridden via
    environment variables or a .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Strategy Selection
    document_engine: str = Field(
        default="pymupdf",
        description="Document engine strategy to use: 'pymupdf'.",
    )
    template_source: str = Field(
        default="pptx",
        description="Template source strategy to use: 'pptx'.",
    )

    # Template rendering
    libreoffice_path: str | None = Field(
        default=None,
        description="Path to the soffice binary. Detected on PATH when unset.",
    )
    conversion_timeout: float = Field(
        default=120.0,
        gt=0,
        description="Seconds allowed for one template-to-PDF conversion.",
    )

    # Remote fetch
    fetch_timeout: float = Field(
        default=30.0,
        gt=0,
        description="Seconds allowed for fetching a template, document or font by URL.",
    )

    # File Storage
    work_dir: Path = Field(
        default=Path("./work"),
        description="Directory for temporary template copies and conversions.",
    )
    max_upload_bytes: int = Field(
        default=50 * 1024 * 1024,
        gt=0,
        description="Largest accepted upload or fetched payload in bytes.",
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level: DEBUG, INFO, WARNING, ERROR.",
    )
    log_dir: Path = Field(
        default=Path("./logs"),
        description="Directory for info.log and error.log.",
    )

    @field_validator("work_dir")
    @classmethod
    def ensure_work_dir(cls, v: Path) -> Path:
        """Ensure the work directory exists."""
        v.mkdir(parents=True, exist_ok=True)
        return v.resolve()

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        """Normalize log level to uppercase."""
        return v.upper()

    def resolve_libreoffice(self) -> str | None:
        """Return the configured soffice binary or the first one found on PATH."""
        if self.libreoffice_path:
            return self.libreoffice_path
        for name in ("soffice", "libreoffice"):
            path = shutil.which(name)
            if path:
                return path
        return None

    def configure_logging(self) -> None:
        """Configure global logging based on settings."""
        import structlog

        level = getattr(logging, self.log_level, logging.INFO)

        structlog.configure(
            processors=[
                structlog.stdlib.filter_by_level,
                structlog.stdlib.add_logger_name,
                structlog.stdlib.add_log_level,
                structlog.stdlib.PositionalArgumentsFormatter(),
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.processors.StackInfoRenderer(),
                structlog.processors.format_exc_info,
                structlog.processors.JSONRenderer(),
            ],
            wrapper_class=structlog.stdlib.BoundLogger,
            context_class=dict,
            logger_factory=structlog.stdlib.LoggerFactory(),
            cache_logger_on_first_use=True,
        )

        logging.basicConfig(
            format="%(message)s",
            level=level,
        )

        logger.setLevel(level)


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or create the global Settings instance.

    Returns:
        The singleton Settings instance.
    """
    global _settings
    if _settings is None:
        _settings = Settings()
        _settings.configure_logging()
    return _settings
