"""
Podnorm Configuration System
============================

Configuration management with environment variables and Pydantic models.
Environment variables (prefix ``PODNORM_``, nested with ``__``) override
Field defaults.
"""

from typing import List, Optional
from enum import Enum

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings

from ..utils.exceptions import ConfigurationError, ErrorCode


class LogLevel(str, Enum):
    """Available log levels."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class IngestionSettings(BaseModel):
    """Where feed files are read from and how many are processed at once."""
    input_dir: str = Field(default="inputs", description="Directory holding downloaded feed files")
    extensions: List[str] = Field(default_factory=lambda: [".xml", ".txt"], description="Feed file extensions to pick up")
    parallel_feeds: int = Field(default=4, ge=1, le=32, description="Feed files processed concurrently")

    @field_validator('extensions')
    @classmethod
    def validate_extensions(cls, v):
        """Normalize extensions to lower-case with a leading dot."""
        normalized = []
        for ext in v:
            ext = ext.strip().lower()
            if not ext:
                continue
            if not ext.startswith("."):
                raise ValueError(f"extension must start with '.': {ext}")
            normalized.append(ext)
        if not normalized:
            raise ValueError("at least one extension is required")
        return normalized


class OutputSettings(BaseModel):
    """Record output configuration."""
    output_dir: str = Field(default="outputs", description="Base directory for per-run output folders")
    pretty_json: bool = Field(default=False, description="Indent record files for human inspection")


class LoggingSettings(BaseModel):
    """Logging configuration."""
    level: LogLevel = Field(default=LogLevel.INFO, description="Logging level")
    file_path: Optional[str] = Field(default="logs/podnorm.log", description="Log file path")
    max_file_size_mb: int = Field(default=10, ge=1, le=100, description="Max log file size in MB")
    backup_count: int = Field(default=5, ge=1, le=20, description="Number of backup log files")
    structured_logging: bool = Field(default=False, description="Use JSON structured logging on the console")
    console_logging: bool = Field(default=True, description="Enable console logging")


class PodnormSettings(BaseSettings):
    """Main application settings."""
    app_name: str = Field(default="podnorm", description="Application name")
    debug: bool = Field(default=False, description="Enable debug mode")

    ingestion: IngestionSettings = Field(default_factory=IngestionSettings)
    output: OutputSettings = Field(default_factory=OutputSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "env_nested_delimiter": "__",
        "env_prefix": "PODNORM_",
        "extra": "ignore",
    }

    def validate_configuration(self) -> None:
        """Cross-field checks that single Field constraints cannot express."""
        if self.ingestion.input_dir.strip() == "":
            raise ConfigurationError(
                "Input directory must not be empty",
                config_key="ingestion.input_dir",
                error_code=ErrorCode.CONFIG_MISSING,
            )
        if self.output.output_dir.strip() == "":
            raise ConfigurationError(
                "Output directory must not be empty",
                config_key="output.output_dir",
                error_code=ErrorCode.CONFIG_MISSING,
            )

    def get_effective_log_level(self) -> str:
        """Debug mode forces DEBUG logging."""
        if self.debug:
            return LogLevel.DEBUG.value
        return self.logging.level.value


def load_settings() -> PodnormSettings:
    """Load settings from environment variables and defaults.

    Returns:
        Loaded and validated settings

    Raises:
        ConfigurationError: If configuration is invalid
    """
    from dotenv import load_dotenv
    load_dotenv()

    try:
        settings = PodnormSettings()
        settings.validate_configuration()
        return settings

    except Exception as e:
        if isinstance(e, ConfigurationError):
            raise
        raise ConfigurationError(
            f"Failed to initialize settings: {e}",
            error_code=ErrorCode.CONFIG_INVALID
        ) from e


_settings: Optional[PodnormSettings] = None


def get_settings(reload: bool = False) -> PodnormSettings:
    """Get global settings instance (singleton pattern).

    Args:
        reload: Force reload of settings

    Returns:
        Global settings instance
    """
    global _settings

    if _settings is None or reload:
        _settings = load_settings()

    return _settings
