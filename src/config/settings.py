"""Configuration settings for the job board."""

from pathlib import Path
from typing import Annotated

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.tracker.models import JobStatus


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

    # Paths
    board_db_path: Path = Field(
        default=Path("./data/board.db"),
        description="Path to the SQLite job board database",
    )

    # Board behaviour
    default_status: JobStatus = Field(
        default=JobStatus.WISHLIST,
        description="Column that new jobs land in when no status is given",
    )
    notice_duration_seconds: Annotated[float, Field(gt=0)] = Field(
        default=4.0,
        description="How long a transient failure notice stays visible",
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level: DEBUG, INFO, WARNING, ERROR",
    )

    @field_validator("default_status", mode="before")
    @classmethod
    def validate_default_status(cls, v: str | JobStatus) -> JobStatus:
        """Accept column names case-insensitively, reject unknown columns."""
        if isinstance(v, JobStatus):
            return v
        if isinstance(v, str):
            return JobStatus.parse(v.strip().upper())
        raise ValueError(f"Invalid default_status type: {type(v)}")

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a known level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return v.upper()


# Singleton instance for easy import
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get the application settings singleton."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Reset the settings singleton (useful for testing)."""
    global _settings
    _settings = None
