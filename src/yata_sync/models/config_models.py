"""Configuration models for the Yata sync server."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, field_validator


class DatabaseConfig(BaseModel):
    """SQLite store configuration."""

    path: str | None = Field(
        default=None,
        description="Database file path; defaults to the user data directory",
    )
    busy_timeout: float = Field(default=30.0, gt=0)
    lock_retries: int = Field(default=3, ge=1)

    @field_validator("path")
    @classmethod
    def validate_path(cls, v: str | None) -> str | None:
        """Treat a blank path as unset."""
        if v is not None and not v.strip():
            return None
        return v.strip() if v else v


class SyncConfig(BaseModel):
    """Sync engine configuration."""

    deadline_seconds: float = Field(
        default=30.0,
        gt=0,
        description="A sync transaction running longer than this is rolled back",
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO")


class OutputConfig(BaseModel):
    """CLI output configuration."""

    format: Literal["table", "json", "yaml"] = Field(default="table")


class AppConfig(BaseModel):
    """Main Yata sync configuration."""

    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    sync: SyncConfig = Field(default_factory=SyncConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
