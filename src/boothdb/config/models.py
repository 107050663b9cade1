"""Pydantic configuration models for boothdb."""

from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings


class StoreConfig(BaseModel):
    """Embedded store location and connection settings."""

    data_directory: Path = Field(default_factory=lambda: Path("~/.photobooth").expanduser())
    database_name: str = Field(default="photobooth.db", min_length=1)
    busy_timeout_seconds: float = Field(default=5.0, ge=0.1, le=120.0)
    journal_mode: Literal["wal", "delete"] = "wal"

    @field_validator("data_directory", mode="before")
    @classmethod
    def expand_path(cls, v: Path | str) -> Path:
        """Expand user path and resolve to absolute."""
        if isinstance(v, str):
            v = Path(v)
        return v.expanduser().resolve()

    @field_validator("database_name")
    @classmethod
    def validate_database_name(cls, v: str) -> str:
        """Database name must be a bare file name."""
        if Path(v).name != v:
            raise ValueError("database_name must not contain directory components")
        return v

    @property
    def database_path(self) -> Path:
        """Full path of the store file."""
        return self.data_directory / self.database_name


class MigrationConfig(BaseModel):
    """Startup migration behavior."""

    lock_timeout_seconds: float = Field(default=30.0, ge=0.0, le=600.0)
    lock_poll_interval_seconds: float = Field(default=0.25, ge=0.01, le=10.0)
    lock_stale_seconds: int = Field(default=300, ge=10, le=3600)
    step_timeout_seconds: float = Field(default=120.0, ge=1.0, le=3600.0)
    commit_timeout_seconds: float = Field(default=30.0, ge=1.0, le=600.0)
    allow_ahead_of_code: bool = True

    @field_validator("lock_poll_interval_seconds")
    @classmethod
    def validate_poll_interval(cls, v: float, info: Any) -> float:
        """Poll interval must not exceed a non-zero lock timeout."""
        timeout = info.data.get("lock_timeout_seconds")
        if timeout and v > timeout:
            raise ValueError("lock_poll_interval_seconds must not exceed lock_timeout_seconds")
        return v

    @field_validator("step_timeout_seconds")
    @classmethod
    def validate_step_timeout(cls, v: float, info: Any) -> float:
        """A step must finish before its lock could be judged stale."""
        stale = info.data.get("lock_stale_seconds")
        if stale is not None and v >= stale:
            raise ValueError("step_timeout_seconds must be below lock_stale_seconds")
        return v


class LoggingConfig(BaseModel):
    """Logging configuration for loguru."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    format: Literal["console", "json"] = "console"
    file: Path | None = None
    rotation: str = "10 MB"
    retention: str = "7 days"


class Config(BaseSettings):
    """Root configuration for boothdb."""

    store: StoreConfig = Field(default_factory=StoreConfig)
    migrations: MigrationConfig = Field(default_factory=MigrationConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = {
        "env_prefix": "BOOTHDB_",
        "env_nested_delimiter": "__",
    }
