"""Configuration management for boothdb."""

from boothdb.config.loader import load_config
from boothdb.config.models import Config, LoggingConfig, MigrationConfig, StoreConfig

__all__ = ["Config", "LoggingConfig", "MigrationConfig", "StoreConfig", "load_config"]
