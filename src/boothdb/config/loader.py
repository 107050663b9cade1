"""Configuration loading for the kiosk store."""

import os
from pathlib import Path

import yaml
from loguru import logger
from pydantic import ValidationError

from boothdb.config.models import Config
from boothdb.errors import ConfigurationError

CONFIG_ENV_VAR = "BOOTHDB_CONFIG"


def load_config(config_path: Path | None = None) -> Config:
    """
    Load configuration from a YAML file, or defaults.

    When no path is given, the file named by ``BOOTHDB_CONFIG`` is used
    if that variable is set. ``BOOTHDB_*`` environment variables
    fill in any field the file leaves unset.

    Args:
        config_path: Path to YAML config file, or None.

    Returns:
        Validated Config object.

    Raises:
        FileNotFoundError: If the config file doesn't exist.
        ConfigurationError: If the file is not valid YAML or fails validation.
    """
    if config_path is None:
        env_path = os.environ.get(CONFIG_ENV_VAR)
        if not env_path:
            return Config()
        config_path = Path(env_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    try:
        data = yaml.safe_load(config_path.read_text())
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {config_path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"YAML root in {config_path} must be a mapping, not {type(data).__name__}"
        )

    try:
        config = Config(**data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration in {config_path}: {e}") from e

    logger.debug("Configuration loaded from {}", config_path)
    return config
