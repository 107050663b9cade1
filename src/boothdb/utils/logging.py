"""Logging setup for boothdb, built on loguru.

Console output goes to stderr so kiosk supervisors capture it
alongside crash output. An optional rotating file sink keeps a
migration trail on the device itself.
"""

import logging
import sys
from typing import Any

from loguru import logger

from boothdb.config.models import LoggingConfig

_CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)


class _InterceptHandler(logging.Handler):
    """Route standard library logging through loguru.

    aiosqlite logs through the stdlib logging module; this keeps
    its records in the same sinks as ours.
    """

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Walk past logging's own frames to the real caller
        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back  # type: ignore[assignment]
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def _sink_options(config: LoggingConfig) -> dict[str, Any]:
    """Format options shared by the console and file sinks."""
    if config.format == "json":
        return {"format": "{message}", "serialize": True, "level": config.level}
    return {"format": _CONSOLE_FORMAT, "serialize": False, "level": config.level}


def configure_logging(config: LoggingConfig) -> None:
    """
    Replace loguru's default sink with the configured ones.

    Args:
        config: LoggingConfig with level, format, and file settings.
    """
    logger.remove()
    options = _sink_options(config)

    logger.add(sys.stderr, colorize=config.format == "console", **options)

    if config.file:
        config.file.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            config.file,
            rotation=config.rotation,
            retention=config.retention,
            compression="gz",
            **options,
        )

    logging.basicConfig(handlers=[_InterceptHandler()], level=0, force=True)

    logger.debug(
        "Logging configured: level={} format={} file={}",
        config.level,
        config.format,
        config.file or "-",
    )
