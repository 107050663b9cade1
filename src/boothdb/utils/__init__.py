"""boothdb utility modules."""

from boothdb.utils.logging import configure_logging
from boothdb.utils.retry import poll_until_true

__all__ = [
    "configure_logging",
    "poll_until_true",
]
