"""Polling utilities built on backoff.

Failed migration steps are never retried automatically; the only
thing boothdb waits on repeatedly is the startup migration lock.
"""

from collections.abc import Awaitable, Callable, Mapping
from typing import Any

import backoff
from loguru import logger


def on_backoff(details: Mapping[str, Any]) -> None:
    """Log a poll attempt that came back negative."""
    logger.debug(
        "Waiting on {}: attempt={} wait={}s elapsed={}s",
        details["target"].__name__,
        details["tries"],
        round(details["wait"], 3),
        round(details["elapsed"], 3),
    )


def on_giveup(details: Mapping[str, Any]) -> None:
    """Log when the wait bound is exhausted."""
    logger.warning(
        "Gave up waiting on {}: attempts={} elapsed={}s",
        details["target"].__name__,
        details["tries"],
        round(details["elapsed"], 3),
    )


def poll_until_true(
    max_time: float, interval: float
) -> Callable[[Callable[..., Awaitable[bool]]], Callable[..., Awaitable[bool]]]:
    """
    Build a decorator that re-invokes an async predicate until it returns True.

    The decorated coroutine returns the last value seen, so callers get
    False once ``max_time`` seconds have elapsed without success.

    Args:
        max_time: Total wait bound in seconds.
        interval: Constant delay between attempts in seconds.
    """
    return backoff.on_predicate(
        backoff.constant,
        interval=interval,
        jitter=None,
        max_time=max_time,
        on_backoff=on_backoff,
        on_giveup=on_giveup,
        logger=None,
    )
