"""Tests for polling utilities."""

import io

import pytest

from boothdb.utils.retry import on_backoff, on_giveup, poll_until_true


class TestPollCallbacks:
    """Test backoff callback functions."""

    def test_on_backoff_logs_attempt(self, log_capture: io.StringIO) -> None:
        """on_backoff should log each negative poll."""

        def migration_lock() -> None:
            pass

        details = {"target": migration_lock, "tries": 2, "wait": 0.25, "elapsed": 0.5}
        on_backoff(details)

        log_output = log_capture.getvalue()
        assert "Waiting on migration_lock" in log_output
        assert "attempt=2" in log_output

    def test_on_giveup_logs_warning(self, log_capture: io.StringIO) -> None:
        """on_giveup should log when the wait bound is exhausted."""

        def migration_lock() -> None:
            pass

        details = {"target": migration_lock, "tries": 5, "elapsed": 1.2}
        on_giveup(details)

        log_output = log_capture.getvalue()
        assert "WARNING" in log_output
        assert "Gave up waiting on migration_lock" in log_output


class TestPollUntilTrue:
    """Test the predicate polling decorator."""

    @pytest.mark.asyncio
    async def test_returns_true_once_predicate_succeeds(self) -> None:
        """Polling stops at the first True."""
        calls = []

        @poll_until_true(max_time=5.0, interval=0.01)
        async def ready() -> bool:
            calls.append(1)
            return len(calls) >= 3

        assert await ready() is True
        assert len(calls) == 3

    @pytest.mark.asyncio
    async def test_returns_false_after_max_time(self) -> None:
        """Polling gives up and returns the last value."""
        calls = []

        @poll_until_true(max_time=0.1, interval=0.02)
        async def never_ready() -> bool:
            calls.append(1)
            return False

        assert await never_ready() is False
        assert len(calls) >= 2

    @pytest.mark.asyncio
    async def test_zero_max_time_tries_once(self) -> None:
        """A zero bound still makes one attempt."""
        calls = []

        @poll_until_true(max_time=0, interval=0.01)
        async def never_ready() -> bool:
            calls.append(1)
            return False

        assert await never_ready() is False
        assert len(calls) == 1
