"""Shared pytest fixtures for boothdb tests."""

import asyncio
from collections.abc import AsyncIterator, Callable, Iterator
from datetime import UTC, datetime, timedelta
from io import StringIO
from pathlib import Path

import pytest
from loguru import logger

from boothdb.storage.migrations import v001_baseline
from boothdb.storage.session import StoreSession


class FakeClock:
    """Deterministic clock that moves forward one second per reading."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2024, 3, 1, 12, 0, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        current = self.now
        self.now = self.now + timedelta(seconds=1)
        return current


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    """Provide a temporary store path."""
    return tmp_path / "photobooth.db"


@pytest.fixture
def clock() -> FakeClock:
    """Provide a deterministic clock."""
    return FakeClock()


@pytest.fixture
async def session(db_path: Path) -> AsyncIterator[StoreSession]:
    """Provide an open session on an empty store."""
    store = StoreSession(db_path)
    await store.open()
    yield store
    await store.close()


@pytest.fixture
async def legacy_store(db_path: Path) -> Path:
    """Create a store with the baseline schema and no version table."""
    async with StoreSession(db_path) as store:
        async with store.transaction():
            await v001_baseline.apply_migration(store)
    return db_path


@pytest.fixture
def log_capture() -> Iterator[StringIO]:
    """Capture loguru output for assertions."""
    sink = StringIO()
    handler_id = logger.add(sink, format="{level} {message}", level="DEBUG")
    yield sink
    logger.remove(handler_id)


@pytest.fixture
def stall_commit(monkeypatch: pytest.MonkeyPatch) -> Callable[..., None]:
    """Delay COMMIT on an open session's connection.

    With ``lands=True`` the COMMIT is sent to the connection thread at
    once and only the caller's await is delayed, so it completes even
    when the caller gives up waiting. Otherwise it is never sent if the
    caller gives up first.
    """

    def stall(session: StoreSession, delay: float, *, lands: bool) -> None:
        conn = session._get_conn()
        original = conn.execute

        def execute(sql, *args):  # noqa: ANN001, ANN002, ANN202
            if sql != "COMMIT":
                return original(sql, *args)

            async def delayed():  # noqa: ANN202
                if lands:
                    commit = asyncio.ensure_future(original(sql, *args))
                    await asyncio.sleep(delay)
                    return await commit
                await asyncio.sleep(delay)
                return await original(sql, *args)

            return delayed()

        monkeypatch.setattr(conn, "execute", execute)

    return stall
