"""Tests for StoreSession."""

import asyncio
from pathlib import Path

import aiosqlite
import pytest

from boothdb.errors import StorageError
from boothdb.storage.session import StoreSession


class TestStoreSessionLifecycle:
    """Tests for opening and closing sessions."""

    @pytest.mark.asyncio
    async def test_open_creates_file_and_directory(self, tmp_path: Path) -> None:
        """Opening a session creates the store file and missing parents."""
        db_path = tmp_path / "nested" / "photobooth.db"
        async with StoreSession(db_path):
            pass
        assert db_path.exists()

    @pytest.mark.asyncio
    async def test_foreign_keys_enabled(self, session: StoreSession) -> None:
        """Foreign key enforcement is on for every session."""
        row = await session.fetchone("PRAGMA foreign_keys")
        assert row[0] == 1

    @pytest.mark.asyncio
    async def test_journal_mode_applied(self, db_path: Path) -> None:
        """The configured journal mode is applied on open."""
        async with StoreSession(db_path, journal_mode="wal") as store:
            row = await store.fetchone("PRAGMA journal_mode")
        assert row[0] == "wal"

    @pytest.mark.asyncio
    async def test_use_before_open_raises(self, db_path: Path) -> None:
        """Queries on an unopened session raise StorageError."""
        store = StoreSession(db_path)
        with pytest.raises(StorageError, match="not open"):
            await store.execute("SELECT 1")

    @pytest.mark.asyncio
    async def test_close_is_idempotent(self, db_path: Path) -> None:
        """Closing twice is harmless."""
        store = StoreSession(db_path)
        await store.open()
        await store.close()
        await store.close()


class TestStoreSessionTransactions:
    """Tests for explicit transaction control."""

    @pytest.mark.asyncio
    async def test_commit_on_success(self, session: StoreSession, db_path: Path) -> None:
        """Writes inside a successful transaction are committed."""
        async with session.transaction():
            await session.execute("CREATE TABLE t (id INTEGER PRIMARY KEY)")
            await session.execute("INSERT INTO t (id) VALUES (1)")

        assert session.in_transaction is False
        async with aiosqlite.connect(db_path) as conn:
            cursor = await conn.execute("SELECT COUNT(*) FROM t")
            assert (await cursor.fetchone())[0] == 1

    @pytest.mark.asyncio
    async def test_rollback_includes_ddl(self, session: StoreSession) -> None:
        """DDL rolls back together with the DML around it."""
        with pytest.raises(RuntimeError):
            async with session.transaction():
                await session.execute("CREATE TABLE t (id INTEGER PRIMARY KEY)")
                await session.execute("INSERT INTO t (id) VALUES (1)")
                raise RuntimeError("fail mid-transaction")

        assert session.in_transaction is False
        row = await session.fetchone("SELECT name FROM sqlite_master WHERE name = 't'")
        assert row is None

    @pytest.mark.asyncio
    async def test_rollback_on_cancellation(self, session: StoreSession) -> None:
        """A cancelled transaction body is rolled back."""

        async def slow_body() -> None:
            async with session.transaction():
                await session.execute("CREATE TABLE t (id INTEGER PRIMARY KEY)")
                await asyncio.sleep(10)

        with pytest.raises(TimeoutError):
            await asyncio.wait_for(slow_body(), timeout=0.1)

        row = await session.fetchone("SELECT name FROM sqlite_master WHERE name = 't'")
        assert row is None

    @pytest.mark.asyncio
    async def test_nested_transaction_rejected(self, session: StoreSession) -> None:
        """Opening a transaction inside another raises StorageError."""
        async with session.transaction():
            with pytest.raises(StorageError, match="already open"):
                async with session.transaction():
                    pass

    @pytest.mark.asyncio
    async def test_in_transaction_flag(self, session: StoreSession) -> None:
        """in_transaction tracks the open transaction."""
        assert session.in_transaction is False
        async with session.transaction():
            assert session.in_transaction is True
        assert session.in_transaction is False


class TestCommitTimeout:
    """Tests for the bounded COMMIT."""

    @pytest.mark.asyncio
    async def test_stalled_commit_rolls_back(self, db_path: Path, stall_commit) -> None:  # noqa: ANN001
        """A COMMIT that never completes is rolled back and reported."""
        async with StoreSession(db_path, commit_timeout_seconds=0.05) as store:
            async with store.transaction():
                await store.execute("CREATE TABLE t (id INTEGER PRIMARY KEY)")
            stall_commit(store, 0.5, lands=False)

            with pytest.raises(StorageError, match="COMMIT did not complete"):
                async with store.transaction():
                    await store.execute("INSERT INTO t (id) VALUES (1)")

            assert store.in_transaction is False
            row = await store.fetchone("SELECT COUNT(*) FROM t")
            assert row[0] == 0

    @pytest.mark.asyncio
    async def test_late_commit_is_kept(self, db_path: Path, stall_commit) -> None:  # noqa: ANN001
        """A COMMIT that lands after the timeout counts as committed."""
        async with StoreSession(db_path, commit_timeout_seconds=0.05) as store:
            async with store.transaction():
                await store.execute("CREATE TABLE t (id INTEGER PRIMARY KEY)")
            stall_commit(store, 0.3, lands=True)

            async with store.transaction():
                await store.execute("INSERT INTO t (id) VALUES (1)")

            assert store.in_transaction is False

        async with aiosqlite.connect(db_path) as conn:
            cursor = await conn.execute("SELECT COUNT(*) FROM t")
            assert (await cursor.fetchone())[0] == 1


class TestExecuteScript:
    """Tests for multi-statement scripts."""

    @pytest.mark.asyncio
    async def test_script_runs_inside_transaction(self, session: StoreSession) -> None:
        """execute_script never commits the surrounding transaction."""
        script = """
        CREATE TABLE a (id INTEGER PRIMARY KEY);
        CREATE TABLE b (id INTEGER PRIMARY KEY);
        """
        with pytest.raises(RuntimeError):
            async with session.transaction():
                count = await session.execute_script(script)
                assert count == 2
                assert session.in_transaction is True
                raise RuntimeError("abort")

        rows = await session.fetchall(
            "SELECT name FROM sqlite_master WHERE type = 'table' AND name IN ('a', 'b')"
        )
        assert rows == []
