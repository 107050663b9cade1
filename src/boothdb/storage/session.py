"""SQLite session for the kiosk store."""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path
from types import TracebackType
from typing import Any, Literal

import aiosqlite
from loguru import logger

from boothdb.errors import StorageError
from boothdb.storage.schema import split_statements


class StoreSession:
    """
    Async connection to the store with explicit transaction control.

    The connection runs with ``isolation_level=None`` so the sqlite3 module
    never opens or commits transactions on its own; every write that must
    be atomic goes through ``transaction()``, which issues BEGIN IMMEDIATE,
    COMMIT and ROLLBACK itself. DDL statements therefore roll back together
    with the DML around them.
    """

    def __init__(
        self,
        db_path: Path | str,
        *,
        busy_timeout_seconds: float = 5.0,
        commit_timeout_seconds: float = 30.0,
        journal_mode: Literal["wal", "delete"] = "wal",
    ) -> None:
        """
        Initialize StoreSession.

        Args:
            db_path: Path to SQLite database file.
            busy_timeout_seconds: How long SQLite waits on a locked database.
            commit_timeout_seconds: Upper bound on a single COMMIT.
            journal_mode: SQLite journal mode applied on open.
        """
        self.db_path = Path(db_path)
        self.busy_timeout_seconds = busy_timeout_seconds
        self.commit_timeout_seconds = commit_timeout_seconds
        self.journal_mode = journal_mode
        self._conn: aiosqlite.Connection | None = None

    async def open(self) -> None:
        """
        Open the connection and apply connection pragmas.

        Creates the database file and its directory if missing.
        """
        if self._conn is not None:
            return

        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._conn = await aiosqlite.connect(
            self.db_path,
            timeout=self.busy_timeout_seconds,
            isolation_level=None,
        )

        self._conn.row_factory = aiosqlite.Row
        await self._conn.execute("PRAGMA foreign_keys = ON")
        await self._conn.execute(f"PRAGMA journal_mode = {self.journal_mode}")

        logger.debug("Store session opened: {}", self.db_path)

    async def close(self) -> None:
        """Close the connection. An open transaction is rolled back by SQLite."""
        if self._conn:
            await self._conn.close()
            self._conn = None

    async def __aenter__(self) -> "StoreSession":
        await self.open()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    def _get_conn(self) -> aiosqlite.Connection:
        """Get database connection, raising if not opened."""
        if not self._conn:
            raise StorageError("Store session is not open")
        return self._conn

    @property
    def in_transaction(self) -> bool:
        """Whether a transaction is currently open on this session."""
        return self._conn is not None and self._conn.in_transaction

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator["StoreSession"]:
        """
        Context manager for an explicit write transaction.

        Commits on success, rolls back on any exception (including
        cancellation). Nested transactions are rejected.

        Raises:
            StorageError: If a transaction is already open, or COMMIT timed
                out and the transaction was rolled back.
        """
        conn = self._get_conn()
        if conn.in_transaction:
            raise StorageError("A transaction is already open on this session")

        await conn.execute("BEGIN IMMEDIATE")
        try:
            yield self
        except BaseException:
            await conn.rollback()
            raise

        try:
            await asyncio.wait_for(conn.execute("COMMIT"), timeout=self.commit_timeout_seconds)
        except TimeoutError as e:
            # The COMMIT may still run on the connection thread; queue behind it
            await conn.execute("SELECT 1")
            if not conn.in_transaction:
                logger.warning(
                    "COMMIT completed after its {}s timeout", self.commit_timeout_seconds
                )
                return
            await conn.rollback()
            raise StorageError(
                f"COMMIT did not complete within {self.commit_timeout_seconds}s"
            ) from e
        except BaseException:
            await conn.rollback()
            raise

    async def execute(self, sql: str, params: list[Any] | None = None) -> aiosqlite.Cursor:
        """Execute a SQL statement."""
        conn = self._get_conn()
        return await conn.execute(sql, params or [])

    async def execute_script(self, script: str) -> int:
        """
        Execute a multi-statement script statement by statement.

        Unlike ``executescript``, this never commits a pending transaction,
        so it is safe to call inside ``transaction()``.

        Returns:
            Number of statements executed.
        """
        statements = split_statements(script)
        for statement in statements:
            await self.execute(statement)
        return len(statements)

    async def fetchone(self, sql: str, params: list[Any] | None = None) -> aiosqlite.Row | None:
        """Execute query and fetch one row."""
        cursor = await self.execute(sql, params)
        return await cursor.fetchone()

    async def fetchall(self, sql: str, params: list[Any] | None = None) -> list[aiosqlite.Row]:
        """Execute query and fetch all rows."""
        cursor = await self.execute(sql, params)
        result = await cursor.fetchall()
        return list(result) if result else []
