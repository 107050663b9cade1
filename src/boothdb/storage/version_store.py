"""Persisted schema version marker."""

import sqlite3
from collections.abc import Callable
from datetime import UTC, datetime

from loguru import logger

from boothdb.errors import StorageError, VersionReadError
from boothdb.models.migration import SchemaVersion
from boothdb.ports.db_session import DbSessionPort
from boothdb.storage.schema import table_exists

VERSION_TABLE = "DatabaseVersion"

# Stores created before version tracking carry the baseline schema.
LEGACY_VERSION = 1

VERSION_TABLE_DDL = """
CREATE TABLE IF NOT EXISTS DatabaseVersion (
    Id INTEGER PRIMARY KEY,
    Version INTEGER NOT NULL,
    UpdatedAt TEXT NOT NULL
)
"""

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(UTC)


class VersionStore:
    """
    Single source of truth for the store's schema version.

    The version lives in an append-only ``DatabaseVersion`` log inside
    the store itself; the row with the highest Id is authoritative.
    """

    def __init__(self, session: DbSessionPort, clock: Clock | None = None) -> None:
        self._session = session
        self._clock = clock or utc_now

    async def get_version(self) -> int:
        """
        Return the current schema version.

        Returns LEGACY_VERSION when the store pre-dates version tracking
        (no version table, or an empty one).

        Raises:
            VersionReadError: If the record cannot be read or is corrupt.
        """
        record = await self.get_record()
        if record is None:
            return LEGACY_VERSION
        return record.version

    async def get_record(self) -> SchemaVersion | None:
        """
        Return the authoritative version row, or None if there is none.

        Raises:
            VersionReadError: If the record cannot be read or is corrupt.
        """
        try:
            if not await table_exists(self._session, VERSION_TABLE):
                return None
            row = await self._session.fetchone(
                "SELECT Id, Version, UpdatedAt FROM DatabaseVersion ORDER BY Id DESC LIMIT 1"
            )
        except sqlite3.Error as e:
            raise VersionReadError(f"Failed to read schema version: {e}") from e

        if row is None:
            return None
        return self._row_to_version(row)

    async def history(self) -> list[SchemaVersion]:
        """Return every version row, oldest first."""
        try:
            if not await table_exists(self._session, VERSION_TABLE):
                return []
            rows = await self._session.fetchall(
                "SELECT Id, Version, UpdatedAt FROM DatabaseVersion ORDER BY Id ASC"
            )
        except sqlite3.Error as e:
            raise VersionReadError(f"Failed to read schema version history: {e}") from e
        return [self._row_to_version(row) for row in rows]

    async def set_version(self, version: int) -> SchemaVersion:
        """
        Record ``version`` with the current timestamp.

        Must be called inside the transaction that applied the schema
        change, so the marker commits or rolls back together with it.

        Raises:
            ValueError: If version is negative.
            StorageError: If no transaction is open.
        """
        if version < 0:
            raise ValueError(f"Schema version must be >= 0, got {version}")
        if not self._session.in_transaction:
            raise StorageError("set_version must run inside the migration transaction")

        updated_at = self._clock()
        await self._session.execute(VERSION_TABLE_DDL)
        cursor = await self._session.execute(
            "INSERT INTO DatabaseVersion (Version, UpdatedAt) VALUES (?, ?)",
            [version, updated_at.isoformat()],
        )
        logger.debug("Schema version marker set to {}", version)
        return SchemaVersion(id=cursor.lastrowid, version=version, updated_at=updated_at)

    @staticmethod
    def _row_to_version(row: sqlite3.Row) -> SchemaVersion:
        version, updated_at = row[1], row[2]
        if not isinstance(version, int) or isinstance(version, bool) or version < 0:
            raise VersionReadError(f"Corrupt schema version value: {version!r}")
        try:
            timestamp = datetime.fromisoformat(str(updated_at))
        except ValueError as e:
            raise VersionReadError(f"Corrupt schema version timestamp: {updated_at!r}") from e
        if timestamp.tzinfo is None:
            timestamp = timestamp.replace(tzinfo=UTC)
        return SchemaVersion(id=row[0], version=version, updated_at=timestamp)
