"""Tests for VersionStore."""

from datetime import UTC, datetime

import pytest

from boothdb.errors import StorageError, VersionReadError
from boothdb.storage.session import StoreSession
from boothdb.storage.version_store import LEGACY_VERSION, VersionStore


class TestGetVersion:
    """Tests for reading the version marker."""

    @pytest.mark.asyncio
    async def test_missing_table_is_legacy(self, session: StoreSession) -> None:
        """A store without the version table reports the legacy version."""
        await session.execute("CREATE TABLE Settings (Id TEXT PRIMARY KEY)")
        assert await VersionStore(session).get_version() == LEGACY_VERSION == 1

    @pytest.mark.asyncio
    async def test_empty_table_is_legacy(self, session: StoreSession) -> None:
        """An empty version table also reports the legacy version."""
        await session.execute(
            "CREATE TABLE DatabaseVersion (Id INTEGER PRIMARY KEY, Version INTEGER NOT NULL, "
            "UpdatedAt TEXT NOT NULL)"
        )
        store = VersionStore(session)
        assert await store.get_version() == LEGACY_VERSION
        assert await store.get_record() is None

    @pytest.mark.asyncio
    async def test_highest_id_is_authoritative(self, session: StoreSession, clock) -> None:  # noqa: ANN001
        """The most recently inserted row wins."""
        store = VersionStore(session, clock=clock)
        async with session.transaction():
            await store.set_version(2)
        async with session.transaction():
            await store.set_version(3)

        assert await store.get_version() == 3
        history = await store.history()
        assert [r.version for r in history] == [2, 3]

    @pytest.mark.asyncio
    async def test_corrupt_version_raises(self, session: StoreSession) -> None:
        """A non-integer version is never silently defaulted."""
        await session.execute(
            "CREATE TABLE DatabaseVersion (Id INTEGER PRIMARY KEY, Version, UpdatedAt TEXT)"
        )
        await session.execute(
            "INSERT INTO DatabaseVersion (Version, UpdatedAt) VALUES ('three', '2024-01-01')"
        )

        with pytest.raises(VersionReadError, match="Corrupt schema version value"):
            await VersionStore(session).get_version()

    @pytest.mark.asyncio
    async def test_negative_version_raises(self, session: StoreSession) -> None:
        """A negative version is corrupt."""
        await session.execute(
            "CREATE TABLE DatabaseVersion (Id INTEGER PRIMARY KEY, Version INTEGER, UpdatedAt TEXT)"
        )
        await session.execute(
            "INSERT INTO DatabaseVersion (Version, UpdatedAt) VALUES (-2, '2024-01-01')"
        )

        with pytest.raises(VersionReadError):
            await VersionStore(session).get_version()

    @pytest.mark.asyncio
    async def test_corrupt_timestamp_raises(self, session: StoreSession) -> None:
        """An unparseable timestamp is corrupt."""
        await session.execute(
            "CREATE TABLE DatabaseVersion (Id INTEGER PRIMARY KEY, Version INTEGER, UpdatedAt TEXT)"
        )
        await session.execute(
            "INSERT INTO DatabaseVersion (Version, UpdatedAt) VALUES (2, 'yesterday')"
        )

        with pytest.raises(VersionReadError, match="timestamp"):
            await VersionStore(session).get_record()

    @pytest.mark.asyncio
    async def test_unreadable_table_raises(self, session: StoreSession) -> None:
        """A version table missing its columns surfaces as VersionReadError."""
        await session.execute("CREATE TABLE DatabaseVersion (Id INTEGER PRIMARY KEY)")

        with pytest.raises(VersionReadError, match="Failed to read"):
            await VersionStore(session).get_version()

    @pytest.mark.asyncio
    async def test_naive_timestamp_treated_as_utc(self, session: StoreSession) -> None:
        """Timestamps without an offset are read as UTC."""
        await session.execute(
            "CREATE TABLE DatabaseVersion (Id INTEGER PRIMARY KEY, Version INTEGER, UpdatedAt TEXT)"
        )
        await session.execute(
            "INSERT INTO DatabaseVersion (Version, UpdatedAt) VALUES (2, '2024-03-01 12:00:00')"
        )

        record = await VersionStore(session).get_record()
        assert record is not None
        assert record.updated_at == datetime(2024, 3, 1, 12, 0, tzinfo=UTC)


class TestSetVersion:
    """Tests for recording a version."""

    @pytest.mark.asyncio
    async def test_writes_version_and_timestamp_together(
        self, session: StoreSession, clock  # noqa: ANN001
    ) -> None:
        """set_version records the version with the clock's timestamp."""
        store = VersionStore(session, clock=clock)
        async with session.transaction():
            record = await store.set_version(4)

        assert record.version == 4
        assert record.updated_at == datetime(2024, 3, 1, 12, 0, 0, tzinfo=UTC)
        assert await store.get_record() == record

    @pytest.mark.asyncio
    async def test_requires_transaction(self, session: StoreSession) -> None:
        """The marker can only be written inside the migration transaction."""
        with pytest.raises(StorageError, match="inside the migration transaction"):
            await VersionStore(session).set_version(2)

    @pytest.mark.asyncio
    async def test_rejects_negative_version(self, session: StoreSession) -> None:
        """Negative versions are rejected before touching the store."""
        async with session.transaction():
            with pytest.raises(ValueError):
                await VersionStore(session).set_version(-1)

    @pytest.mark.asyncio
    async def test_rolled_back_with_transaction(self, session: StoreSession) -> None:
        """A rolled-back transaction leaves no version row or table behind."""
        store = VersionStore(session)
        with pytest.raises(RuntimeError):
            async with session.transaction():
                await store.set_version(2)
                raise RuntimeError("step failed after marker")

        assert await store.get_record() is None
        assert await store.history() == []
