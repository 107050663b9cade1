"""Add Theme column to Templates table."""

from typing import TYPE_CHECKING

from boothdb.storage.schema import column_exists

if TYPE_CHECKING:
    from boothdb.ports.db_session import DbSessionPort

VERSION = 2
DESCRIPTION = "Add Templates.Theme"

MIGRATION_SQL = "ALTER TABLE Templates ADD COLUMN Theme TEXT NOT NULL DEFAULT 'Default'"


async def apply_migration(db: "DbSessionPort") -> None:
    """Apply v002 migration: add Theme to Templates."""
    if not await column_exists(db, "Templates", "Theme"):
        await db.execute(MIGRATION_SQL)
