"""Add BorderRadius column to TemplatePhotoAreas table."""

from typing import TYPE_CHECKING

from boothdb.storage.schema import column_exists

if TYPE_CHECKING:
    from boothdb.ports.db_session import DbSessionPort

VERSION = 4
DESCRIPTION = "Add TemplatePhotoAreas.BorderRadius"

MIGRATION_SQL = (
    "ALTER TABLE TemplatePhotoAreas ADD COLUMN BorderRadius INTEGER NOT NULL DEFAULT 0"
)


async def apply_migration(db: "DbSessionPort") -> None:
    """Apply v004 migration: add BorderRadius to TemplatePhotoAreas."""
    if not await column_exists(db, "TemplatePhotoAreas", "BorderRadius"):
        await db.execute(MIGRATION_SQL)
