"""Create UserActivity table for admin audit entries."""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from boothdb.ports.db_session import DbSessionPort

VERSION = 3
DESCRIPTION = "Create UserActivity"

MIGRATION_SQL = """
CREATE TABLE IF NOT EXISTS UserActivity (
    Id INTEGER PRIMARY KEY AUTOINCREMENT,
    UserId TEXT,
    ActivityType TEXT NOT NULL,
    Description TEXT,
    CreatedAt DATETIME NOT NULL DEFAULT CURRENT_TIMESTAMP,
    FOREIGN KEY (UserId) REFERENCES AdminUsers(UserId)
);

CREATE INDEX IF NOT EXISTS idx_user_activity_user ON UserActivity(UserId);
CREATE INDEX IF NOT EXISTS idx_user_activity_created ON UserActivity(CreatedAt);
"""


async def apply_migration(db: "DbSessionPort") -> None:
    """Apply v003 migration: create UserActivity and its indexes."""
    await db.execute_script(MIGRATION_SQL)
