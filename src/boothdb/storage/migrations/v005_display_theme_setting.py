"""Seed the Display/Theme setting on existing stores."""

from typing import TYPE_CHECKING

from boothdb.storage.seed import DISPLAY_THEME_SETTING
from boothdb.storage.settings import SettingsStore

if TYPE_CHECKING:
    from boothdb.ports.db_session import DbSessionPort

VERSION = 5
DESCRIPTION = "Add Display/Theme setting"


async def apply_migration(db: "DbSessionPort") -> None:
    """Apply v005 migration: insert Display/Theme unless an operator already set it."""
    category, key, value, data_type, description = DISPLAY_THEME_SETTING
    await SettingsStore(db).insert_if_missing(
        category, key, value, description=description, data_type=data_type
    )
