"""
Schema migrations for the kiosk store.

Each ``vNNN_*`` module describes one step. Shipped steps are never
edited; a schema change is a new module appended to CATALOG, together
with the matching change in ``boothdb.storage.fresh_schema``.
"""

from boothdb.storage.migrations import (
    v001_baseline,
    v002_template_theme,
    v003_user_activity,
    v004_photo_area_border_radius,
    v005_display_theme_setting,
)
from boothdb.storage.migrations.catalog import MigrationCatalog, MigrationStep

CATALOG = MigrationCatalog(
    MigrationStep.from_module(module)
    for module in (
        v001_baseline,
        v002_template_theme,
        v003_user_activity,
        v004_photo_area_border_radius,
        v005_display_theme_setting,
    )
)

EXPECTED_VERSION = CATALOG.expected_version()

__all__ = ["CATALOG", "EXPECTED_VERSION", "MigrationCatalog", "MigrationStep"]
