"""Reference rows and default settings for a new store."""

from loguru import logger

from boothdb.ports.db_session import DbSessionPort
from boothdb.storage.settings import SettingsStore
from boothdb.storage.version_store import Clock

# Explicit ids keep every insert idempotent under INSERT OR IGNORE.
REFERENCE_DATA = """
INSERT OR IGNORE INTO ProductCategories (Id, Name, Description, SortOrder) VALUES
    (1, 'Strips', '4-photo strip prints', 1),
    (2, '4x6', 'Single 4x6 photo prints', 2),
    (3, 'Smartphone', 'Customer phone photo prints', 3);

INSERT OR IGNORE INTO Products (Id, CategoryId, Name, Description, Price, PhotoCount, ProductType) VALUES
    (1, 1, 'Photo Strip', '4 photos in classic strip format', 5.00, 4, 'PhotoStrips'),
    (2, 2, '4x6 Photo', 'Single high-quality 4x6 print', 3.00, 1, 'Photo4x6'),
    (3, 3, 'Phone Print', 'Print photos from your phone', 2.00, 1, 'SmartphonePrint');

INSERT OR IGNORE INTO TemplateCategories
    (Id, Name, Description, SortOrder, IsSeasonalCategory, SeasonStartDate, SeasonEndDate, SeasonalPriority)
VALUES
    (1, 'Classic', 'Timeless template designs', 1, 0, NULL, NULL, 0),
    (2, 'Fun', 'Colorful and playful templates', 2, 0, NULL, NULL, 0),
    (3, 'Elegant', 'Sophisticated template designs', 3, 0, NULL, NULL, 0),
    (4, 'Premium', 'High-end template designs', 4, 0, NULL, NULL, 0),
    (5, 'New Year', 'New Year celebration and party templates', 10, 1, '12-26', '01-07', 95),
    (6, 'Valentine''s Day', 'Love and romance themed templates', 11, 1, '02-01', '02-15', 100),
    (7, 'Easter', 'Spring and Easter celebration templates', 14, 1, '03-15', '04-15', 90),
    (8, 'Fourth of July', 'Independence Day and patriotic templates', 17, 1, '06-25', '07-05', 90),
    (9, 'Summer', 'Bright and sunny summer templates', 18, 1, '06-01', '08-31', 70),
    (10, 'Halloween', 'Spooky and fun Halloween templates', 20, 1, '10-01', '10-31', 85),
    (11, 'Thanksgiving', 'Thanksgiving and autumn harvest templates', 21, 1, '11-01', '11-30', 80),
    (12, 'Christmas', 'Holiday and winter celebration templates', 22, 1, '12-01', '12-26', 95);

INSERT OR IGNORE INTO TemplateLayouts
    (Id, LayoutKey, Name, Description, Width, Height, PhotoCount, ProductCategoryId, SortOrder)
VALUES
    ('550e8400-e29b-41d4-a716-446655440001', 'strip-591x1772', 'Compact Photo Strip', 'Compact 4-photo vertical strip layout', 591, 1772, 4, 1, 2),
    ('550e8400-e29b-41d4-a716-446655440003', '4x6-1864x1228', 'Standard 4x6', 'Single photo 4x6 print layout', 1864, 1228, 1, 2, 1),
    ('550e8400-e29b-41d4-a716-446655440004', 'strip-1080x1920', 'Compact Photo Strip', 'Compact 3-photo vertical strip layout', 1080, 1920, 3, 1, 2);

INSERT OR IGNORE INTO TemplatePhotoAreas (LayoutId, PhotoIndex, X, Y, Width, Height, Rotation) VALUES
    ('550e8400-e29b-41d4-a716-446655440001', 1, 61, 130, 473, 354, 0),
    ('550e8400-e29b-41d4-a716-446655440001', 2, 61, 515, 473, 354, 0),
    ('550e8400-e29b-41d4-a716-446655440001', 3, 61, 903, 473, 354, 0),
    ('550e8400-e29b-41d4-a716-446655440001', 4, 61, 1290, 473, 354, 0),
    ('550e8400-e29b-41d4-a716-446655440003', 1, 433, 200, 952, 715, 0),
    ('550e8400-e29b-41d4-a716-446655440004', 1, 249, 5, 582, 459, 0),
    ('550e8400-e29b-41d4-a716-446655440004', 2, 249, 492, 582, 459, 0),
    ('550e8400-e29b-41d4-a716-446655440004', 3, 249, 981, 582, 459, 0);

INSERT OR IGNORE INTO HardwareStatus (ComponentName, Status) VALUES
    ('Camera', 'Online'),
    ('Printer', 'Offline'),
    ('Arduino', 'Online'),
    ('TouchScreen', 'Online'),
    ('RFID Reader', 'Online');

INSERT OR IGNORE INTO PrintSupplies (Id, SupplyType, TotalCapacity, CurrentCount, LowThreshold, CriticalThreshold) VALUES
    (1, 'Paper', 700, 650, 100, 50),
    (2, 'Ink', 700, 650, 100, 50);

INSERT OR IGNORE INTO BusinessInfo (Id, BusinessName, ShowLogoOnPrints) VALUES
    ('550e8400-e29b-41d4-a716-446655440001', 'PhotoboothX', 1);
"""

# (category, key, value, data type, description)
DEFAULT_SETTINGS: list[tuple[str, str, str, str, str]] = [
    ("System", "Volume", "75", "Integer", "Audio volume level (0-100)"),
    ("System", "LightsEnabled", "true", "Boolean", "Enable camera flash lights"),
    ("Payment", "PulsesPerCredit", "1", "Integer", "Arduino pulses required per $1 credit"),
    ("System", "Mode", "Coin", "String", "Operating mode: Coin or Free"),
    ("RFID", "Enabled", "true", "Boolean", "Enable RFID roll detection"),
    (
        "Seasonal",
        "AutoTemplates",
        "true",
        "Boolean",
        "Automatically enable/disable seasonal templates",
    ),
]

DISPLAY_THEME_SETTING = ("Display", "Theme", "Default", "String", "Kiosk display theme")


async def insert_reference_data(session: DbSessionPort) -> int:
    """
    Insert the reference rows every store starts with.

    Only names columns present in the baseline schema, so it works
    against both the baseline and the latest structure.

    Returns:
        Number of statements executed.
    """
    count = await session.execute_script(REFERENCE_DATA)
    logger.debug("Reference data inserted ({} statements)", count)
    return count


async def insert_default_settings(session: DbSessionPort, clock: Clock | None = None) -> int:
    """
    Insert default kiosk settings that are not already present.

    Returns:
        Number of settings inserted.
    """
    store = SettingsStore(session, clock=clock)
    inserted = 0
    for category, key, value, data_type, description in [
        *DEFAULT_SETTINGS,
        DISPLAY_THEME_SETTING,
    ]:
        if await store.insert_if_missing(
            category, key, value, description=description, data_type=data_type
        ):
            inserted += 1
    logger.info("Default settings created: {}", inserted)
    return inserted
