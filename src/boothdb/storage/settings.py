"""Typed key/value access to the Settings table."""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any
from uuid import uuid4

from loguru import logger

from boothdb.errors import StorageError
from boothdb.ports.db_session import DbSessionPort
from boothdb.storage.version_store import Clock, utc_now

DATA_TYPES = ("String", "Integer", "Boolean", "Decimal")


@dataclass
class Setting:
    """One row of the Settings table."""

    id: str
    category: str
    key: str
    value: str
    data_type: str
    description: str | None
    is_user_editable: bool
    updated_by: str | None


def data_type_for(value: Any) -> str:
    """Map a Python value to the DataType label stored with it."""
    # bool before int: bool is an int subclass
    if isinstance(value, bool):
        return "Boolean"
    if isinstance(value, int):
        return "Integer"
    if isinstance(value, (Decimal, float)):
        return "Decimal"
    return "String"


def encode_value(value: Any) -> str:
    """Render a value the way the Settings table stores it."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return ""
    return str(value)


def decode_value(raw: str, data_type: str) -> Any:
    """
    Convert a stored setting back to its Python type.

    Raises:
        StorageError: If the stored text does not parse as its DataType.
    """
    try:
        if data_type == "Integer":
            return int(raw)
        if data_type == "Boolean":
            lowered = raw.strip().lower()
            if lowered not in ("true", "false", "1", "0"):
                raise ValueError(raw)
            return lowered in ("true", "1")
        if data_type == "Decimal":
            return Decimal(raw)
    except (ValueError, InvalidOperation) as e:
        raise StorageError(f"Setting value {raw!r} is not a valid {data_type}") from e
    return raw


class SettingsStore:
    """
    Settings accessor used by the rest of the kiosk.

    Works on an already-migrated store; migration steps and the
    bootstrapper also use it to seed settings inside their transaction.
    """

    def __init__(self, session: DbSessionPort, clock: Clock | None = None) -> None:
        self._session = session
        self._clock = clock or utc_now

    async def get_value(self, category: str, key: str, default: Any = None) -> Any:
        """Return the typed value of a setting, or ``default`` if absent or empty."""
        row = await self._session.fetchone(
            "SELECT Value, DataType FROM Settings WHERE Category = ? AND Key = ?",
            [category, key],
        )
        if row is None or row[0] in (None, ""):
            return default
        return decode_value(row[0], row[1])

    async def get_category(self, category: str) -> list[Setting]:
        """Return all settings in a category, ordered by key."""
        rows = await self._session.fetchall(
            """
            SELECT Id, Category, Key, Value, DataType, Description, IsUserEditable, UpdatedBy
            FROM Settings WHERE Category = ? ORDER BY Key
            """,
            [category],
        )
        return [
            Setting(
                id=row[0],
                category=row[1],
                key=row[2],
                value=row[3],
                data_type=row[4],
                description=row[5],
                is_user_editable=bool(row[6]),
                updated_by=row[7],
            )
            for row in rows
        ]

    async def set_value(
        self, category: str, key: str, value: Any, updated_by: str | None = None
    ) -> None:
        """Insert or update a setting; its DataType follows the Python type of ``value``."""
        await self._session.execute(
            """
            INSERT INTO Settings (Id, Category, Key, Value, DataType, IsUserEditable, UpdatedAt, UpdatedBy)
            VALUES (?, ?, ?, ?, ?, 1, ?, ?)
            ON CONFLICT (Category, Key) DO UPDATE SET
                Value = excluded.Value,
                DataType = excluded.DataType,
                UpdatedAt = excluded.UpdatedAt,
                UpdatedBy = excluded.UpdatedBy
            """,
            [
                str(uuid4()),
                category,
                key,
                encode_value(value),
                data_type_for(value),
                self._timestamp(),
                updated_by,
            ],
        )
        logger.info("Setting updated: {}.{} by {}", category, key, updated_by or "system")

    async def insert_if_missing(
        self,
        category: str,
        key: str,
        value: Any,
        description: str | None = None,
        data_type: str | None = None,
        is_user_editable: bool = True,
    ) -> bool:
        """
        Insert a default setting unless one already exists.

        Returns:
            True if a row was inserted.
        """
        data_type = data_type or data_type_for(value)
        if data_type not in DATA_TYPES:
            raise ValueError(f"Unknown setting data type: {data_type}")

        cursor = await self._session.execute(
            """
            INSERT OR IGNORE INTO Settings
                (Id, Category, Key, Value, DataType, Description, IsUserEditable, UpdatedAt)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            [
                str(uuid4()),
                category,
                key,
                encode_value(value),
                data_type,
                description,
                int(is_user_editable),
                self._timestamp(),
            ],
        )
        return cursor.rowcount > 0

    def _timestamp(self) -> str:
        return self._clock().strftime("%Y-%m-%d %H:%M:%S")
