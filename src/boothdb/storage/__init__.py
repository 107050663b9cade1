"""Storage layer for the kiosk store."""

from boothdb.storage.session import StoreSession
from boothdb.storage.settings import SettingsStore
from boothdb.storage.version_store import LEGACY_VERSION, VersionStore

__all__ = [
    "LEGACY_VERSION",
    "SettingsStore",
    "StoreSession",
    "VersionStore",
]
