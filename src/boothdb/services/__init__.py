"""Startup migration services."""

from boothdb.services.bootstrapper import Bootstrapper
from boothdb.services.migration_lock import MigrationLock
from boothdb.services.runner import MigrationPlan, MigrationRunner
from boothdb.services.startup_gate import StartupGate

__all__ = [
    "Bootstrapper",
    "MigrationLock",
    "MigrationPlan",
    "MigrationRunner",
    "StartupGate",
]
