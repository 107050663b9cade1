"""Data models for boothdb."""

from boothdb.models.migration import (
    AppliedStep,
    MigrationRunResult,
    MigrationState,
    RunStatus,
    SchemaVersion,
    StepOutcome,
)

__all__ = [
    "AppliedStep",
    "MigrationRunResult",
    "MigrationState",
    "RunStatus",
    "SchemaVersion",
    "StepOutcome",
]
