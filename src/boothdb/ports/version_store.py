"""Port interface for schema version persistence."""

from typing import Protocol

from boothdb.models.migration import SchemaVersion


class VersionStorePort(Protocol):
    """Protocol for reading and advancing the schema version marker."""

    async def get_version(self) -> int:
        """Return the authoritative schema version."""
        ...

    async def get_record(self) -> SchemaVersion | None:
        """Return the authoritative version row, if one exists."""
        ...

    async def set_version(self, version: int) -> SchemaVersion:
        """Record a new version inside the caller's open transaction."""
        ...
