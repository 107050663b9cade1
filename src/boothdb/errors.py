"""boothdb error types.

All custom exceptions inherit from BoothDBError to allow
catching any boothdb-specific error.
"""

from pathlib import Path


class BoothDBError(Exception):
    """Base exception for all boothdb errors."""

    pass


class ConfigurationError(BoothDBError):
    """Invalid configuration."""

    pass


class CatalogError(ConfigurationError):
    """Migration catalog is malformed (duplicate or out-of-order versions)."""

    pass


class StorageError(BoothDBError):
    """Database or storage operation failed."""

    pass


class MigrationError(BoothDBError):
    """Base class for failures that stop the store from reaching the expected version."""

    pass


class LockTimeoutError(MigrationError):
    """Another process held the migration lock past the wait bound."""

    def __init__(self, lock_path: Path, timeout_seconds: float) -> None:
        super().__init__(
            f"Could not acquire migration lock {lock_path} within {timeout_seconds}s"
        )
        self.lock_path = lock_path
        self.timeout_seconds = timeout_seconds


class StepExecutionError(MigrationError):
    """A migration step raised; its transaction was rolled back."""

    def __init__(self, message: str, target_version: int, description: str) -> None:
        super().__init__(message)
        self.target_version = target_version
        self.description = description


class BootstrapError(MigrationError):
    """Fresh store creation failed; no version was recorded."""

    pass


class VersionReadError(MigrationError):
    """The version record is unreadable or corrupt."""

    pass


class AheadOfCodeError(MigrationError):
    """The store is newer than this build and ahead-of-code stores are refused."""

    def __init__(self, current_version: int, expected_version: int) -> None:
        super().__init__(
            f"Store schema version {current_version} is ahead of "
            f"expected version {expected_version}"
        )
        self.current_version = current_version
        self.expected_version = expected_version
