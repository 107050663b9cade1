"""Startup entry point: no store session is handed out before this passes."""

import sqlite3
from collections.abc import Callable
from pathlib import Path
from typing import Literal

from loguru import logger

from boothdb.config.models import Config, MigrationConfig
from boothdb.errors import BootstrapError, LockTimeoutError, StorageError
from boothdb.models.migration import MigrationRunResult, MigrationState, RunStatus
from boothdb.services.bootstrapper import Bootstrapper
from boothdb.services.migration_lock import MigrationLock
from boothdb.services.runner import MigrationPlan, MigrationRunner
from boothdb.storage import fresh_schema
from boothdb.storage.migrations import CATALOG
from boothdb.storage.migrations.catalog import MigrationCatalog
from boothdb.storage.schema import store_exists
from boothdb.storage.session import StoreSession
from boothdb.storage.version_store import Clock, VersionStore

_SIDECAR_SUFFIXES = ("-wal", "-shm", "-journal")


class StartupGate:
    """
    Runs the migration runner exactly once per start, under the migration lock.

    The application calls ``initialize()`` before opening any other
    session on the store and refuses to continue when the result is
    FAILED.
    """

    def __init__(
        self,
        db_path: Path,
        *,
        catalog: MigrationCatalog | None = None,
        migration_config: MigrationConfig | None = None,
        busy_timeout_seconds: float = 5.0,
        journal_mode: Literal["wal", "delete"] = "wal",
        clock: Clock | None = None,
        schema_sql: str = fresh_schema.SCHEMA,
        schema_version: int = fresh_schema.SCHEMA_VERSION,
        seed_data: bool = True,
    ) -> None:
        """
        Initialize StartupGate.

        Args:
            db_path: Store file path.
            catalog: Migration steps. Defaults to the shipped catalog.
            migration_config: Lock and timeout settings.
            busy_timeout_seconds: SQLite busy timeout for the session.
            journal_mode: SQLite journal mode for the session.
            clock: Timestamp source for version rows and seeded settings.
            schema_sql: Fresh-install schema script.
            schema_version: Version the fresh-install script produces.
            seed_data: Insert reference rows and default settings on fresh install.
        """
        self.db_path = Path(db_path)
        self.catalog = catalog if catalog is not None else CATALOG
        self.migration_config = migration_config or MigrationConfig()
        self.busy_timeout_seconds = busy_timeout_seconds
        self.journal_mode = journal_mode
        self._clock = clock
        self._schema_sql = schema_sql
        self._schema_version = schema_version
        self._seed_data = seed_data

    @classmethod
    def from_config(
        cls,
        config: Config,
        catalog: MigrationCatalog | None = None,
        clock: Clock | None = None,
    ) -> "StartupGate":
        """Build a gate for the store described by ``config``."""
        return cls(
            config.store.database_path,
            catalog=catalog,
            migration_config=config.migrations,
            busy_timeout_seconds=config.store.busy_timeout_seconds,
            journal_mode=config.store.journal_mode,
            clock=clock,
        )

    def open_session(self) -> StoreSession:
        """Create a session on the store with this gate's connection settings."""
        return StoreSession(
            self.db_path,
            busy_timeout_seconds=self.busy_timeout_seconds,
            commit_timeout_seconds=self.migration_config.commit_timeout_seconds,
            journal_mode=self.journal_mode,
        )

    async def initialize(self) -> MigrationRunResult:
        """
        Bring the store to the expected schema version.

        Returns:
            The run result. Failures are reported through it, never raised.
        """
        cfg = self.migration_config
        expected = self.catalog.expected_version()
        lock = MigrationLock(self.db_path, stale_seconds=cfg.lock_stale_seconds)

        logger.info("Checking store schema: {} (expected version {})", self.db_path, expected)
        try:
            await lock.acquire(cfg.lock_timeout_seconds, cfg.lock_poll_interval_seconds)
        except LockTimeoutError as e:
            logger.error("{}; another instance may be migrating this store", e)
            return MigrationRunResult(
                status=RunStatus.FAILED, final_version=0, expected_version=expected, error=e
            )

        try:
            store_file_existed = self.db_path.exists()
            result = await self._run(lock)
            if (
                result.status == RunStatus.FAILED
                and isinstance(result.error, BootstrapError)
                and not store_file_existed
            ):
                self._remove_store_files()
        finally:
            lock.release()

        self._log_result(result)
        return result

    async def plan(self) -> MigrationPlan:
        """Describe what ``initialize()`` would do, without writing."""
        if not self.db_path.exists():
            return MigrationPlan(MigrationState.FRESH, 0, self.catalog.expected_version())
        async with self.open_session() as session:
            return await self._runner(session, heartbeat=None).plan()

    async def current_schema_version(self) -> int:
        """
        Return the store's schema version without changing anything.

        Returns 0 when there is no store yet.
        """
        if not self.db_path.exists():
            return 0
        async with self.open_session() as session:
            if not await store_exists(session):
                return 0
            return await VersionStore(session).get_version()

    async def _run(self, lock: MigrationLock) -> MigrationRunResult:
        session = self.open_session()
        try:
            await session.open()
        except (sqlite3.Error, OSError) as e:
            await session.close()
            error = StorageError(f"Cannot open store {self.db_path}: {e}")
            error.__cause__ = e
            return MigrationRunResult(
                status=RunStatus.FAILED,
                final_version=0,
                expected_version=self.catalog.expected_version(),
                error=error,
            )

        try:
            async with lock.keep_fresh():
                return await self._runner(session, heartbeat=lock.heartbeat).run()
        finally:
            await session.close()

    def _runner(
        self, session: StoreSession, heartbeat: Callable[[], None] | None
    ) -> MigrationRunner:
        version_store = VersionStore(session, clock=self._clock)
        bootstrapper = Bootstrapper(
            session,
            version_store,
            self.catalog.expected_version(),
            schema_sql=self._schema_sql,
            schema_version=self._schema_version,
            seed_data=self._seed_data,
            clock=self._clock,
        )
        return MigrationRunner(
            session,
            self.catalog,
            version_store,
            bootstrapper,
            step_timeout_seconds=self.migration_config.step_timeout_seconds,
            allow_ahead_of_code=self.migration_config.allow_ahead_of_code,
            heartbeat=heartbeat,
        )

    def _remove_store_files(self) -> None:
        """Delete a store file this run created but could not bootstrap."""
        for path in [self.db_path, *(Path(f"{self.db_path}{s}") for s in _SIDECAR_SUFFIXES)]:
            try:
                path.unlink()
            except FileNotFoundError:
                continue
            logger.info("Removed partially created store file: {}", path)

    def _log_result(self, result: MigrationRunResult) -> None:
        if result.status != RunStatus.FAILED:
            logger.info(
                "Store ready: {} (version {}, expected {})",
                result.status,
                result.final_version,
                result.expected_version,
            )
            return

        failed = result.failed_step
        if failed:
            logger.error(
                "Store migration failed at version {} ({}); store left at version {}",
                failed.target_version,
                failed.description,
                result.final_version,
            )
        else:
            logger.error("Store initialization failed: {}", result.error)
