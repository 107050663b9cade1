"""Migration runner: brings an open store to the expected schema version."""

import asyncio
import sqlite3
import time
from collections.abc import Callable
from dataclasses import dataclass, field

from loguru import logger

from boothdb.errors import (
    AheadOfCodeError,
    BootstrapError,
    StepExecutionError,
    VersionReadError,
)
from boothdb.models.migration import (
    AppliedStep,
    MigrationRunResult,
    MigrationState,
    RunStatus,
    StepOutcome,
)
from boothdb.ports.db_session import DbSessionPort
from boothdb.ports.version_store import VersionStorePort
from boothdb.services.bootstrapper import Bootstrapper
from boothdb.storage.migrations.catalog import MigrationCatalog, MigrationStep
from boothdb.storage.schema import store_exists


@dataclass
class MigrationPlan:
    """What a run would do, computed without writing anything."""

    state: MigrationState
    current_version: int
    expected_version: int
    steps: list[MigrationStep] = field(default_factory=list)


class MigrationRunner:
    """
    Compares the store's version to the catalog and applies what is missing.

    Each step runs in its own transaction together with the version
    marker for that step, so the recorded version only ever names a
    schema that was fully committed. The first failing step stops the
    run; earlier steps stay committed and the next run resumes after
    them.
    """

    def __init__(
        self,
        session: DbSessionPort,
        catalog: MigrationCatalog,
        version_store: VersionStorePort,
        bootstrapper: Bootstrapper | None = None,
        *,
        step_timeout_seconds: float = 120.0,
        allow_ahead_of_code: bool = True,
        heartbeat: Callable[[], None] | None = None,
    ) -> None:
        """
        Initialize MigrationRunner.

        Args:
            session: Open session on the store.
            catalog: Registered migration steps.
            version_store: Version marker access.
            bootstrapper: Fresh store creator. Built with defaults if omitted.
            step_timeout_seconds: Upper bound on a single step body.
            allow_ahead_of_code: Tolerate a store newer than the catalog.
            heartbeat: Called after every committed step.
        """
        self._session = session
        self._catalog = catalog
        self._version_store = version_store
        self._bootstrapper = bootstrapper or Bootstrapper(
            session, version_store, catalog.expected_version()
        )
        self._step_timeout = step_timeout_seconds
        self._allow_ahead_of_code = allow_ahead_of_code
        self._heartbeat = heartbeat

    async def plan(self) -> MigrationPlan:
        """
        Classify the store and list the steps a run would apply.

        Raises:
            VersionReadError: If the store or its version record is unreadable.
        """
        expected = self._catalog.expected_version()

        try:
            exists = await store_exists(self._session)
        except sqlite3.Error as e:
            raise VersionReadError(f"Store is unreadable: {e}") from e

        if not exists:
            return MigrationPlan(MigrationState.FRESH, 0, expected)

        current = await self._version_store.get_version()
        if current == expected:
            return MigrationPlan(MigrationState.UP_TO_DATE, current, expected)
        if current > expected:
            return MigrationPlan(MigrationState.AHEAD_OF_CODE, current, expected)
        return MigrationPlan(
            MigrationState.NEEDS_UPGRADE,
            current,
            expected,
            self._catalog.steps_between(current, expected),
        )

    async def run(self) -> MigrationRunResult:
        """
        Bring the store to the expected version.

        Never raises for migration failures; they are reported through the
        returned result's ``status`` and ``error``.
        """
        expected = self._catalog.expected_version()
        try:
            plan = await self.plan()
        except VersionReadError as e:
            logger.error("Cannot determine store schema version: {}", e)
            return MigrationRunResult(
                status=RunStatus.FAILED, final_version=0, expected_version=expected, error=e
            )

        logger.info(
            "Store schema version {} (expected {}): {}",
            plan.current_version,
            expected,
            plan.state,
        )

        if plan.state == MigrationState.FRESH:
            return await self._bootstrap(plan)

        if plan.state == MigrationState.UP_TO_DATE:
            return MigrationRunResult(
                status=RunStatus.UP_TO_DATE,
                initial_version=plan.current_version,
                final_version=plan.current_version,
                expected_version=expected,
            )

        if plan.state == MigrationState.AHEAD_OF_CODE:
            return self._ahead_of_code(plan)

        return await self._upgrade(plan)

    async def _bootstrap(self, plan: MigrationPlan) -> MigrationRunResult:
        try:
            record = await self._bootstrapper.create_fresh()
        except BootstrapError as e:
            return MigrationRunResult(
                status=RunStatus.FAILED,
                initial_version=0,
                final_version=0,
                expected_version=plan.expected_version,
                error=e,
            )
        return MigrationRunResult(
            status=RunStatus.FRESH_INSTALL,
            initial_version=0,
            final_version=record.version,
            expected_version=plan.expected_version,
        )

    def _ahead_of_code(self, plan: MigrationPlan) -> MigrationRunResult:
        if not self._allow_ahead_of_code:
            error = AheadOfCodeError(plan.current_version, plan.expected_version)
            logger.error("{}; refusing to start", error)
            return MigrationRunResult(
                status=RunStatus.FAILED,
                initial_version=plan.current_version,
                final_version=plan.current_version,
                expected_version=plan.expected_version,
                error=error,
            )

        logger.warning(
            "Store schema version {} is newer than this build expects ({}). "
            "Continuing without changes; a newer build may have run against this store.",
            plan.current_version,
            plan.expected_version,
        )
        return MigrationRunResult(
            status=RunStatus.AHEAD_OF_CODE,
            initial_version=plan.current_version,
            final_version=plan.current_version,
            expected_version=plan.expected_version,
        )

    async def _upgrade(self, plan: MigrationPlan) -> MigrationRunResult:
        result = MigrationRunResult(
            status=RunStatus.UPGRADED,
            initial_version=plan.current_version,
            final_version=plan.current_version,
            expected_version=plan.expected_version,
        )
        logger.info(
            "Upgrading store from version {} to {} ({} steps)",
            plan.current_version,
            plan.expected_version,
            len(plan.steps),
        )

        for step in plan.steps:
            started = time.perf_counter()
            try:
                applied = await self._apply_step(step)
            except Exception as e:
                duration = time.perf_counter() - started
                error = self._step_error(step, e)
                logger.error(
                    "Migration to version {} ({}) failed after {:.2f}s: {}",
                    step.target_version,
                    step.description,
                    duration,
                    e,
                )
                result.applied_steps.append(
                    AppliedStep(
                        target_version=step.target_version,
                        description=step.description,
                        outcome=StepOutcome.FAILED,
                        duration_seconds=duration,
                        error=str(error),
                    )
                )
                result.status = RunStatus.FAILED
                result.error = error
                return result

            duration = time.perf_counter() - started
            result.applied_steps.append(
                AppliedStep(
                    target_version=step.target_version,
                    description=step.description,
                    outcome=StepOutcome.APPLIED if applied else StepOutcome.SKIPPED,
                    duration_seconds=duration,
                )
            )
            result.final_version = step.target_version
            if applied:
                logger.info(
                    "Applied migration {} ({}) in {:.2f}s",
                    step.target_version,
                    step.description,
                    duration,
                )
            else:
                logger.warning(
                    "Skipped migration {} ({}): store already records it",
                    step.target_version,
                    step.description,
                )
            if self._heartbeat:
                self._heartbeat()

        logger.info("Store upgraded to version {}", result.final_version)
        return result

    async def _apply_step(self, step: MigrationStep) -> bool:
        """
        Run one step body and record its version in a single transaction.

        The version is read again once the write lock is held. Returns
        False without running the body if another writer already moved
        the store to this step or past it.
        """
        async with self._session.transaction():
            if await self._version_store.get_version() >= step.target_version:
                return False
            await asyncio.wait_for(step.apply(self._session), timeout=self._step_timeout)
            await self._version_store.set_version(step.target_version)
        return True

    def _step_error(self, step: MigrationStep, cause: Exception) -> StepExecutionError:
        if isinstance(cause, StepExecutionError):
            return cause
        if isinstance(cause, TimeoutError):
            message = (
                f"Migration to version {step.target_version} ({step.description}) "
                f"timed out after {self._step_timeout}s"
            )
        else:
            message = (
                f"Migration to version {step.target_version} ({step.description}) "
                f"failed: {cause}"
            )
        error = StepExecutionError(message, step.target_version, step.description)
        error.__cause__ = cause
        return error
