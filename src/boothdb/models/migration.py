"""Models for schema versions and migration runs."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, Field

from boothdb.errors import BoothDBError


class MigrationState(StrEnum):
    """What the runner found when comparing the store to the catalog."""

    FRESH = "fresh"
    UP_TO_DATE = "up_to_date"
    NEEDS_UPGRADE = "needs_upgrade"
    AHEAD_OF_CODE = "ahead_of_code"


class RunStatus(StrEnum):
    """Tagged outcome of a startup migration run."""

    UP_TO_DATE = "up_to_date"
    FRESH_INSTALL = "fresh_install"
    UPGRADED = "upgraded"
    AHEAD_OF_CODE = "ahead_of_code"
    FAILED = "failed"


class StepOutcome(StrEnum):
    """Outcome of a single migration step."""

    APPLIED = "applied"
    SKIPPED = "skipped"
    FAILED = "failed"


class SchemaVersion(BaseModel):
    """
    One row of the persisted version log.

    Only the row with the highest id is authoritative.
    """

    id: int
    version: int = Field(ge=0)
    updated_at: datetime


@dataclass
class AppliedStep:
    """A step the runner attempted during one run."""

    target_version: int
    description: str
    outcome: StepOutcome
    duration_seconds: float = 0.0
    error: str | None = None


@dataclass
class MigrationRunResult:
    """Result of one MigrationRunner / StartupGate run. Never persisted."""

    status: RunStatus
    final_version: int
    expected_version: int
    initial_version: int | None = None
    applied_steps: list[AppliedStep] = field(default_factory=list)
    error: BoothDBError | None = None

    @property
    def ok(self) -> bool:
        """True unless the run failed."""
        return self.status != RunStatus.FAILED

    @property
    def failed_step(self) -> AppliedStep | None:
        """The step that stopped the run, if any."""
        for step in self.applied_steps:
            if step.outcome == StepOutcome.FAILED:
                return step
        return None

    @property
    def applied_versions(self) -> list[int]:
        """Target versions of the steps that committed, in order."""
        return [
            step.target_version
            for step in self.applied_steps
            if step.outcome == StepOutcome.APPLIED
        ]
