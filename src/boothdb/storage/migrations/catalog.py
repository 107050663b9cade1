"""Ordered, append-only registry of migration steps."""

from collections.abc import Awaitable, Callable, Iterable, Iterator
from dataclasses import dataclass
from types import ModuleType
from typing import Any

from boothdb.errors import CatalogError

StepBody = Callable[[Any], Awaitable[None]]


@dataclass(frozen=True)
class MigrationStep:
    """One schema change, identified by the version it produces."""

    target_version: int
    description: str
    apply: StepBody

    @classmethod
    def from_module(cls, module: ModuleType) -> "MigrationStep":
        """Build a step from a module exposing VERSION, DESCRIPTION and apply_migration."""
        try:
            return cls(
                target_version=module.VERSION,
                description=module.DESCRIPTION,
                apply=module.apply_migration,
            )
        except AttributeError as e:
            raise CatalogError(f"Migration module {module.__name__} is incomplete: {e}") from e


class MigrationCatalog:
    """
    Immutable collection of migration steps sorted by target version.

    Steps may be registered in any order. Target versions must be unique
    and positive. New steps are only ever appended above the latest one
    via ``with_step``; existing steps cannot be removed or replaced.
    """

    def __init__(
        self, steps: Iterable[MigrationStep], expected_version: int | None = None
    ) -> None:
        ordered = sorted(steps, key=lambda s: s.target_version)

        seen: set[int] = set()
        for step in ordered:
            if step.target_version <= 0:
                raise CatalogError(
                    f"Step {step.description!r} has non-positive version {step.target_version}"
                )
            if step.target_version in seen:
                raise CatalogError(f"Duplicate migration version {step.target_version}")
            seen.add(step.target_version)

        if expected_version is not None and expected_version not in seen:
            raise CatalogError(
                f"Expected version {expected_version} has no registered migration step"
            )

        self._steps: tuple[MigrationStep, ...] = tuple(ordered)
        self._expected_version = expected_version

    @property
    def steps(self) -> tuple[MigrationStep, ...]:
        return self._steps

    @property
    def latest_version(self) -> int:
        """Highest registered target version, 0 for an empty catalog."""
        return self._steps[-1].target_version if self._steps else 0

    def expected_version(self) -> int:
        """Version the running code requires the store to be at."""
        if self._expected_version is not None:
            return self._expected_version
        return self.latest_version

    def steps_between(self, from_version: int, to_version: int) -> list[MigrationStep]:
        """Steps with from_version < target_version <= to_version, ascending."""
        return [s for s in self._steps if from_version < s.target_version <= to_version]

    def get(self, version: int) -> MigrationStep | None:
        for step in self._steps:
            if step.target_version == version:
                return step
        return None

    def with_step(self, step: MigrationStep) -> "MigrationCatalog":
        """
        Return a new catalog with ``step`` appended.

        An explicit expected version carries over unchanged.

        Raises:
            CatalogError: If the step does not sort strictly after the latest one.
        """
        if step.target_version <= self.latest_version:
            raise CatalogError(
                f"New step version {step.target_version} must be above "
                f"latest version {self.latest_version}"
            )
        return MigrationCatalog([*self._steps, step], expected_version=self._expected_version)

    def __iter__(self) -> Iterator[MigrationStep]:
        return iter(self._steps)

    def __len__(self) -> int:
        return len(self._steps)

    def __repr__(self) -> str:
        return f"MigrationCatalog(versions={[s.target_version for s in self._steps]})"
