"""Tests for MigrationCatalog."""

from types import SimpleNamespace

import pytest

from boothdb.errors import CatalogError
from boothdb.storage.migrations import CATALOG, EXPECTED_VERSION
from boothdb.storage.migrations.catalog import MigrationCatalog, MigrationStep


async def _noop(session) -> None:  # noqa: ANN001
    pass


def _step(version: int) -> MigrationStep:
    return MigrationStep(version, f"step {version}", _noop)


class TestCatalogConstruction:
    """Tests for building a catalog."""

    def test_sorts_steps_registered_out_of_order(self) -> None:
        """Registration order does not matter."""
        catalog = MigrationCatalog([_step(4), _step(2), _step(3)])
        assert [s.target_version for s in catalog] == [2, 3, 4]
        assert len(catalog) == 3

    def test_duplicate_version_rejected(self) -> None:
        """Two steps may not share a target version."""
        with pytest.raises(CatalogError, match="Duplicate"):
            MigrationCatalog([_step(2), _step(2)])

    def test_non_positive_version_rejected(self) -> None:
        """Target versions start at 1."""
        with pytest.raises(CatalogError, match="non-positive"):
            MigrationCatalog([_step(0)])

    def test_expected_version_override(self) -> None:
        """An explicit expected version pins the code below the latest step."""
        catalog = MigrationCatalog([_step(2), _step(3)], expected_version=2)
        assert catalog.expected_version() == 2
        assert catalog.latest_version == 3

    def test_expected_version_override_must_exist(self) -> None:
        """An override must name a registered step."""
        with pytest.raises(CatalogError, match="no registered"):
            MigrationCatalog([_step(2)], expected_version=5)

    def test_empty_catalog(self) -> None:
        """An empty catalog expects version 0."""
        catalog = MigrationCatalog([])
        assert catalog.expected_version() == 0
        assert catalog.steps == ()


class TestCatalogQueries:
    """Tests for selecting steps."""

    def test_steps_between_is_half_open(self) -> None:
        """steps_between excludes the start and includes the end."""
        catalog = MigrationCatalog([_step(v) for v in (1, 2, 3, 4, 5)])
        assert [s.target_version for s in catalog.steps_between(2, 4)] == [3, 4]
        assert catalog.steps_between(5, 5) == []

    def test_get(self) -> None:
        """get returns the step for a version or None."""
        catalog = MigrationCatalog([_step(2)])
        assert catalog.get(2) is not None
        assert catalog.get(3) is None


class TestCatalogAppend:
    """Tests for append-only growth."""

    def test_with_step_returns_new_catalog(self) -> None:
        """with_step leaves the original untouched."""
        catalog = MigrationCatalog([_step(1)])
        grown = catalog.with_step(_step(2))

        assert grown.expected_version() == 2
        assert catalog.expected_version() == 1

    def test_with_step_keeps_expected_version_override(self) -> None:
        """An explicit expected version survives appending a step."""
        catalog = MigrationCatalog([_step(1), _step(2)], expected_version=1)
        grown = catalog.with_step(_step(3))

        assert grown.expected_version() == 1
        assert grown.latest_version == 3

    def test_with_step_below_latest_rejected(self) -> None:
        """Steps can only be appended above the latest version."""
        catalog = MigrationCatalog([_step(1), _step(3)])
        with pytest.raises(CatalogError, match="must be above"):
            catalog.with_step(_step(2))

    def test_steps_are_immutable(self) -> None:
        """Steps are frozen and the catalog exposes a tuple."""
        catalog = MigrationCatalog([_step(1)])
        with pytest.raises(AttributeError):
            catalog.steps[0].target_version = 9  # type: ignore[misc]
        assert isinstance(catalog.steps, tuple)


class TestStepFromModule:
    """Tests for building steps from modules."""

    def test_from_module(self) -> None:
        """A module with VERSION, DESCRIPTION and apply_migration becomes a step."""
        module = SimpleNamespace(
            __name__="v009_test", VERSION=9, DESCRIPTION="Test step", apply_migration=_noop
        )
        step = MigrationStep.from_module(module)  # type: ignore[arg-type]
        assert step.target_version == 9
        assert step.apply is _noop

    def test_from_incomplete_module(self) -> None:
        """A module missing attributes is a catalog error."""
        module = SimpleNamespace(__name__="v009_broken", VERSION=9)
        with pytest.raises(CatalogError, match="incomplete"):
            MigrationStep.from_module(module)  # type: ignore[arg-type]


class TestDefaultCatalog:
    """Tests for the shipped catalog."""

    def test_versions_are_contiguous(self) -> None:
        """The shipped catalog runs v1 through the expected version."""
        assert [s.target_version for s in CATALOG] == list(range(1, EXPECTED_VERSION + 1))

    def test_expected_version(self) -> None:
        """The shipped catalog expects its latest step."""
        assert EXPECTED_VERSION == CATALOG.latest_version == 5
