"""Tests for CLI entry point."""

import sqlite3
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from click.testing import CliRunner

from boothdb.__main__ import cli
from boothdb.config.models import Config, StoreConfig
from boothdb.errors import StepExecutionError
from boothdb.models.migration import AppliedStep, MigrationRunResult, RunStatus, StepOutcome


@pytest.fixture
def runner() -> CliRunner:
    """Create CLI test runner."""
    return CliRunner()


@pytest.fixture
def config(tmp_path: Path) -> Config:
    """Config pointing at a temporary store."""
    return Config(store=StoreConfig(data_directory=tmp_path / "data"))


def test_cli_help(runner: CliRunner) -> None:
    """Test CLI help command."""
    result = runner.invoke(cli, ["--help"])
    assert result.exit_code == 0
    assert "Photobooth kiosk store manager" in result.output
    for command in ("init", "status", "history", "steps"):
        assert command in result.output


def test_cli_version(runner: CliRunner) -> None:
    """Test CLI version command."""
    result = runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert "version" in result.output.lower()


def test_steps_lists_catalog(runner: CliRunner) -> None:
    """steps prints every shipped migration."""
    result = runner.invoke(cli, ["steps"])
    assert result.exit_code == 0
    assert "Expected version: 5" in result.output
    assert "v001 Baseline kiosk schema" in result.output
    assert "v005 Add Display/Theme setting" in result.output


@patch("boothdb.utils.logging.configure_logging")
@patch("boothdb.config.loader.load_config")
def test_init_creates_store(
    mock_load_config: MagicMock,
    mock_configure_logging: MagicMock,
    runner: CliRunner,
    config: Config,
) -> None:
    """init creates a fresh store and reports the result."""
    mock_load_config.return_value = config

    result = runner.invoke(cli, ["init"])

    assert result.exit_code == 0
    assert "Result: fresh_install" in result.output
    assert "Version: 5 (expected 5)" in result.output
    assert config.store.database_path.exists()
    mock_load_config.assert_called_once_with(None)
    mock_configure_logging.assert_called_once_with(config.logging)


@patch("boothdb.utils.logging.configure_logging")
@patch("boothdb.config.loader.load_config")
@patch("boothdb.services.startup_gate.StartupGate.initialize", new_callable=AsyncMock)
def test_init_failure_exits_nonzero(
    mock_initialize: AsyncMock,
    mock_load_config: MagicMock,
    mock_configure_logging: MagicMock,  # noqa: ARG001
    runner: CliRunner,
    config: Config,
) -> None:
    """init exits 1 and names the failing step when migration fails."""
    mock_load_config.return_value = config
    mock_initialize.return_value = MigrationRunResult(
        status=RunStatus.FAILED,
        initial_version=1,
        final_version=2,
        expected_version=5,
        applied_steps=[
            AppliedStep(2, "Add Templates.Theme", StepOutcome.APPLIED),
            AppliedStep(3, "Create UserActivity", StepOutcome.FAILED, error="boom"),
        ],
        error=StepExecutionError("boom", 3, "Create UserActivity"),
    )

    result = runner.invoke(cli, ["init"])

    assert result.exit_code == 1
    assert "[APPLIED] v002 Add Templates.Theme" in result.output
    assert "[FAILED] v003 Create UserActivity" in result.output


@patch("boothdb.config.loader.load_config")
def test_status_no_store(mock_load_config: MagicMock, runner: CliRunner, config: Config) -> None:
    """status explains when the store does not exist."""
    mock_load_config.return_value = config

    result = runner.invoke(cli, ["status"])

    assert result.exit_code == 0
    assert "Store not initialized" in result.output


@patch("boothdb.utils.logging.configure_logging")
@patch("boothdb.config.loader.load_config")
def test_status_and_history_after_init(
    mock_load_config: MagicMock,
    mock_configure_logging: MagicMock,  # noqa: ARG001
    runner: CliRunner,
    config: Config,
) -> None:
    """status and history describe an initialized store."""
    mock_load_config.return_value = config
    assert runner.invoke(cli, ["init"]).exit_code == 0

    status = runner.invoke(cli, ["status"])
    history = runner.invoke(cli, ["history"])

    assert status.exit_code == 0
    assert "State: up_to_date" in status.output
    assert "Current version: 5" in status.output
    assert history.exit_code == 0
    assert "#1: version 5" in history.output


@patch("boothdb.config.loader.load_config")
def test_history_no_store(mock_load_config: MagicMock, runner: CliRunner, config: Config) -> None:
    """history explains when the store does not exist."""
    mock_load_config.return_value = config

    result = runner.invoke(cli, ["history"])

    assert "Store not initialized" in result.output


def test_invalid_config_file_reports_error(runner: CliRunner, tmp_path: Path) -> None:
    """A config file that fails validation exits with a readable error."""
    config_path = tmp_path / "config.yaml"
    config_path.write_text("- not\n- a mapping\n")

    result = runner.invoke(cli, ["status", "--config", str(config_path)])

    assert result.exit_code == 1
    assert "must be a mapping" in result.output


def _write_corrupt_store(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with sqlite3.connect(path) as conn:
        conn.execute("CREATE TABLE DatabaseVersion (Id INTEGER PRIMARY KEY, Version, UpdatedAt)")
        conn.execute("INSERT INTO DatabaseVersion (Version, UpdatedAt) VALUES ('x', 'never')")
    conn.close()


@patch("boothdb.config.loader.load_config")
def test_status_reports_corrupt_version(
    mock_load_config: MagicMock, runner: CliRunner, config: Config
) -> None:
    """status exits with a readable error when the version record is corrupt."""
    mock_load_config.return_value = config
    _write_corrupt_store(config.store.database_path)

    result = runner.invoke(cli, ["status"])

    assert result.exit_code == 1
    assert "Corrupt schema version value" in result.output
    assert "Traceback" not in result.output


@patch("boothdb.config.loader.load_config")
def test_history_reports_corrupt_version(
    mock_load_config: MagicMock, runner: CliRunner, config: Config
) -> None:
    """history exits with a readable error when the version log is corrupt."""
    mock_load_config.return_value = config
    _write_corrupt_store(config.store.database_path)

    result = runner.invoke(cli, ["history"])

    assert result.exit_code == 1
    assert "Corrupt schema version" in result.output
