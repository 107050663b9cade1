"""CLI entry point for boothdb.

Provides commands for initializing the kiosk store and
inspecting its schema version.
"""

import asyncio
import sys
from pathlib import Path

import click

from boothdb import __version__
from boothdb.config.models import Config
from boothdb.errors import BoothDBError, ConfigurationError


@click.group()
@click.version_option(version=__version__)
def cli() -> None:
    """Photobooth kiosk store manager.

    Creates the embedded store on first start and brings an
    existing store up to the schema version this build expects.
    """
    pass


@cli.command()
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, path_type=Path),
    help="Path to configuration file",
)
def init(config: Path | None) -> None:
    """Create or upgrade the store.

    Runs the same startup check the kiosk runs before opening
    the store. Exits non-zero if the store could not be brought
    to the expected version.
    """
    from boothdb.services.startup_gate import StartupGate
    from boothdb.utils.logging import configure_logging

    cfg = _load(config)
    configure_logging(cfg.logging)

    gate = StartupGate.from_config(cfg)
    result = asyncio.run(gate.initialize())

    click.echo(f"Store: {gate.db_path}")
    click.echo(f"  Result: {result.status.value}")
    click.echo(f"  Version: {result.final_version} (expected {result.expected_version})")
    for step in result.applied_steps:
        click.echo(
            f"  [{step.outcome.value.upper()}] v{step.target_version:03d} {step.description}"
        )

    if not result.ok:
        click.echo(f"Error: {result.error}", err=True)
        sys.exit(1)


@cli.command()
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, path_type=Path),
    help="Path to configuration file",
)
def status(config: Path | None) -> None:
    """Show the store's schema version and pending steps."""
    from boothdb.services.startup_gate import StartupGate

    cfg = _load(config)
    gate = StartupGate.from_config(cfg)

    if not gate.db_path.exists():
        click.echo("Store not initialized. Run 'boothdb init' first.")
        return

    try:
        plan = asyncio.run(gate.plan())
    except BoothDBError as e:
        raise click.ClickException(str(e)) from e

    click.echo(f"Store: {gate.db_path}")
    click.echo(f"  State: {plan.state.value}")
    click.echo(f"  Current version: {plan.current_version}")
    click.echo(f"  Expected version: {plan.expected_version}")
    if plan.steps:
        click.echo("  Pending steps:")
        for step in plan.steps:
            click.echo(f"    v{step.target_version:03d} {step.description}")


@cli.command()
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, path_type=Path),
    help="Path to configuration file",
)
def history(config: Path | None) -> None:
    """Print the recorded schema version log, oldest first."""
    from boothdb.services.startup_gate import StartupGate
    from boothdb.storage.version_store import VersionStore

    cfg = _load(config)
    gate = StartupGate.from_config(cfg)

    if not gate.db_path.exists():
        click.echo("Store not initialized. Run 'boothdb init' first.")
        return

    async def main() -> None:
        async with gate.open_session() as session:
            records = await VersionStore(session).history()

        if not records:
            click.echo("No version history recorded (store predates version tracking).")
            return

        for record in records:
            click.echo(
                f"  #{record.id}: version {record.version} at {record.updated_at.isoformat()}"
            )

    try:
        asyncio.run(main())
    except BoothDBError as e:
        raise click.ClickException(str(e)) from e


@cli.command()
def steps() -> None:
    """List the migration steps this build ships."""
    from boothdb.storage.migrations import CATALOG

    click.echo(f"Expected version: {CATALOG.expected_version()}")
    for step in CATALOG:
        click.echo(f"  v{step.target_version:03d} {step.description}")


def _load(config_path: Path | None) -> Config:
    """Load configuration, reporting invalid files as CLI errors."""
    from boothdb.config.loader import load_config

    try:
        return load_config(config_path)
    except ConfigurationError as e:
        raise click.ClickException(str(e)) from e


def main() -> None:
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
