# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""CLI entry point for sqlite-adapter (sqlite-adapter command).

Operator commands for provisioning the database file set before the
application starts its connection pools.

Commands:
    storage up: Create the database file in WAL mode
    storage down: Delete the database file and its -wal/-shm companions
    storage status: Show which of the three files exist
    version: Show version info
"""

from __future__ import annotations

import asyncio
import sys

import click
from rich.console import Console
from rich.table import Table

from .config import AdapterConfig, config_from_env
from .errors import ConfigError, ProvisioningError
from .storage import StorageStatus, storage_down, storage_status, storage_up

console = Console()

_MESSAGES = {
    StorageStatus.UP: "[green]created[/green]",
    StorageStatus.ALREADY_UP: "[dim]already exists[/dim]",
    StorageStatus.DOWN: "[green]removed[/green]",
    StorageStatus.ALREADY_DOWN: "[dim]already removed[/dim]",
}


def _resolve_config(database: str | None) -> AdapterConfig:
    config = config_from_env()
    if database:
        config = AdapterConfig(
            database=database,
            pool_size=config.pool_size,
            json_library=config.json_library,
        )
    return config


def _fail(error: Exception) -> None:
    console.print(f"[red]error:[/red] {error}")
    sys.exit(1)


database_option = click.option(
    "--database",
    "-d",
    default=None,
    help="Database file path. Default: $SQLITE_ADAPTER_DB.",
)


@click.group()
def main() -> None:
    """sqlite-adapter - SQLite storage and migration tooling."""
    pass


@main.group("storage")
def storage_group() -> None:
    """Create, drop and inspect the database files."""
    pass


@storage_group.command("up")
@database_option
def storage_up_cmd(database: str | None) -> None:
    """Create the database file and enable WAL journal mode."""
    try:
        config = _resolve_config(database)
        status = asyncio.run(storage_up(config))
    except (ConfigError, ProvisioningError) as e:
        _fail(e)
        return
    console.print(f"{config.database}: {_MESSAGES[status]}")


@storage_group.command("down")
@database_option
def storage_down_cmd(database: str | None) -> None:
    """Delete the database file and its -wal/-shm companions."""
    try:
        config = _resolve_config(database)
        status = asyncio.run(storage_down(config))
    except (ConfigError, ProvisioningError) as e:
        _fail(e)
        return
    console.print(f"{config.database}: {_MESSAGES[status]}")


@storage_group.command("status")
@database_option
def storage_status_cmd(database: str | None) -> None:
    """Show whether the database and its companion files exist."""
    try:
        report = asyncio.run(storage_status(_resolve_config(database)))
    except ConfigError as e:
        _fail(e)
        return

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("File")
    table.add_column("Exists")
    for path, exists in report.files.items():
        table.add_row(path, "[green]yes[/green]" if exists else "[dim]no[/dim]")
    console.print(table)
    console.print(f"Status: [bold]{report.status.value}[/bold]")


@main.command("version")
def version_cmd() -> None:
    """Show version information."""
    from . import __version__

    console.print(f"sqlite-adapter {__version__}")


if __name__ == "__main__":
    main()
