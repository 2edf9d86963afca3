# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Storage lifecycle: create and destroy the SQLite file set.

A SQLite database in WAL mode lives in up to three co-located files:
``<path>``, ``<path>-wal`` and ``<path>-shm``. They are created and
removed together.

storage_up() and storage_down() are meant to run once at provisioning
time, before connection pools open. They are not safe to run
concurrently against the same path. Blocking filesystem calls are pushed
to a worker thread so an event loop is never stalled.

Usage:
    config = AdapterConfig(database="/data/app.db")

    status = await storage_up(config)     # StorageStatus.UP
    status = await storage_up(config)     # StorageStatus.ALREADY_UP
    status = await storage_down(config)   # StorageStatus.DOWN
    status = await storage_down(config)   # StorageStatus.ALREADY_DOWN
"""

from __future__ import annotations

import asyncio
import logging
import os
import sqlite3
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

import aiosqlite

from .config import AdapterConfig
from .errors import ConfigError, ProvisioningError

logger = logging.getLogger(__name__)

WAL_SUFFIX = "-wal"
SHM_SUFFIX = "-shm"


class StorageStatus(str, Enum):
    """Outcome of a storage operation. ALREADY_* are successes, not errors."""

    UP = "up"
    ALREADY_UP = "already_up"
    DOWN = "down"
    ALREADY_DOWN = "already_down"


@dataclass(frozen=True)
class StorageHandle:
    """The database file and its WAL/SHM companions."""

    path: str

    @property
    def wal_path(self) -> str:
        return self.path + WAL_SUFFIX

    @property
    def shm_path(self) -> str:
        return self.path + SHM_SUFFIX

    @property
    def companions(self) -> tuple[str, str]:
        return (self.wal_path, self.shm_path)

    @property
    def files(self) -> tuple[str, str, str]:
        return (self.path, self.wal_path, self.shm_path)

    def existing(self) -> dict[str, bool]:
        """Map each of the three file paths to whether it exists."""
        return {f: os.path.exists(f) for f in self.files}

    def remove_companions(self) -> None:
        """Best-effort removal of -wal and -shm; missing files are fine."""
        for companion in self.companions:
            _remove_quietly(companion)

    def remove_all(self) -> None:
        """Best-effort removal of all three files."""
        for f in self.files:
            _remove_quietly(f)


@dataclass(frozen=True)
class StorageReport:
    """Snapshot returned by storage_status()."""

    path: str
    status: StorageStatus
    files: dict[str, bool]


async def storage_up(config: AdapterConfig) -> StorageStatus:
    """Create the database file and switch it to WAL journal mode.

    Returns:
        StorageStatus.UP if created, StorageStatus.ALREADY_UP if the file exists.

    Raises:
        ConfigError: If no path is configured or the database is in-memory.
        ProvisioningError: If the directory, file or WAL mode cannot be set up.
            Files created by the failed attempt are removed.
    """
    handle = StorageHandle(_require_file_path(config))

    if await asyncio.to_thread(os.path.exists, handle.path):
        logger.debug("SQLite database %s already exists", handle.path)
        return StorageStatus.ALREADY_UP

    parent = Path(handle.path).parent
    try:
        await asyncio.to_thread(parent.mkdir, parents=True, exist_ok=True)
    except OSError as e:
        raise ProvisioningError(handle.path, f"cannot create directory {str(parent)!r}: {e}") from e

    try:
        await _enable_wal(handle.path)
    except ProvisioningError:
        await asyncio.to_thread(handle.remove_all)
        raise
    except (sqlite3.Error, OSError) as e:
        await asyncio.to_thread(handle.remove_all)
        raise ProvisioningError(handle.path, str(e)) from e

    logger.info("Created SQLite database %s (journal_mode=wal)", handle.path)
    return StorageStatus.UP


async def storage_down(config: AdapterConfig) -> StorageStatus:
    """Delete the database file and, regardless of outcome, its companions.

    Returns:
        StorageStatus.DOWN if deleted, StorageStatus.ALREADY_DOWN if missing.

    Raises:
        ConfigError: If no path is configured or the database is in-memory.
        ProvisioningError: If the main file exists but cannot be deleted.
    """
    handle = StorageHandle(_require_file_path(config))

    failure: OSError | None = None
    status = StorageStatus.DOWN
    try:
        await asyncio.to_thread(os.remove, handle.path)
    except FileNotFoundError:
        status = StorageStatus.ALREADY_DOWN
    except OSError as e:
        failure = e

    await asyncio.to_thread(handle.remove_companions)

    if failure is not None:
        raise ProvisioningError(handle.path, str(failure)) from failure

    if status is StorageStatus.DOWN:
        logger.info("Removed SQLite database %s", handle.path)
    else:
        logger.debug("SQLite database %s already removed", handle.path)
    return status


async def storage_status(config: AdapterConfig) -> StorageReport:
    """Report whether the database file exists and which companions are present."""
    handle = StorageHandle(_require_file_path(config))
    files = await asyncio.to_thread(handle.existing)
    status = StorageStatus.UP if files[handle.path] else StorageStatus.DOWN
    return StorageReport(path=handle.path, status=status, files=files)


async def _enable_wal(path: str) -> None:
    """Open the engine, request WAL and read the mode back."""
    async with aiosqlite.connect(path) as conn:
        await conn.execute("PRAGMA journal_mode = WAL")
        async with conn.execute("PRAGMA journal_mode") as cursor:
            row = await cursor.fetchone()

    mode = row[0] if row else None
    if not isinstance(mode, str) or mode.lower() != "wal":
        raise ProvisioningError(path, f"journal mode is {mode!r} instead of 'wal'")


def _require_file_path(config: AdapterConfig) -> str:
    path = config.require_database()
    if config.is_memory:
        raise ConfigError(f"In-memory database {path!r} has no storage to provision")
    return path


def _remove_quietly(path: str) -> None:
    try:
        os.remove(path)
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.warning("Could not remove %s: %s", path, e)


__all__ = [
    "SHM_SUFFIX",
    "WAL_SUFFIX",
    "StorageHandle",
    "StorageReport",
    "StorageStatus",
    "storage_down",
    "storage_status",
    "storage_up",
]
