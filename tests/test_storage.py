# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Tests for storage module - storage_up/storage_down lifecycle."""

from __future__ import annotations

import os
import sqlite3
from unittest.mock import patch

import pytest

from sqlite_adapter.config import AdapterConfig
from sqlite_adapter.errors import ConfigError, ProvisioningError
from sqlite_adapter.storage import (
    StorageHandle,
    StorageStatus,
    storage_down,
    storage_status,
    storage_up,
)


def _journal_mode(path: str) -> str:
    conn = sqlite3.connect(path)
    try:
        return conn.execute("PRAGMA journal_mode").fetchone()[0]
    finally:
        conn.close()


class TestStorageHandle:
    """Tests for StorageHandle paths."""

    def test_companion_paths(self):
        """Companions are <path>-wal and <path>-shm."""
        handle = StorageHandle("/data/app.db")
        assert handle.wal_path == "/data/app.db-wal"
        assert handle.shm_path == "/data/app.db-shm"
        assert handle.files == ("/data/app.db", "/data/app.db-wal", "/data/app.db-shm")

    def test_remove_all_tolerates_missing(self, tmp_path):
        """remove_all succeeds when no file exists."""
        StorageHandle(str(tmp_path / "none.db")).remove_all()


class TestStorageUp:
    """Tests for storage_up."""

    async def test_creates_database_in_wal_mode(self, tmp_path):
        """A fresh path is created and left in WAL mode."""
        db_path = str(tmp_path / "app.db")
        status = await storage_up(AdapterConfig(database=db_path))
        assert status is StorageStatus.UP
        assert os.path.exists(db_path)
        assert _journal_mode(db_path) == "wal"

    async def test_second_call_is_already_up(self, tmp_path):
        """Running twice reports ALREADY_UP, not an error."""
        config = AdapterConfig(database=str(tmp_path / "app.db"))
        assert await storage_up(config) is StorageStatus.UP
        assert await storage_up(config) is StorageStatus.ALREADY_UP

    async def test_creates_parent_directories(self, tmp_path):
        """Missing parent directories are created."""
        db_path = tmp_path / "a" / "b" / "app.db"
        assert await storage_up(AdapterConfig(database=str(db_path))) is StorageStatus.UP
        assert db_path.exists()

    async def test_missing_path_raises_config_error(self):
        """An unconfigured path is a ConfigError."""
        with pytest.raises(ConfigError, match="No SQLite database path"):
            await storage_up(AdapterConfig())

    async def test_memory_database_rejected(self):
        """In-memory databases have nothing to provision."""
        with pytest.raises(ConfigError, match="In-memory"):
            await storage_up(AdapterConfig(database=":memory:"))

    async def test_uncreatable_directory(self, tmp_path):
        """A parent that is a regular file yields ProvisioningError and no files."""
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")
        db_path = str(blocker / "sub" / "app.db")

        with pytest.raises(ProvisioningError) as exc_info:
            await storage_up(AdapterConfig(database=db_path))

        assert exc_info.value.path == db_path
        for f in StorageHandle(db_path).files:
            assert not os.path.exists(f)

    async def test_wal_not_confirmed_cleans_up(self, tmp_path):
        """If WAL cannot be confirmed, created files are removed."""
        db_path = str(tmp_path / "app.db")

        async def fake_enable_wal(path):
            # Simulate the engine leaving files behind then refusing WAL
            for f in StorageHandle(path).files:
                open(f, "w").close()
            raise ProvisioningError(path, "journal mode is 'delete' instead of 'wal'")

        with patch("sqlite_adapter.storage._enable_wal", fake_enable_wal):
            with pytest.raises(ProvisioningError, match="instead of 'wal'"):
                await storage_up(AdapterConfig(database=db_path))

        for f in StorageHandle(db_path).files:
            assert not os.path.exists(f)

    async def test_engine_error_wrapped(self, tmp_path):
        """sqlite3 errors become ProvisioningError."""
        db_path = str(tmp_path / "app.db")

        async def broken(path):
            raise sqlite3.OperationalError("disk I/O error")

        with patch("sqlite_adapter.storage._enable_wal", broken):
            with pytest.raises(ProvisioningError, match="disk I/O error") as exc_info:
                await storage_up(AdapterConfig(database=db_path))

        assert isinstance(exc_info.value.__cause__, sqlite3.OperationalError)

    async def test_retry_after_failure_succeeds(self, tmp_path):
        """Once the condition is fixed, a retry provisions normally."""
        db_path = str(tmp_path / "app.db")

        async def broken(path):
            raise sqlite3.OperationalError("locked")

        with patch("sqlite_adapter.storage._enable_wal", broken):
            with pytest.raises(ProvisioningError):
                await storage_up(AdapterConfig(database=db_path))

        assert await storage_up(AdapterConfig(database=db_path)) is StorageStatus.UP


class TestStorageDown:
    """Tests for storage_down."""

    async def test_removes_database(self, tmp_path):
        """An existing database is removed."""
        config = AdapterConfig(database=str(tmp_path / "app.db"))
        await storage_up(config)
        assert await storage_down(config) is StorageStatus.DOWN
        assert not os.path.exists(config.database)

    async def test_already_down(self, tmp_path):
        """A missing database reports ALREADY_DOWN."""
        config = AdapterConfig(database=str(tmp_path / "app.db"))
        assert await storage_down(config) is StorageStatus.ALREADY_DOWN

    async def test_down_twice(self, tmp_path):
        """After deletion, a second call reports ALREADY_DOWN."""
        config = AdapterConfig(database=str(tmp_path / "app.db"))
        await storage_up(config)
        await storage_down(config)
        assert await storage_down(config) is StorageStatus.ALREADY_DOWN

    async def test_main_file_only(self, tmp_path):
        """Succeeds when the companions do not exist."""
        db_path = tmp_path / "app.db"
        db_path.write_bytes(b"")
        assert await storage_down(AdapterConfig(database=str(db_path))) is StorageStatus.DOWN

    async def test_removes_companions(self, tmp_path):
        """-wal and -shm are deleted with the main file."""
        handle = StorageHandle(str(tmp_path / "app.db"))
        for f in handle.files:
            open(f, "w").close()
        await storage_down(AdapterConfig(database=handle.path))
        for f in handle.files:
            assert not os.path.exists(f)

    async def test_orphan_companions_removed_when_already_down(self, tmp_path):
        """Companions are cleaned even if the main file is already gone."""
        handle = StorageHandle(str(tmp_path / "app.db"))
        open(handle.wal_path, "w").close()
        status = await storage_down(AdapterConfig(database=handle.path))
        assert status is StorageStatus.ALREADY_DOWN
        assert not os.path.exists(handle.wal_path)

    async def test_os_error_is_provisioning_error(self, tmp_path):
        """Failures other than not-found raise ProvisioningError after companion cleanup."""
        handle = StorageHandle(str(tmp_path / "app.db"))
        for f in handle.files:
            open(f, "w").close()

        real_remove = os.remove

        def remove(path):
            if path == handle.path:
                raise PermissionError(13, "Permission denied")
            real_remove(path)

        with patch("sqlite_adapter.storage.os.remove", side_effect=remove):
            with pytest.raises(ProvisioningError, match="Permission denied"):
                await storage_down(AdapterConfig(database=handle.path))

        assert os.path.exists(handle.path)
        assert not os.path.exists(handle.wal_path)
        assert not os.path.exists(handle.shm_path)

    async def test_missing_path_raises_config_error(self):
        """An unconfigured path is a ConfigError."""
        with pytest.raises(ConfigError):
            await storage_down(AdapterConfig(database=""))


class TestStorageStatus:
    """Tests for storage_status."""

    async def test_reports_up_and_down(self, tmp_path):
        """Status follows the main file."""
        config = AdapterConfig(database=str(tmp_path / "app.db"))
        assert (await storage_status(config)).status is StorageStatus.DOWN
        await storage_up(config)
        report = await storage_status(config)
        assert report.status is StorageStatus.UP
        assert report.files[config.database] is True
