# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""SQLite async adapter using aiosqlite with per-request connections."""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

import aiosqlite

from .. import migration, storage
from ..coercion import CoercionPipeline, LogicalType, TypeTag
from ..config import AdapterConfig
from .base import DbAdapter

if TYPE_CHECKING:
    from ..migration import MigrationCallback, MigrationQuery, MigrationRun
    from ..storage import StorageReport, StorageStatus


class SqliteAdapter(DbAdapter):
    """SQLite adapter: value coercion, file lifecycle, migration guard.

    Uses :name placeholders natively. Each acquire() opens a new connection,
    release() closes it. This ensures request isolation.

    SQLite has a narrow native domain (INTEGER, REAL, TEXT, BLOB, NULL), so
    all typed reads and writes go through the coercion pipeline:
    - 0/1 <-> False/True for boolean columns
    - ISO text <-> date/time/datetime
    - JSON text <-> map/array/embedded documents
    - canonical text <-> binary_id UUIDs

    Args:
        config: Adapter configuration, or a bare database path.
        pipeline: Coercion pipeline. Built from ``config.json_library`` if None.
    """

    placeholder = ":name"

    def __init__(self, config: AdapterConfig | str, pipeline: CoercionPipeline | None = None):
        if isinstance(config, str):
            config = AdapterConfig(database=config)
        self.config = config
        self.db_path = config.database or ":memory:"
        self.pipeline = pipeline or CoercionPipeline.from_config(config)

    def autogenerate(self, logical_type: LogicalType) -> Any:
        """binary_id keys are generated client side; integer ids by the engine."""
        if logical_type.tag is TypeTag.BINARY_ID:
            return self.pipeline.uuid_codec.generate()
        return None

    # -------------------------------------------------------------------------
    # Storage and migrations
    # -------------------------------------------------------------------------

    async def storage_up(self) -> StorageStatus:
        return await storage.storage_up(self.config)

    async def storage_down(self) -> StorageStatus:
        return await storage.storage_down(self.config)

    async def storage_status(self) -> StorageReport:
        return await storage.storage_status(self.config)

    async def lock_for_migrations(
        self,
        query: MigrationQuery,
        callback: MigrationCallback[Any],
        run: MigrationRun | None = None,
    ) -> Any:
        """SQLite has no advisory locks; run the callback unlocked."""
        return await migration.lock_for_migrations(self.config, query, callback, run)

    def supports_ddl_transaction(self) -> bool:
        """SQLite runs CREATE/ALTER inside transactions."""
        return True

    # -------------------------------------------------------------------------
    # Connections
    # -------------------------------------------------------------------------

    async def acquire(self) -> aiosqlite.Connection:
        """Open new connection for request."""
        return await aiosqlite.connect(self.db_path)

    async def release(self, conn: aiosqlite.Connection) -> None:
        """Close connection."""
        await conn.close()

    async def commit(self, conn: aiosqlite.Connection) -> None:
        """Commit transaction on connection."""
        await conn.commit()

    async def rollback(self, conn: aiosqlite.Connection) -> None:
        """Rollback transaction on connection."""
        await conn.rollback()

    async def execute(
        self, conn: aiosqlite.Connection, query: str, params: Mapping[str, Any] | None = None
    ) -> int:
        """Execute query, return affected row count."""
        cursor = await conn.execute(query, params or {})
        return cursor.rowcount

    async def fetch_all(
        self, conn: aiosqlite.Connection, query: str, params: Mapping[str, Any] | None = None
    ) -> list[dict[str, Any]]:
        """Execute query, return all rows as list of dicts of native values."""
        async with conn.execute(query, params or {}) as cursor:
            rows = await cursor.fetchall()
            cols = [c[0] for c in cursor.description]
            return [dict(zip(cols, row, strict=True)) for row in rows]

    async def insert_returning_id(
        self,
        conn: aiosqlite.Connection,
        table: str,
        values: Mapping[str, Any],
        pk_col: str = "id",
    ) -> Any:
        """Insert a row and return the generated primary key (lastrowid)."""
        cols = list(values.keys())
        placeholders = ", ".join(self._placeholder(c) for c in cols)
        col_list = ", ".join(self._sql_name(c) for c in cols)
        query = f"INSERT INTO {self._sql_name(table)} ({col_list}) VALUES ({placeholders})"
        cursor = await conn.execute(query, dict(values))
        if pk_col in values:
            return values[pk_col]
        return cursor.lastrowid
