# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Base adapter class: the contract a relational toolkit programs against."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from ..coercion import Chain, CoercionPipeline, LogicalType, RowResult
    from ..migration import MigrationCallback, MigrationQuery
    from ..storage import StorageReport, StorageStatus


class DbAdapter(ABC):
    """Abstract base class for database adapters.

    Provides a unified interface with:
    - Type coercion (loaders, dumpers, typed row loading and inserts)
    - Storage lifecycle (storage_up, storage_down, storage_status)
    - Migration locking (lock_for_migrations, supports_ddl_transaction)
    - Connection management (acquire, release, commit, rollback)
    - Raw query execution (execute, fetch_one, fetch_all)

    Subclasses must implement the abstract methods, provide a ``pipeline``
    and set the placeholder attribute for parameter binding.
    """

    placeholder: str = ":name"  # Override in subclass
    pipeline: CoercionPipeline

    # -------------------------------------------------------------------------
    # Type coercion
    # -------------------------------------------------------------------------

    def loaders(self, logical_type: LogicalType) -> Chain:
        """Return the loader chain (native -> abstract) for a logical type."""
        return self.pipeline.loaders(logical_type)

    def dumpers(self, logical_type: LogicalType) -> Chain:
        """Return the dumper chain (abstract -> native) for a logical type."""
        return self.pipeline.dumpers(logical_type)

    @abstractmethod
    def autogenerate(self, logical_type: LogicalType) -> Any:
        """Return a client-side generated key for the type, or None."""
        ...

    # -------------------------------------------------------------------------
    # Storage and migrations
    # -------------------------------------------------------------------------

    @abstractmethod
    async def storage_up(self) -> StorageStatus:
        """Create the database storage."""
        ...

    @abstractmethod
    async def storage_down(self) -> StorageStatus:
        """Drop the database storage."""
        ...

    @abstractmethod
    async def storage_status(self) -> StorageReport:
        """Report whether the database storage exists."""
        ...

    @abstractmethod
    async def lock_for_migrations(
        self, query: MigrationQuery, callback: MigrationCallback[Any]
    ) -> Any:
        """Run the migration callback under the adapter's locking strategy."""
        ...

    def supports_ddl_transaction(self) -> bool:
        """Whether schema changes can run inside a transaction."""
        return False

    # -------------------------------------------------------------------------
    # Connections
    # -------------------------------------------------------------------------

    @abstractmethod
    async def acquire(self) -> Any:
        """Acquire a new connection.

        For pooled adapters: gets connection from pool.
        For file-based adapters: opens new connection.
        """
        ...

    @abstractmethod
    async def release(self, conn: Any) -> None:
        """Release a connection (return to pool or close)."""
        ...

    @abstractmethod
    async def commit(self, conn: Any) -> None:
        """Commit transaction on connection."""
        ...

    @abstractmethod
    async def rollback(self, conn: Any) -> None:
        """Rollback transaction on connection."""
        ...

    @abstractmethod
    async def execute(
        self, conn: Any, query: str, params: Mapping[str, Any] | None = None
    ) -> int:
        """Execute query on connection, return affected row count."""
        ...

    @abstractmethod
    async def fetch_all(
        self, conn: Any, query: str, params: Mapping[str, Any] | None = None
    ) -> list[dict[str, Any]]:
        """Execute query on connection, return all rows as native dicts."""
        ...

    @abstractmethod
    async def insert_returning_id(
        self, conn: Any, table: str, values: Mapping[str, Any], pk_col: str = "id"
    ) -> Any:
        """Insert already-native values and return the generated primary key."""
        ...

    async def fetch_one(
        self, conn: Any, query: str, params: Mapping[str, Any] | None = None
    ) -> dict[str, Any] | None:
        """Execute query on connection, return first row or None."""
        rows = await self.fetch_all(conn, query, params)
        return rows[0] if rows else None

    # -------------------------------------------------------------------------
    # Typed helpers
    # -------------------------------------------------------------------------

    async def load_all(
        self,
        conn: Any,
        query: str,
        params: Mapping[str, Any] | None,
        types: Mapping[str, LogicalType],
    ) -> list[RowResult]:
        """Fetch rows and run each column through its loader chain.

        A column that fails to load is reported in its RowResult; other
        columns and rows are unaffected.
        """
        rows = await self.fetch_all(conn, query, params)
        return self.pipeline.load_rows(types, rows)

    async def load_one(
        self,
        conn: Any,
        query: str,
        params: Mapping[str, Any] | None,
        types: Mapping[str, LogicalType],
    ) -> RowResult | None:
        """Fetch the first row and load it, or None if there is no row."""
        row = await self.fetch_one(conn, query, params)
        if row is None:
            return None
        return self.pipeline.load_row(types, row, 0)

    async def insert(
        self,
        conn: Any,
        table: str,
        values: Mapping[str, Any],
        types: Mapping[str, LogicalType],
        pk_col: str = "id",
    ) -> Any:
        """Dump values through their dumper chains and insert the row.

        Raises:
            EncodeError: For the first column that cannot be dumped; nothing
                is written in that case.
        """
        native = self.pipeline.dump_row(types, values).unwrap()
        return await self.insert_returning_id(conn, table, native, pk_col)

    # -------------------------------------------------------------------------
    # SQL Helpers
    # -------------------------------------------------------------------------

    def _sql_name(self, name: str) -> str:
        """Return quoted SQL identifier for column/table name."""
        return '"' + name.replace('"', '""') + '"'

    def _placeholder(self, name: str) -> str:
        """Return placeholder for named parameter."""
        return self.placeholder.replace("name", name)
