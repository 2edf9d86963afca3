# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Database adapters exposing value coercion, storage lifecycle and migration locking.

Components:
    DbAdapter: Abstract base class defining the adapter interface.
    SqliteAdapter: SQLite adapter using aiosqlite with per-request connections.
    get_adapter: Factory function to create adapters from connection strings.

Example:
    adapter = get_adapter("/data/app.db", pool_size=5)
    await adapter.storage_up()

    conn = await adapter.acquire()
    try:
        await adapter.insert(conn, "users", {"id": 1, "active": True}, {"active": BOOLEAN})
        rows = await adapter.load_all(conn, "SELECT * FROM users", None, {"active": BOOLEAN})
        await adapter.commit(conn)
    finally:
        await adapter.release(conn)
"""

from __future__ import annotations

from typing import Any

from ..config import AdapterConfig
from .base import DbAdapter
from .sqlite import SqliteAdapter

__all__ = ["DbAdapter", "SqliteAdapter", "ADAPTERS", "get_adapter"]

# Adapter registry
ADAPTERS: dict[str, type[SqliteAdapter]] = {
    "sqlite": SqliteAdapter,
}


def get_adapter(connection_string: str, **options: Any) -> SqliteAdapter:
    """Create database adapter from connection string.

    Connection string formats:
        - "/path/to/db.sqlite" → SQLite (absolute path)
        - "./path/to/db.sqlite" → SQLite (relative path)
        - "sqlite:/path/to/db.sqlite" → SQLite
        - "sqlite::memory:" → SQLite in-memory

    Args:
        connection_string: Database connection string.
        **options: Extra configuration (pool_size, json_library).

    Returns:
        Configured adapter instance.

    Raises:
        ValueError: If connection string format is invalid.
    """
    if (
        connection_string.startswith("/")
        or connection_string.startswith("./")
        or connection_string == ":memory:"
    ):
        return SqliteAdapter(AdapterConfig.from_mapping({**options, "database": connection_string}))

    # Parse "type:connection_info" format
    if ":" not in connection_string:
        raise ValueError(
            f"Invalid connection string: '{connection_string}'. "
            "Expected 'type:connection_info' or path (absolute or relative)."
        )

    db_type, connection_info = connection_string.split(":", 1)
    adapter_class = ADAPTERS.get(db_type.lower())
    if adapter_class is None:
        raise ValueError(f"Unknown database type: '{db_type}'. Supported: {', '.join(ADAPTERS)}")
    return adapter_class(AdapterConfig.from_mapping({**options, "database": connection_info}))
