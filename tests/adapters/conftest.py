# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""SQLite adapter fixtures.

Connection model:
- Each test gets a freshly provisioned database file under tmp_path
- The `conn` fixture keeps one connection open for the whole test
- The connection is released after the test, then the files are removed
"""

from __future__ import annotations

from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio

from sqlite_adapter.adapters import SqliteAdapter
from sqlite_adapter.config import AdapterConfig

USERS_DDL = """
    CREATE TABLE users (
        id TEXT PRIMARY KEY,
        active INTEGER,
        born TEXT,
        seen_at TEXT,
        score REAL,
        avatar BLOB,
        profile TEXT
    )
"""


@pytest.fixture
def adapter(tmp_path) -> SqliteAdapter:
    """Adapter on a database path inside tmp_path, not yet provisioned."""
    return SqliteAdapter(AdapterConfig(database=str(tmp_path / "app.db"), pool_size=2))


@pytest_asyncio.fixture
async def conn(adapter: SqliteAdapter) -> AsyncGenerator:
    """Open connection on a provisioned database with the users table."""
    await adapter.storage_up()
    connection = await adapter.acquire()
    await adapter.execute(connection, USERS_DDL)
    await adapter.commit(connection)
    try:
        yield connection
    finally:
        await adapter.release(connection)
        await adapter.storage_down()
