# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Adapter configuration.

Configuration via environment variables:
    SQLITE_ADAPTER_DB: Database file path
    SQLITE_ADAPTER_POOL_SIZE: Connection pool capacity (optional)
    SQLITE_ADAPTER_JSON_LIBRARY: Module used to encode/decode documents (default: json)

Usage:
    # From environment (Docker/production):
    config = config_from_env()

    # From a toolkit configuration mapping:
    config = AdapterConfig.from_mapping({"database": "/data/app.db", "pool_size": 5})

    # Explicit:
    config = AdapterConfig(database="/data/app.db", pool_size=5)
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from .errors import ConfigError

MEMORY_DATABASE = ":memory:"


@dataclass(frozen=True)
class AdapterConfig:
    """Configuration consumed by the storage manager and migration guard.

    Attributes:
        database: Path of the SQLite database file. None when unconfigured.
        pool_size: Configured connection pool capacity. None when the toolkit
            did not set one.
        json_library: Name of the module used to encode/decode map, array
            and embedded-document columns. Must expose ``loads`` and ``dumps``.
    """

    database: str | None = None
    pool_size: int | None = None
    json_library: str = "json"

    @classmethod
    def from_mapping(cls, options: Mapping[str, Any]) -> AdapterConfig:
        """Build config from a toolkit options mapping, ignoring unknown keys."""
        pool_size = options.get("pool_size")
        if pool_size is not None:
            pool_size = _parse_pool_size(pool_size)
        return cls(
            database=options.get("database"),
            pool_size=pool_size,
            json_library=options.get("json_library") or "json",
        )

    @property
    def is_memory(self) -> bool:
        """True for private in-memory databases, which have no files."""
        return self.database == MEMORY_DATABASE or (
            self.database is not None and "mode=memory" in self.database
        )

    def require_database(self) -> str:
        """Return the database path or raise ConfigError if unset."""
        if not self.database:
            raise ConfigError(
                "No SQLite database path specified. Set 'database' in the adapter "
                "configuration, for example:\n"
                "\n"
                "    AdapterConfig(database='/path/to/sqlite/database')\n"
                "\n"
                f"Options provided were: {self!r}"
            )
        return self.database


def _parse_pool_size(value: Any) -> int:
    if isinstance(value, bool):
        raise ConfigError(f"pool_size must be an integer, got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"pool_size must be an integer, got {value!r}") from e


def config_from_env() -> AdapterConfig:
    """Build AdapterConfig from SQLITE_ADAPTER_* environment variables.

    Environment variables:
        SQLITE_ADAPTER_DB: Database path (default: None, unconfigured)
        SQLITE_ADAPTER_POOL_SIZE: Pool capacity (default: None)
        SQLITE_ADAPTER_JSON_LIBRARY: Document codec module (default: "json")

    Returns:
        AdapterConfig instance populated from environment.
    """
    pool_size = os.environ.get("SQLITE_ADAPTER_POOL_SIZE")
    return AdapterConfig(
        database=os.environ.get("SQLITE_ADAPTER_DB") or None,
        pool_size=_parse_pool_size(pool_size) if pool_size else None,
        json_library=os.environ.get("SQLITE_ADAPTER_JSON_LIBRARY") or "json",
    )


__all__ = ["AdapterConfig", "MEMORY_DATABASE", "config_from_env"]
