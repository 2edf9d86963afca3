# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""sqlite-adapter: SQLite adapter layer for async relational toolkits."""

from .adapters import DbAdapter, SqliteAdapter, get_adapter
from .coercion import CoercionPipeline, EmbeddedSchema, LogicalType, RowResult, TypeTag
from .config import AdapterConfig, config_from_env
from .errors import (
    AdapterError,
    CoercionError,
    ConfigError,
    DecodeError,
    EncodeError,
    MigrationLockError,
    ProvisioningError,
)
from .migration import MigrationLockMode, MigrationQuery, lock_for_migrations
from .storage import StorageStatus, storage_down, storage_status, storage_up

__version__ = "0.1.0"

__all__ = [
    # Adapter
    "DbAdapter",
    "SqliteAdapter",
    "get_adapter",
    # Configuration
    "AdapterConfig",
    "config_from_env",
    # Coercion
    "CoercionPipeline",
    "EmbeddedSchema",
    "LogicalType",
    "RowResult",
    "TypeTag",
    # Storage
    "StorageStatus",
    "storage_down",
    "storage_status",
    "storage_up",
    # Migrations
    "MigrationLockMode",
    "MigrationQuery",
    "lock_for_migrations",
    # Errors
    "AdapterError",
    "CoercionError",
    "ConfigError",
    "DecodeError",
    "EncodeError",
    "MigrationLockError",
    "ProvisioningError",
]
