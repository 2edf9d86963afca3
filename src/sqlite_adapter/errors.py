# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Exception hierarchy for the SQLite adapter.

AdapterError
    ConfigError            missing path, in-memory provisioning, bad pool size
        MigrationLockError pool size too small for the migration lock protocol
    CoercionError          a single value failed to convert
        DecodeError        native -> abstract
            InvalidDate, InvalidTime, InvalidTimestamp,
            MalformedDocument, InvalidUUID
        EncodeError        abstract -> native
    ProvisioningError      filesystem or engine failure in storage_up/down
"""

from __future__ import annotations

from typing import Any


class AdapterError(Exception):
    """Base class for every error raised by the adapter."""


class ConfigError(AdapterError):
    """Raised when the adapter configuration cannot be used."""


class MigrationLockError(ConfigError):
    """Raised when the pool cannot support the migration lock protocol."""

    def __init__(self, pool_size: int):
        self.pool_size = pool_size
        super().__init__(
            f"Migrations failed to run because the connection pool size is {pool_size}.\n"
            "\n"
            "At least 2 connections are required: one holds the migration lock while\n"
            "another runs the migrations. Raise the pool size in your configuration:\n"
            "\n"
            "    pool_size: 2  # at least\n"
            "\n"
            "or via the SQLITE_ADAPTER_POOL_SIZE environment variable."
        )


class CoercionError(AdapterError):
    """A value could not be converted between abstract and native form.

    The optional ``column`` and ``row`` attributes are filled in by the
    pipeline when the failure happens inside a batch, so callers can tell
    which cell was rejected.
    """

    default_reason = "cannot convert value"

    def __init__(self, type_tag: str, value: Any, reason: str | None = None):
        self.type_tag = type_tag
        self.value = value
        self.reason = reason or self.default_reason
        self.column: str | None = None
        self.row: int | None = None
        super().__init__(self._format())

    def _format(self) -> str:
        where = ""
        if self.column is not None:
            where = f" in column {self.column!r}"
            if self.row is not None:
                where += f" (row {self.row})"
        return f"{self.reason} for {self.type_tag}{where}: {self.value!r}"

    def attribute(self, column: str, row: int | None = None) -> CoercionError:
        """Attach row/column context and refresh the message."""
        self.column = column
        self.row = row
        self.args = (self._format(),)
        return self


class DecodeError(CoercionError):
    default_reason = "cannot decode native value"


class InvalidDate(DecodeError):
    default_reason = "invalid date"


class InvalidTime(DecodeError):
    default_reason = "invalid time"


class InvalidTimestamp(DecodeError):
    default_reason = "invalid timestamp"


class MalformedDocument(DecodeError):
    default_reason = "malformed document"


class InvalidUUID(DecodeError):
    default_reason = "invalid UUID"


class EncodeError(CoercionError):
    default_reason = "value not representable natively"


class ProvisioningError(AdapterError):
    """Raised when creating or removing the database files fails."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot provision SQLite database at {path!r}: {reason}")


__all__ = [
    "AdapterError",
    "CoercionError",
    "ConfigError",
    "DecodeError",
    "EncodeError",
    "InvalidDate",
    "InvalidTime",
    "InvalidTimestamp",
    "InvalidUUID",
    "MalformedDocument",
    "MigrationLockError",
    "ProvisioningError",
]
