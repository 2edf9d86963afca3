# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""SQLite-specific dumper steps (abstract -> native)."""

from __future__ import annotations

import sqlite3
from typing import Any

from ..errors import EncodeError


def blob_encode(value: Any) -> sqlite3.Binary:
    """Tag bytes so the driver binds them as BLOB rather than TEXT."""
    if not isinstance(value, (bytes, bytearray, memoryview)):
        raise EncodeError("binary", value, "expected bytes")
    return sqlite3.Binary(value)


def bool_encode(value: Any) -> int:
    """True -> 1, False -> 0."""
    if value is True:
        return 1
    if value is False:
        return 0
    raise EncodeError("boolean", value, "expected a boolean")


def time_encode(value: Any) -> Any:
    """SQLite has no TIME type; the ISO text is stored as-is."""
    return value


__all__ = ["blob_encode", "bool_encode", "time_encode"]
