# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Primitive casts of the abstract types themselves.

Every chain ends (loaders) or starts (dumpers) with one of these. They
check that a value belongs to the abstract type and convert Python objects
that the driver cannot bind (dates, times) into their text form.

Timestamps use SQLite's own layout ``YYYY-MM-DD HH:MM:SS[.ffffff]`` so
stored values compare correctly against ``datetime('now')`` and
``CURRENT_TIMESTAMP``.
"""

from __future__ import annotations

import math
import uuid
from datetime import date, datetime, time, timezone
from typing import Any

from ..errors import DecodeError, EncodeError, MalformedDocument
from .loaders import time_decode


def identity(value: Any) -> Any:
    return value


# -------------------------------------------------------------------------
# Loads
# -------------------------------------------------------------------------


def load_binary(value: Any) -> bytes:
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    if isinstance(value, str):
        return value.encode("utf-8")
    raise DecodeError("binary", value, "expected a blob")


def load_date(value: Any) -> date:
    if isinstance(value, date) and not isinstance(value, datetime):
        return value
    raise DecodeError("date", value, "expected a date")


def load_time(value: Any) -> time:
    if isinstance(value, time):
        return value
    return time_decode(value)


def load_map(value: Any) -> dict:
    if isinstance(value, dict):
        return value
    raise MalformedDocument("map", value, "expected a JSON object")


def load_array(value: Any) -> list:
    if isinstance(value, list):
        return value
    raise MalformedDocument("array", value, "expected a JSON array")


# -------------------------------------------------------------------------
# Dumps
# -------------------------------------------------------------------------


def dump_boolean(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    raise EncodeError("boolean", value, "expected a boolean")


def dump_binary(value: Any) -> bytes:
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    raise EncodeError("binary", value, "expected bytes")


def dump_binary_id(value: Any) -> Any:
    if isinstance(value, (str, uuid.UUID)):
        return value
    raise EncodeError("binary_id", value, "expected a UUID or UUID string")


def dump_date(value: Any) -> str:
    if isinstance(value, datetime) or not isinstance(value, date):
        raise EncodeError("date", value, "expected a date")
    return value.isoformat()


def dump_time(value: Any) -> str:
    if not isinstance(value, time):
        raise EncodeError("time", value, "expected a time")
    if value.tzinfo is not None:
        raise EncodeError("time", value, "time zones are not supported")
    return value.isoformat()


def dump_naive_datetime(value: Any) -> str:
    if not isinstance(value, datetime):
        raise EncodeError("naive_datetime", value, "expected a datetime")
    if value.tzinfo is not None:
        raise EncodeError("naive_datetime", value, "expected a naive datetime, got an aware one")
    return value.isoformat(sep=" ")


def dump_utc_datetime(value: Any) -> str:
    if not isinstance(value, datetime):
        raise EncodeError("utc_datetime", value, "expected a datetime")
    if value.tzinfo is None:
        raise EncodeError("utc_datetime", value, "expected an aware datetime, got a naive one")
    try:
        converted = value.astimezone(timezone.utc)
    except OverflowError as e:
        raise EncodeError("utc_datetime", value, "datetime out of range in UTC") from e
    return converted.replace(tzinfo=None).isoformat(sep=" ")


def dump_float(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise EncodeError("float", value, "expected a number")
    try:
        converted = float(value)
    except OverflowError as e:
        raise EncodeError("float", value, "number too large for a float") from e
    # SQLite silently stores NaN as NULL
    if math.isnan(converted):
        raise EncodeError("float", value, "NaN cannot be stored")
    return converted


def dump_map(value: Any) -> dict:
    if not isinstance(value, dict):
        raise EncodeError("map", value, "expected a dict")
    for key in value:
        if not isinstance(key, str):
            raise EncodeError("map", value, f"keys must be strings, got {key!r}")
    return value


def dump_array(value: Any) -> list:
    if not isinstance(value, (list, tuple)):
        raise EncodeError("array", value, "expected a list")
    return list(value)
