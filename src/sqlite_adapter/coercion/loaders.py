# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""SQLite-specific loader steps (native -> abstract).

SQLite stores booleans as 0/1, dates and timestamps as TEXT, floats that
happen to be whole as INTEGER. These functions undo that. They are pure:
no I/O, no logging, no global state.
"""

from __future__ import annotations

from datetime import date, datetime, time, timezone
from typing import Any

from ..errors import InvalidDate, InvalidTime, InvalidTimestamp


def bool_decode(value: Any) -> Any:
    """0 -> False, 1 -> True; anything else is returned unchanged."""
    if _is_int(value) and value in (0, 1):
        return value == 1
    return value


def date_decode(value: Any) -> date:
    """Decode a ``(year, month, day)`` triple or ISO ``YYYY-MM-DD`` text."""
    if isinstance(value, tuple):
        if len(value) != 3 or not all(_is_int(part) for part in value):
            raise InvalidDate("date", value)
        try:
            return date(*value)
        except (ValueError, OverflowError) as e:
            raise InvalidDate("date", value, f"invalid date ({e})") from e
    if isinstance(value, str):
        try:
            return date.fromisoformat(value)
        except ValueError as e:
            raise InvalidDate("date", value, f"invalid date ({e})") from e
    raise InvalidDate("date", value)


def time_decode(value: Any) -> time:
    """Decode ISO ``HH:MM:SS[.ffffff]`` text."""
    if isinstance(value, str):
        try:
            parsed = time.fromisoformat(value)
        except ValueError as e:
            raise InvalidTime("time", value, f"invalid time ({e})") from e
        return parsed.replace(tzinfo=None)
    raise InvalidTime("time", value)


def naive_datetime_decode(value: Any, type_tag: str = "naive_datetime") -> datetime:
    """Decode ISO-8601 text or ``((y, m, d), (h, mi, s[, usec]))`` into a naive datetime.

    An offset in the text is dropped; the wall-clock value is kept.
    """
    return _parse_timestamp(value, type_tag).replace(tzinfo=None)


def utc_datetime_decode(value: Any) -> datetime:
    """Decode like naive_datetime_decode and tag the result as UTC.

    Text carrying an explicit offset is converted to UTC first.
    """
    parsed = _parse_timestamp(value, "utc_datetime")
    if parsed.tzinfo is not None:
        try:
            return parsed.astimezone(timezone.utc)
        except OverflowError as e:
            raise InvalidTimestamp("utc_datetime", value, "timestamp out of range in UTC") from e
    return parsed.replace(tzinfo=timezone.utc)


def float_decode(value: Any) -> Any:
    """Widen whole numbers stored as INTEGER back to float."""
    if isinstance(value, int) and not isinstance(value, bool):
        return float(value)
    return value


def _parse_timestamp(value: Any, type_tag: str) -> datetime:
    if isinstance(value, str):
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            return datetime.fromisoformat(text)
        except ValueError as e:
            raise InvalidTimestamp(type_tag, value, f"invalid timestamp ({e})") from e
    if isinstance(value, tuple) and len(value) == 2:
        day, clock = value
        if (
            isinstance(day, tuple)
            and isinstance(clock, tuple)
            and len(day) == 3
            and len(clock) in (3, 4)
            and all(_is_int(part) for part in day + clock)
        ):
            try:
                return datetime(*day, *clock)
            except (ValueError, OverflowError) as e:
                raise InvalidTimestamp(type_tag, value, f"invalid timestamp ({e})") from e
    raise InvalidTimestamp(type_tag, value)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


__all__ = [
    "bool_decode",
    "date_decode",
    "float_decode",
    "naive_datetime_decode",
    "time_decode",
    "utc_datetime_decode",
]
