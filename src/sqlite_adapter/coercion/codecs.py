# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Codecs consumed by the coercion chains: structured text (JSON) and UUID.

Both codecs are explicit values handed to the pipeline when it is built.
The JSON library is chosen once, from configuration, never looked up at
decode time.
"""

from __future__ import annotations

import importlib
import json
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from ..errors import ConfigError, EncodeError, InvalidUUID, MalformedDocument


@dataclass(frozen=True)
class JsonCodec:
    """Structured-text codec for map, array and embed columns.

    Attributes:
        name: Module name the codec was built from (for diagnostics).
        loads: Callable parsing text (or bytes) into Python values.
        dumps: Callable serializing Python values; may return str or bytes.
    """

    name: str
    loads: Callable[[Any], Any]
    dumps: Callable[[Any], Any]

    @classmethod
    def default(cls) -> JsonCodec:
        return cls("json", json.loads, _compact_dumps)

    @classmethod
    def from_module(cls, name: str) -> JsonCodec:
        """Build a codec from a module exposing ``loads`` and ``dumps``.

        Raises:
            ConfigError: If the module cannot be imported or lacks the API.
        """
        if name == "json":
            return cls.default()
        try:
            module = importlib.import_module(name)
        except ImportError as e:
            raise ConfigError(f"JSON library {name!r} is not installed") from e
        loads = getattr(module, "loads", None)
        dumps = getattr(module, "dumps", None)
        if not callable(loads) or not callable(dumps):
            raise ConfigError(f"JSON library {name!r} must provide loads() and dumps()")
        return cls(name, loads, dumps)

    def decode(self, text: str | bytes, type_tag: str) -> Any:
        try:
            return self.loads(text)
        except (ValueError, TypeError, RecursionError) as e:
            raise MalformedDocument(type_tag, text, f"malformed document ({e})") from e

    def encode(self, value: Any, type_tag: str) -> str:
        try:
            encoded = self.dumps(value)
        except (ValueError, TypeError, RecursionError) as e:
            raise EncodeError(type_tag, value, f"cannot serialize document ({e})") from e
        # Some libraries (orjson) return bytes; SQLite must receive TEXT.
        if isinstance(encoded, bytes):
            encoded = encoded.decode("utf-8")
        return encoded


def _compact_dumps(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"), allow_nan=False)


class UuidCodec:
    """UUID codec: canonical native form is lowercase hyphenated TEXT.

    Loading also accepts 32-hex text and 16-byte blobs written by other
    tools, so existing databases stay readable.
    """

    type_tag = "binary_id"

    def load(self, value: Any) -> str:
        if isinstance(value, (bytes, bytearray, memoryview)):
            raw = bytes(value)
            if len(raw) != 16:
                raise InvalidUUID(self.type_tag, value)
            return str(uuid.UUID(bytes=raw))
        if isinstance(value, str):
            return str(self._parse(value))
        raise InvalidUUID(self.type_tag, value)

    def dump(self, value: Any) -> str:
        if isinstance(value, uuid.UUID):
            return str(value)
        if isinstance(value, str):
            try:
                return str(self._parse(value))
            except InvalidUUID as e:
                raise EncodeError(self.type_tag, value, "invalid UUID") from e
        raise EncodeError(self.type_tag, value, "expected a UUID or UUID string")

    def generate(self) -> str:
        return str(uuid.uuid4())

    def _parse(self, text: str) -> uuid.UUID:
        # uuid.UUID accepts braces and urn: prefixes; only plain forms are canonical input
        if len(text) not in (32, 36):
            raise InvalidUUID(self.type_tag, text)
        try:
            return uuid.UUID(text)
        except ValueError as e:
            raise InvalidUUID(self.type_tag, text) from e


__all__ = ["JsonCodec", "UuidCodec"]
