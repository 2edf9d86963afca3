# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Logical column types understood by the coercion pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .embed import EmbeddedSchema


class TypeTag(str, Enum):
    """Engine-independent column type selecting a coercion chain."""

    BOOLEAN = "boolean"
    BINARY = "binary"
    BINARY_ID = "binary_id"
    DATE = "date"
    TIME = "time"
    UTC_DATETIME = "utc_datetime"
    NAIVE_DATETIME = "naive_datetime"
    FLOAT = "float"
    MAP = "map"
    ARRAY = "array"
    EMBED = "embed"
    PRIMITIVE = "primitive"


@dataclass(frozen=True)
class LogicalType:
    """A column type: a tag plus the nested type for containers.

    ``inner`` is the element type of an array or the value type of a map
    (None means untyped JSON values). ``schema`` is only set for embed.
    """

    tag: TypeTag
    inner: LogicalType | None = None
    schema: EmbeddedSchema | None = None

    def __post_init__(self) -> None:
        if self.tag is TypeTag.EMBED and self.schema is None:
            raise ValueError("embed type requires a schema")
        if self.inner is not None and self.tag not in (TypeTag.ARRAY, TypeTag.MAP):
            raise ValueError(f"{self.tag.value} type cannot have an inner type")

    def __str__(self) -> str:
        if self.inner is not None:
            return f"{self.tag.value}<{self.inner}>"
        if self.schema is not None:
            return f"embed<{self.schema.name}>"
        return self.tag.value


BOOLEAN = LogicalType(TypeTag.BOOLEAN)
BINARY = LogicalType(TypeTag.BINARY)
BINARY_ID = LogicalType(TypeTag.BINARY_ID)
DATE = LogicalType(TypeTag.DATE)
TIME = LogicalType(TypeTag.TIME)
UTC_DATETIME = LogicalType(TypeTag.UTC_DATETIME)
NAIVE_DATETIME = LogicalType(TypeTag.NAIVE_DATETIME)
FLOAT = LogicalType(TypeTag.FLOAT)
MAP = LogicalType(TypeTag.MAP)
ARRAY = LogicalType(TypeTag.ARRAY)
PRIMITIVE = LogicalType(TypeTag.PRIMITIVE)


def array_of(inner: LogicalType) -> LogicalType:
    return LogicalType(TypeTag.ARRAY, inner=inner)


def map_of(inner: LogicalType) -> LogicalType:
    return LogicalType(TypeTag.MAP, inner=inner)


def embed(schema: EmbeddedSchema) -> LogicalType:
    return LogicalType(TypeTag.EMBED, schema=schema)


__all__ = [
    "ARRAY",
    "BINARY",
    "BINARY_ID",
    "BOOLEAN",
    "DATE",
    "FLOAT",
    "MAP",
    "NAIVE_DATETIME",
    "PRIMITIVE",
    "TIME",
    "UTC_DATETIME",
    "LogicalType",
    "TypeTag",
    "array_of",
    "embed",
    "map_of",
]
