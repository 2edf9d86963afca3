# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Type coercion between abstract column values and SQLite native values.

SQLite stores only INTEGER, REAL, TEXT, BLOB and NULL. This package maps
richer logical types onto that domain and back.

Components:
    LogicalType, TypeTag: Column type descriptors (with array_of, map_of, embed).
    CoercionPipeline: Per-type loader/dumper chains and row-level helpers.
    RowResult: Per-row outcome with column-attributed errors.
    EmbeddedSchema: Typed fields of a document stored in one JSON column.
    JsonCodec, UuidCodec: Codecs injected into the pipeline.

Example:
    pipeline = CoercionPipeline()
    pipeline.dump(BOOLEAN, True)      # 1
    pipeline.load(BOOLEAN, 0)         # False
    pipeline.loaders(DATE)            # (date_decode, load_date)
"""

from .codecs import JsonCodec, UuidCodec
from .embed import EmbeddedSchema
from .pipeline import Chain, CoercionPipeline, RowResult
from .types import (
    ARRAY,
    BINARY,
    BINARY_ID,
    BOOLEAN,
    DATE,
    FLOAT,
    MAP,
    NAIVE_DATETIME,
    PRIMITIVE,
    TIME,
    UTC_DATETIME,
    LogicalType,
    TypeTag,
    array_of,
    embed,
    map_of,
)

__all__ = [
    # Pipeline
    "Chain",
    "CoercionPipeline",
    "RowResult",
    # Codecs
    "JsonCodec",
    "UuidCodec",
    "EmbeddedSchema",
    # Types
    "LogicalType",
    "TypeTag",
    "array_of",
    "embed",
    "map_of",
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
]
