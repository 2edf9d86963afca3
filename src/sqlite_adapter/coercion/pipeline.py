# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Coercion pipeline: per-type loader and dumper chains.

A chain is an ordered tuple of pure functions; running it feeds each
result into the next function. Loader chains run the SQLite-specific steps
first and finish with the abstract type's primitive cast; dumper chains
start with the primitive cast and finish with the SQLite-specific steps.

Chains are selected through dispatch tables keyed by TypeTag. Containers
(array, map, embed) recurse into the chains of their element/field types.

Usage:
    pipeline = CoercionPipeline.from_config(config)

    pipeline.load(BOOLEAN, 1)                   # True
    pipeline.dump(DATE, date(2024, 2, 29))      # "2024-02-29"

    results = pipeline.load_rows({"active": BOOLEAN, "born": DATE}, rows)
    for result in results:
        if not result.ok:
            log_bad_cells(result.errors)
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from ..errors import CoercionError, MalformedDocument
from . import primitives as prim
from .codecs import JsonCodec, UuidCodec
from .dumpers import blob_encode, bool_encode, time_encode
from .loaders import (
    bool_decode,
    date_decode,
    float_decode,
    naive_datetime_decode,
    utc_datetime_decode,
)
from .types import PRIMITIVE, LogicalType, TypeTag

if TYPE_CHECKING:
    from ..config import AdapterConfig

Chain = tuple[Callable[[Any], Any], ...]

_DOCUMENT_TAGS = frozenset({TypeTag.MAP, TypeTag.ARRAY, TypeTag.EMBED})


@dataclass
class RowResult:
    """Outcome of coercing one row.

    Columns that converted land in ``values``; columns that failed land in
    ``errors`` with the error carrying the column name and row index.
    """

    values: dict[str, Any] = field(default_factory=dict)
    errors: dict[str, CoercionError] = field(default_factory=dict)
    index: int | None = None

    @property
    def ok(self) -> bool:
        return not self.errors

    def unwrap(self) -> dict[str, Any]:
        """Return values, raising the first column error if any."""
        if self.errors:
            raise next(iter(self.errors.values()))
        return self.values


class CoercionPipeline:
    """Builds and runs the loader/dumper chain of every LogicalType.

    Args:
        json_codec: Codec for map, array and embed columns. Defaults to the
            stdlib json module.
        uuid_codec: Codec for binary_id columns.
    """

    def __init__(self, json_codec: JsonCodec | None = None, uuid_codec: UuidCodec | None = None):
        self.json_codec = json_codec or JsonCodec.default()
        self.uuid_codec = uuid_codec or UuidCodec()

        self._loader_table: dict[TypeTag, Callable[[LogicalType], Chain]] = {
            TypeTag.BOOLEAN: lambda t: (bool_decode, prim.identity),
            TypeTag.BINARY: lambda t: (prim.load_binary,),
            TypeTag.BINARY_ID: lambda t: (self.uuid_codec.load, prim.identity),
            TypeTag.DATE: lambda t: (date_decode, prim.load_date),
            TypeTag.TIME: lambda t: (prim.load_time,),
            TypeTag.UTC_DATETIME: lambda t: (utc_datetime_decode, prim.identity),
            TypeTag.NAIVE_DATETIME: lambda t: (naive_datetime_decode, prim.identity),
            TypeTag.FLOAT: lambda t: (float_decode, prim.identity),
            TypeTag.MAP: self._map_loaders,
            TypeTag.ARRAY: self._array_loaders,
            TypeTag.EMBED: self._embed_loaders,
            TypeTag.PRIMITIVE: lambda t: (prim.identity,),
        }
        self._dumper_table: dict[TypeTag, Callable[[LogicalType], Chain]] = {
            TypeTag.BOOLEAN: lambda t: (prim.dump_boolean, bool_encode),
            TypeTag.BINARY: lambda t: (prim.dump_binary, blob_encode),
            TypeTag.BINARY_ID: lambda t: (prim.dump_binary_id, self.uuid_codec.dump),
            TypeTag.DATE: lambda t: (prim.dump_date,),
            TypeTag.TIME: lambda t: (prim.dump_time, time_encode),
            TypeTag.UTC_DATETIME: lambda t: (prim.dump_utc_datetime,),
            TypeTag.NAIVE_DATETIME: lambda t: (prim.dump_naive_datetime,),
            TypeTag.FLOAT: lambda t: (prim.dump_float,),
            TypeTag.MAP: lambda t: self._structure_dumpers(t) + (self._json_encoder(t),),
            TypeTag.ARRAY: lambda t: self._structure_dumpers(t) + (self._json_encoder(t),),
            TypeTag.EMBED: lambda t: self._structure_dumpers(t) + (self._json_encoder(t),),
            TypeTag.PRIMITIVE: lambda t: (prim.identity,),
        }

    @classmethod
    def from_config(cls, config: AdapterConfig) -> CoercionPipeline:
        """Build a pipeline with the JSON library named in the configuration."""
        return cls(json_codec=JsonCodec.from_module(config.json_library))

    # -------------------------------------------------------------------------
    # Chains
    # -------------------------------------------------------------------------

    def loaders(self, logical_type: LogicalType) -> Chain:
        """Return the ordered loader chain (native -> abstract) for a type."""
        return self._loader_table[logical_type.tag](logical_type)

    def dumpers(self, logical_type: LogicalType) -> Chain:
        """Return the ordered dumper chain (abstract -> native) for a type."""
        return self._dumper_table[logical_type.tag](logical_type)

    def load(self, logical_type: LogicalType, value: Any) -> Any:
        """Run the loader chain. NULL is returned unchanged.

        Raises:
            DecodeError: If any step rejects the value.
        """
        return _run(self.loaders(logical_type), value)

    def dump(self, logical_type: LogicalType, value: Any) -> Any:
        """Run the dumper chain. None is returned unchanged.

        Raises:
            EncodeError: If any step rejects the value.
        """
        return _run(self.dumpers(logical_type), value)

    # -------------------------------------------------------------------------
    # Rows
    # -------------------------------------------------------------------------

    def load_row(
        self,
        types: Mapping[str, LogicalType],
        row: Mapping[str, Any],
        index: int | None = None,
    ) -> RowResult:
        """Load every column of a row; untyped columns use PRIMITIVE."""
        return self._coerce_row(self.load, types, row, index)

    def load_rows(
        self, types: Mapping[str, LogicalType], rows: Iterable[Mapping[str, Any]]
    ) -> list[RowResult]:
        """Load a batch; a failing row never affects the others."""
        return [self.load_row(types, row, index) for index, row in enumerate(rows)]

    def dump_row(
        self,
        types: Mapping[str, LogicalType],
        values: Mapping[str, Any],
        index: int | None = None,
    ) -> RowResult:
        """Dump every column of a row; untyped columns use PRIMITIVE."""
        return self._coerce_row(self.dump, types, values, index)

    def _coerce_row(
        self,
        coerce: Callable[[LogicalType, Any], Any],
        types: Mapping[str, LogicalType],
        row: Mapping[str, Any],
        index: int | None,
    ) -> RowResult:
        result = RowResult(index=index)
        for column, value in row.items():
            try:
                result.values[column] = coerce(types.get(column, PRIMITIVE), value)
            except CoercionError as e:
                result.errors[column] = e.attribute(column, index)
        return result

    # -------------------------------------------------------------------------
    # Document chains
    # -------------------------------------------------------------------------

    def _json_decoder(self, logical_type: LogicalType) -> Callable[[Any], Any]:
        tag = logical_type.tag.value
        codec = self.json_codec

        def json_decode(value: Any) -> Any:
            if isinstance(value, (str, bytes)):
                return codec.decode(value, tag)
            return value

        return json_decode

    def _json_encoder(self, logical_type: LogicalType) -> Callable[[Any], Any]:
        tag = logical_type.tag.value
        codec = self.json_codec

        def json_encode(value: Any) -> str:
            return codec.encode(value, tag)

        return json_encode

    def _map_loaders(self, logical_type: LogicalType) -> Chain:
        chain: Chain = (self._json_decoder(logical_type), prim.load_map)
        inner = logical_type.inner
        if inner is None:
            return chain

        def load_map_values(value: dict) -> dict:
            return {key: self.load(inner, item) for key, item in value.items()}

        return chain + (load_map_values,)

    def _array_loaders(self, logical_type: LogicalType) -> Chain:
        chain: Chain = (self._json_decoder(logical_type), prim.load_array)
        inner = logical_type.inner
        if inner is None:
            return chain

        def load_array_items(value: list) -> list:
            return [self.load(inner, item) for item in value]

        return chain + (load_array_items,)

    def _embed_loaders(self, logical_type: LogicalType) -> Chain:
        schema = logical_type.schema
        assert schema is not None

        def load_embed(value: Any) -> Any:
            if not isinstance(value, dict):
                raise MalformedDocument("embed", value, f"expected a {schema.name} object")
            loaded = {name: self.load(ftype, value.get(name)) for name, ftype in schema.fields.items()}
            return schema.from_fields(loaded)

        return (self._json_decoder(logical_type), load_embed)

    def _structure_dumpers(self, logical_type: LogicalType) -> Chain:
        """Dumper steps of a document type, stopping before JSON encoding.

        Nested documents use these so the whole column is encoded once.
        """
        inner = logical_type.inner
        if logical_type.tag is TypeTag.MAP:
            if inner is None:
                return (prim.dump_map,)

            def dump_map_values(value: dict) -> dict:
                return {key: self._dump_nested(inner, item) for key, item in value.items()}

            return (prim.dump_map, dump_map_values)

        if logical_type.tag is TypeTag.ARRAY:
            if inner is None:
                return (prim.dump_array,)

            def dump_array_items(value: list) -> list:
                return [self._dump_nested(inner, item) for item in value]

            return (prim.dump_array, dump_array_items)

        schema = logical_type.schema
        assert schema is not None

        def dump_embed(value: Any) -> dict:
            fields = schema.to_fields(value)
            return {name: self._dump_nested(ftype, fields[name]) for name, ftype in schema.fields.items()}

        return (dump_embed,)

    def _dump_nested(self, logical_type: LogicalType, value: Any) -> Any:
        if logical_type.tag in _DOCUMENT_TAGS:
            return _run(self._structure_dumpers(logical_type), value)
        return self.dump(logical_type, value)


def _run(chain: Chain, value: Any) -> Any:
    if value is None:
        return None
    for step in chain:
        value = step(value)
    return value


__all__ = ["Chain", "CoercionPipeline", "RowResult"]
