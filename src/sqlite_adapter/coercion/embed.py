# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Embedded-document schemas: typed fields stored inside one JSON column."""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ValidationError

from ..errors import EncodeError, MalformedDocument

if TYPE_CHECKING:
    from .types import LogicalType


@dataclass(eq=False)
class EmbeddedSchema:
    """Field layout of an embedded document.

    Each field has its own LogicalType, so nested values go through the same
    chains as top-level columns. Loaded documents are built with ``model``:
    a pydantic model, a dataclass, or None for plain dicts.

    Example:
        class Address(BaseModel):
            street: str
            verified: bool

        ADDRESS = EmbeddedSchema(
            "address",
            {"street": PRIMITIVE, "verified": BOOLEAN},
            model=Address,
        )
    """

    name: str
    fields: Mapping[str, LogicalType]
    model: type | None = None

    def to_fields(self, value: Any) -> dict[str, Any]:
        """Return the declared fields of ``value`` as a plain dict."""
        if isinstance(value, BaseModel):
            data = value.model_dump()
        elif dataclasses.is_dataclass(value) and not isinstance(value, type):
            data = {f.name: getattr(value, f.name) for f in dataclasses.fields(value)}
        elif isinstance(value, Mapping):
            data = dict(value)
        else:
            raise EncodeError("embed", value, f"expected a {self.name} document")
        return {name: data.get(name) for name in self.fields}

    def from_fields(self, values: dict[str, Any]) -> Any:
        """Build the abstract document from already-loaded field values."""
        if self.model is None:
            return values
        try:
            if issubclass(self.model, BaseModel):
                return self.model.model_validate(values)
            return self.model(**values)
        except (ValidationError, TypeError) as e:
            raise MalformedDocument("embed", values, f"invalid {self.name} document ({e})") from e


__all__ = ["EmbeddedSchema"]
