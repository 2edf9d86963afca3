# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Embedded-document fixtures for coercion tests."""

from __future__ import annotations

from datetime import date

import pytest
from pydantic import BaseModel

from sqlite_adapter.coercion import BOOLEAN, DATE, PRIMITIVE, EmbeddedSchema, LogicalType, embed


class Address(BaseModel):
    """Embedded pydantic model used across tests."""

    street: str
    verified: bool
    since: date | None = None


ADDRESS_SCHEMA = EmbeddedSchema(
    "address",
    {"street": PRIMITIVE, "verified": BOOLEAN, "since": DATE},
    model=Address,
)


@pytest.fixture
def address_type() -> LogicalType:
    """Logical type of an Address embedded in a JSON column."""
    return embed(ADDRESS_SCHEMA)
