"""Column type tags."""

from __future__ import annotations

from enum import Enum


class ColumnType(Enum):
    """Server column types the row decoder has a rule for.

    Adapters translate their driver's type identifiers into these tags.
    """

    BOOL = "bool"
    TEXT = "text"
    VARCHAR = "varchar"
    BYTEA = "bytea"
    INT2 = "int2"
    INT4 = "int4"
    INT8 = "int8"
    FLOAT4 = "float4"
    FLOAT8 = "float8"
