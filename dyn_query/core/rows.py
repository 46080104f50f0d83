"""Row decoding.

Converts driver rows into dynamic values using the per-column type tags
the adapter resolved from the result metadata. SQL NULL decodes as
``VOID`` whatever the column type.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from typing import Any

from dyn_query.core.enums import ColumnType
from dyn_query.core.exceptions import TypeMismatchError, UnsupportedTypeError
from dyn_query.core.values import VOID, Bool, Bytes, Int, Number, String, Value, Vector

_DECODERS: dict[ColumnType, Callable[[Any], Value]] = {
    ColumnType.BOOL: Bool,
    ColumnType.TEXT: String,
    ColumnType.VARCHAR: String,
    ColumnType.BYTEA: Bytes,
    ColumnType.INT2: Int,
    ColumnType.INT4: Int,
    ColumnType.INT8: Int,
    ColumnType.FLOAT4: Number,
    ColumnType.FLOAT8: Number,
}


def decode_value(raw: Any, column_type: ColumnType, position: int = 0) -> Value:
    """Decode one column value according to its type tag."""
    decoder = _DECODERS.get(column_type)
    if decoder is None:
        raise UnsupportedTypeError(str(column_type), position=position)
    if raw is None:
        return VOID
    return decoder(raw)


def decode_row(row: Sequence[Any], columns: Sequence[ColumnType]) -> Vector:
    """Decode one driver row into a ``Vector``, preserving column order.

    Raises:
        TypeMismatchError: If the row width differs from ``columns`` or a
            value does not match its column type.
        UnsupportedTypeError: If a column type has no decoding rule.
    """
    if len(row) != len(columns):
        raise TypeMismatchError(
            f"{len(columns)} column(s)", f"{len(row)} column(s)", "row width"
        )
    return Vector(
        tuple(
            decode_value(raw, column_type, position)
            for position, (raw, column_type) in enumerate(zip(row, columns, strict=True))
        )
    )


def decode_rows(rows: Iterable[Sequence[Any]], columns: Sequence[ColumnType]) -> Vector:
    """Decode a whole result set into a ``Vector`` of row ``Vector`` values.

    The result is always two levels deep: no rows gives ``Vector(())`` and
    no columns gives empty inner vectors. Any failure aborts the whole
    result; nothing partial is returned.
    """
    for position, column_type in enumerate(columns):
        if column_type not in _DECODERS:
            raise UnsupportedTypeError(str(column_type), position=position)
    return Vector(tuple(decode_row(row, columns) for row in rows))
