"""Unit tests for the row decoder."""

from __future__ import annotations

import pytest

from dyn_query.core.enums import ColumnType
from dyn_query.core.exceptions import TypeMismatchError, UnsupportedTypeError
from dyn_query.core.rows import decode_row, decode_rows, decode_value
from dyn_query.core.values import VOID, Bool, Bytes, Int, Number, String, Vector, vector

ALL_COLUMNS = [
    ColumnType.BOOL,
    ColumnType.TEXT,
    ColumnType.VARCHAR,
    ColumnType.BYTEA,
    ColumnType.INT2,
    ColumnType.INT4,
    ColumnType.INT8,
    ColumnType.FLOAT4,
    ColumnType.FLOAT8,
]


class TestDecodeValue:
    def test_every_supported_type(self) -> None:
        row = (True, "a", "b", b"\x00", 1, 2, 3, 0.5, 1.25)
        assert decode_row(row, ALL_COLUMNS) == vector(
            Bool(True),
            String("a"),
            String("b"),
            Bytes(b"\x00"),
            Int(1),
            Int(2),
            Int(3),
            Number(0.5),
            Number(1.25),
        )

    @pytest.mark.parametrize("column_type", ALL_COLUMNS)
    def test_null_decodes_as_void(self, column_type: ColumnType) -> None:
        assert decode_value(None, column_type) == VOID

    def test_int8_is_lossless(self) -> None:
        big = 2**62 + 7
        assert decode_value(big, ColumnType.INT8) == Int(big)

    def test_bytea_memoryview(self) -> None:
        assert decode_value(memoryview(b"ab"), ColumnType.BYTEA) == Bytes(b"ab")

    def test_wrong_python_type_is_not_coerced(self) -> None:
        with pytest.raises(TypeMismatchError):
            decode_value(1, ColumnType.BOOL)

    def test_unknown_tag(self) -> None:
        with pytest.raises(UnsupportedTypeError):
            decode_value(1, "numeric")  # type: ignore[arg-type]


class TestDecodeRows:
    def test_zero_rows(self) -> None:
        assert decode_rows([], [ColumnType.INT4]) == Vector(())

    def test_zero_columns(self) -> None:
        assert decode_rows([(), ()], []) == vector(Vector(()), Vector(()))

    def test_single_row_column_order(self) -> None:
        result = decode_rows([(1, "x", None)], [ColumnType.INT4, ColumnType.TEXT, ColumnType.BOOL])
        assert result == vector(vector(Int(1), String("x"), VOID))

    def test_row_order_preserved(self) -> None:
        result = decode_rows([(3,), (1,), (2,)], [ColumnType.INT4])
        assert [row[0] for row in result] == [Int(3), Int(1), Int(2)]

    def test_uniform_shape_for_single_value(self) -> None:
        result = decode_rows([(42,)], [ColumnType.INT4])
        assert result == Vector((Vector((Int(42),)),))

    def test_unsupported_column_fails_without_rows(self) -> None:
        with pytest.raises(UnsupportedTypeError) as exc_info:
            decode_rows([], [ColumnType.INT4, "date"])  # type: ignore[list-item]
        assert exc_info.value.position == 1

    def test_failure_midway_discards_everything(self) -> None:
        rows = [(True,), (False,), ("oops",)]
        with pytest.raises(TypeMismatchError):
            decode_rows(rows, [ColumnType.BOOL])

    def test_row_width_mismatch(self) -> None:
        with pytest.raises(TypeMismatchError, match="row width"):
            decode_rows([(1, 2)], [ColumnType.INT4])
