"""Dynamic value model.

A closed set of immutable variants that cross the adapter boundary in both
directions: parameters in, rows out. ``Vector`` is the only recursive
variant. ``Void`` stands for both a missing value and SQL NULL.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from typing import Any, Union

from dyn_query.core.exceptions import TypeMismatchError, UnsupportedTypeError, variant_name

INT_MIN = -(2**63)
INT_MAX = 2**63 - 1


@dataclass(frozen=True)
class Bool:
    value: bool

    def __post_init__(self) -> None:
        if not isinstance(self.value, bool):
            raise TypeMismatchError("bool", variant_name(self.value), "Bool payload")


@dataclass(frozen=True)
class Number:
    """64-bit float. Accepts ``int`` input and stores it as ``float``."""

    value: float

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, (int, float)):
            raise TypeMismatchError("float", variant_name(self.value), "Number payload")
        try:
            as_float = float(self.value)
        except OverflowError:
            raise TypeMismatchError(
                "float", variant_name(self.value), "Number payload out of range"
            ) from None
        object.__setattr__(self, "value", as_float)


@dataclass(frozen=True)
class Int:
    """Signed 64-bit integer."""

    value: int

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise TypeMismatchError("int", variant_name(self.value), "Int payload")
        if not INT_MIN <= self.value <= INT_MAX:
            raise TypeMismatchError(
                "64-bit signed int", str(self.value), "Int payload out of range"
            )


@dataclass(frozen=True)
class String:
    value: str

    def __post_init__(self) -> None:
        if not isinstance(self.value, str):
            raise TypeMismatchError("str", variant_name(self.value), "String payload")


@dataclass(frozen=True)
class Bytes:
    """Byte blob. Any bytes-like input is copied into immutable ``bytes``."""

    value: bytes

    def __post_init__(self) -> None:
        if not isinstance(self.value, (bytes, bytearray, memoryview)):
            raise TypeMismatchError("bytes", variant_name(self.value), "Bytes payload")
        object.__setattr__(self, "value", bytes(self.value))


@dataclass(frozen=True)
class Void:
    """No value / SQL NULL."""


@dataclass(frozen=True)
class Vector:
    """Ordered sequence of values: a parameter list, a row, or a result set."""

    items: tuple[Value, ...] = field(default=())

    def __post_init__(self) -> None:
        items = tuple(self.items)
        for index, item in enumerate(items):
            if not isinstance(item, VALUE_TYPES):
                raise TypeMismatchError(
                    "Value", variant_name(item), f"Vector item at position {index}"
                )
        object.__setattr__(self, "items", items)

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[Value]:
        return iter(self.items)

    def __getitem__(self, index: int) -> Value:
        return self.items[index]


Value = Union[Bool, Number, Int, String, Bytes, Void, Vector]

VALUE_TYPES: tuple[type, ...] = (Bool, Number, Int, String, Bytes, Void, Vector)

VOID = Void()


def vector(*items: Value) -> Vector:
    """Shorthand for ``Vector((item, ...))``."""
    return Vector(items)


def from_python(obj: Any) -> Value:
    """Convert a plain Python object into a dynamic value.

    ``None`` becomes ``VOID``; lists and tuples become ``Vector``
    recursively. Values pass through unchanged.

    Raises:
        UnsupportedTypeError: If ``obj`` has no dynamic value counterpart.
    """
    if isinstance(obj, VALUE_TYPES):
        return obj  # type: ignore[return-value]
    if obj is None:
        return VOID
    # bool before int: bool is an int subclass
    if isinstance(obj, bool):
        return Bool(obj)
    if isinstance(obj, int):
        return Int(obj)
    if isinstance(obj, float):
        return Number(obj)
    if isinstance(obj, str):
        return String(obj)
    if isinstance(obj, (bytes, bytearray, memoryview)):
        return Bytes(obj)
    if isinstance(obj, (list, tuple)):
        return Vector(tuple(from_python(item) for item in obj))
    raise UnsupportedTypeError(variant_name(obj))


def to_python(value: Value) -> Any:
    """Convert a dynamic value back into plain Python objects."""
    if isinstance(value, Void):
        return None
    if isinstance(value, Vector):
        return [to_python(item) for item in value.items]
    if isinstance(value, (Bool, Number, Int, String, Bytes)):
        return value.value
    raise UnsupportedTypeError(variant_name(value))


def vector_of(objs: Iterable[Any]) -> Vector:
    """Build a flat ``Vector`` from an iterable of plain Python objects."""
    return Vector(tuple(from_python(obj) for obj in objs))
