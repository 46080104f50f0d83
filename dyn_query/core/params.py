"""Parameter encoding and placeholder normalization.

Turns a ``Vector`` of dynamic values into the positional bind list the
driver expects, and rewrites PostgreSQL ``$n`` placeholders into the
driver's ``%s`` format. Placeholders inside literals, quoted
identifiers and comments are left alone; ``%`` is escaped everywhere.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from functools import lru_cache
from typing import Any

from dyn_query.core.enums import ColumnType
from dyn_query.core.exceptions import (
    ParameterBindingError,
    TypeMismatchError,
    UnsupportedTypeError,
    variant_name,
)
from dyn_query.core.values import Bool, Bytes, Int, Number, String, Value, Vector, Void

# Matches $1, $2, ... but not $$ (dollar quoting) and not inside identifiers
_PARAM_PATTERN = re.compile(r"(?<![\w$])\$(\d+)(?!\w)")

# Segments copied through untouched apart from % escaping: escape strings,
# string literals, quoted identifiers, dollar-quoted bodies and comments
_SKIPPED_PATTERN = re.compile(
    r"""
    (?<![\w$])[Ee]'(?:[^'\\]|\\.|'')*'
    | '(?:[^']|'')*'
    | "(?:[^"]|"")*"
    | \$((?:[A-Za-z_]\w*)?)\$.*?\$\1\$
    | --[^\n]*
    | /\*.*?\*/
    """,
    re.VERBOSE | re.DOTALL,
)


class AnyNull:
    """NULL parameter that is acceptable for every server column type.

    The encoder binds by position without knowing which type the server
    expects there, so a caller's ``Void`` needs a bind value that passes
    any type check and always renders as NULL. Adapters register a driver
    dumper for this class.
    """

    __slots__ = ()

    def accepts(self, column_type: ColumnType) -> bool:
        return True

    def __repr__(self) -> str:
        return "ANY_NULL"


ANY_NULL = AnyNull()


_ENCODERS: dict[type, Callable[[Any], Any]] = {
    Bool: lambda v: v.value,
    Number: lambda v: v.value,
    Int: lambda v: v.value,
    String: lambda v: v.value,
    Bytes: lambda v: v.value,
    Void: lambda v: ANY_NULL,
}


def encode_parameters(values: Value) -> list[Any]:
    """Encode a ``Vector`` of values into a positional bind list.

    Args:
        values: Must be a ``Vector``; even a single parameter is a list.

    Returns:
        A fresh list of driver-native bind values.

    Raises:
        TypeMismatchError: If ``values`` is not a ``Vector``.
        UnsupportedTypeError: If an element has no bind rule (nested
            ``Vector`` or a non-value object).
    """
    if not isinstance(values, Vector):
        raise TypeMismatchError("Vector", variant_name(values), "parameters")

    bound: list[Any] = []
    for position, item in enumerate(values.items):
        encoder = _ENCODERS.get(type(item))
        if encoder is None:
            raise UnsupportedTypeError(variant_name(item), position=position)
        bound.append(encoder(item))
    return bound


def normalize_params(sql: str, params: list[Any]) -> tuple[str, list[Any] | None]:
    """Convert ``$n`` placeholders to ``%s`` and order ``params`` to match.

    Args:
        sql: SQL text with PostgreSQL-style ``$1, $2, ...`` placeholders.
        params: Encoded bind values, ``$1`` being ``params[0]``.

    Returns:
        ``(sql, bound)`` ready for the driver. With no parameters the SQL is
        returned untouched and ``bound`` is ``None``.

    Raises:
        ParameterBindingError: If a placeholder has no parameter, or a
            parameter is never referenced.
    """
    if not params:
        return sql, None

    converted, order = _convert_to_format(sql)
    supplied = len(params)
    referenced = max(order, default=0)

    if 0 in order:
        raise ParameterBindingError(referenced, supplied, "placeholders start at $1")
    if referenced > supplied:
        raise ParameterBindingError(
            referenced, supplied, f"query references ${referenced}"
        )
    unused = sorted(set(range(1, supplied + 1)) - set(order))
    if unused:
        raise ParameterBindingError(
            referenced, supplied, f"parameter ${unused[0]} is never referenced"
        )

    return converted, [params[index - 1] for index in order]


@lru_cache(maxsize=256)
def _convert_to_format(sql: str) -> tuple[str, tuple[int, ...]]:
    """Rewrite ``$n`` to ``%s`` outside literals and comments, escaping ``%``.

    Nested block comments are not tracked; the first ``*/`` ends one.
    """
    parts: list[str] = []
    order: list[int] = []
    last_end = 0

    def _replace(match: re.Match[str]) -> str:
        order.append(int(match.group(1)))
        return "%s"

    def _code(segment: str) -> str:
        return _PARAM_PATTERN.sub(_replace, segment.replace("%", "%%"))

    for match in _SKIPPED_PATTERN.finditer(sql):
        start, end = match.span()
        if start > last_end:
            parts.append(_code(sql[last_end:start]))
        # Kept as-is apart from % escaping
        parts.append(match.group().replace("%", "%%"))
        last_end = end

    if last_end < len(sql):
        parts.append(_code(sql[last_end:]))

    return "".join(parts), tuple(order)
