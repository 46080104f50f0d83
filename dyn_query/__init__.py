"""dyn-query - dynamic-value adapter for PostgreSQL."""

from __future__ import annotations

from dyn_query.core.connection import (
    AsyncConnectionManager,
    ConnectionConfig,
    ConnectionManager,
)
from dyn_query.core.engine import AsyncEngine, Engine
from dyn_query.core.enums import ColumnType
from dyn_query.core.exceptions import (
    AdapterError,
    ConfigurationError,
    ConnectionError,  # noqa: A004
    DriverError,
    ParameterBindingError,
    PoolError,
    TypeMismatchError,
    UnsupportedTypeError,
)
from dyn_query.core.params import ANY_NULL, AnyNull, encode_parameters
from dyn_query.core.rows import decode_row, decode_rows
from dyn_query.core.values import (
    VOID,
    Bool,
    Bytes,
    Int,
    Number,
    String,
    Value,
    Vector,
    Void,
    from_python,
    to_python,
    vector,
    vector_of,
)

__all__ = [
    # Connection
    "ConnectionConfig",
    "ConnectionManager",
    "AsyncConnectionManager",
    # Engine
    "Engine",
    "AsyncEngine",
    # Values
    "Value",
    "Bool",
    "Number",
    "Int",
    "String",
    "Bytes",
    "Void",
    "Vector",
    "VOID",
    "vector",
    "vector_of",
    "from_python",
    "to_python",
    # Encoding / decoding
    "encode_parameters",
    "AnyNull",
    "ANY_NULL",
    "decode_row",
    "decode_rows",
    # Enums
    "ColumnType",
    # Exceptions
    "AdapterError",
    "DriverError",
    "ConnectionError",
    "TypeMismatchError",
    "ParameterBindingError",
    "UnsupportedTypeError",
    "PoolError",
    "ConfigurationError",
]
