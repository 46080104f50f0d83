"""dyn-query exception hierarchy.

Every failure leaves the package as an ``AdapterError``. Raw driver
exceptions are wrapped in ``DriverError`` and chained, never exposed bare.
"""

from __future__ import annotations

from typing import Any


class AdapterError(Exception):
    """Base exception for all dyn-query errors."""


# --- Driver ---


class DriverError(AdapterError):
    """Raised when the database driver reports a failure.

    The driver exception is kept as ``driver_error`` and as ``__cause__``.
    """

    def __init__(self, driver_error: BaseException, detail: str | None = None) -> None:
        self.driver_error = driver_error
        self.sqlstate: str | None = getattr(driver_error, "sqlstate", None)
        message = detail or str(driver_error).strip() or type(driver_error).__name__
        if self.sqlstate:
            message = f"[{self.sqlstate}] {message}"
        super().__init__(message)


class ConnectionError(DriverError):  # noqa: A001
    """Raised on connection and authentication failures."""


# --- Shape ---


class TypeMismatchError(AdapterError):
    """Raised when a value has the wrong variant for the operation."""

    def __init__(self, expected: str, actual: str, detail: str | None = None) -> None:
        self.expected = expected
        self.actual = actual
        message = f"Type mismatch: expected {expected}, got {actual}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class ParameterBindingError(TypeMismatchError):
    """Raised when placeholders and supplied parameters do not line up."""

    def __init__(self, referenced: int, supplied: int, detail: str) -> None:
        self.referenced = referenced
        self.supplied = supplied
        super().__init__(
            f"{referenced} parameter(s)",
            f"{supplied} parameter(s)",
            detail,
        )


class UnsupportedTypeError(AdapterError):
    """Raised when no encoding or decoding rule exists for a type."""

    def __init__(
        self,
        type_name: str,
        *,
        position: int | None = None,
        column: str | None = None,
    ) -> None:
        self.type_name = type_name
        self.position = position
        self.column = column
        where: list[str] = []
        if column is not None:
            where.append(f"column '{column}'")
        if position is not None:
            where.append(f"position {position}")
        suffix = f" at {', '.join(where)}" if where else ""
        super().__init__(f"Unsupported type: {type_name}{suffix}")


# --- Connection layer ---


class PoolError(AdapterError):
    """Raised on connection pool failures."""


class ConfigurationError(AdapterError):
    """Raised for invalid engine configuration."""


def variant_name(value: Any) -> str:
    """Name used for ``value`` in type mismatch messages."""
    return type(value).__name__
