"""Connection configuration and management.

ConnectionConfig is a Pydantic model for type-safe connection config.
ConnectionManager and AsyncConnectionManager lease one pooled connection
per call through the adapter protocols.
"""

from __future__ import annotations

import asyncio
import importlib
import threading
from contextlib import asynccontextmanager, contextmanager
from typing import Any

from pydantic import BaseModel, Field, model_validator

from dyn_query.core.exceptions import ConfigurationError


class ConnectionConfig(BaseModel):
    """Configuration for database connections.

    Either ``conninfo`` (a libpq connection string) or ``database`` must be
    set. Individual fields are appended to ``conninfo`` when both are given.
    """

    driver: str = "postgresql"
    conninfo: str | None = None
    host: str | None = None
    port: int | None = None
    user: str | None = None
    password: str | None = None
    database: str | None = None
    pool_size: int = Field(default=5, ge=1)
    pool_timeout: float = Field(default=30, gt=0)
    extra: dict[str, Any] = {}

    @model_validator(mode="after")
    def _require_target(self) -> ConnectionConfig:
        if not self.conninfo and not self.database:
            raise ValueError("either 'conninfo' or 'database' is required")
        return self


# Adapter module mapping: driver name → (module_path, sync_class, async_class)
_ADAPTER_MAP: dict[str, tuple[str, str, str]] = {
    "postgresql": (
        "dyn_query.adapters.postgresql",
        "PostgresqlSyncAdapter",
        "PostgresqlAsyncAdapter",
    ),
}


def _load_adapter(driver: str, kind: str) -> Any:
    """Load a sync or async adapter by driver name."""
    driver_lower = driver.lower()
    if driver_lower not in _ADAPTER_MAP:
        raise ConfigurationError(f"Unsupported database driver: {driver}")

    module_path, sync_cls_name, async_cls_name = _ADAPTER_MAP[driver_lower]
    cls_name = sync_cls_name if kind == "sync" else async_cls_name

    try:
        module = importlib.import_module(module_path)
        return getattr(module, cls_name)()
    except (ImportError, AttributeError) as e:
        raise ConfigurationError(f"Failed to load {kind} adapter for '{driver}': {e}") from e


class ConnectionManager:
    """Synchronous connection manager using the SyncAdapter protocol.

    Args:
        config: Connection settings.
        adapter: Adapter instance; loaded from ``config.driver`` if omitted.
    """

    def __init__(self, config: ConnectionConfig, adapter: Any | None = None) -> None:
        self.config = config
        self._adapter = adapter if adapter is not None else _load_adapter(config.driver, "sync")
        self._pool: Any = None
        self._pool_lock = threading.Lock()

    @property
    def adapter(self) -> Any:
        return self._adapter

    def initialize_pool(self) -> Any:
        """Initialize the connection pool once, even under concurrent first calls."""
        with self._pool_lock:
            if self._pool is None:
                self._pool = self._adapter.create_pool(self.config)
            return self._pool

    @contextmanager
    def get_connection(self):  # type: ignore[no-untyped-def]
        """Lease a connection from the pool for the duration of the block."""
        pool = self._pool if self._pool is not None else self.initialize_pool()
        connection = self._adapter.acquire_connection(pool)
        try:
            yield connection
        finally:
            # Released into the pool it came from, closed or not
            self._adapter.release_connection(connection, pool)

    def close_pool(self) -> None:
        """Close the connection pool."""
        with self._pool_lock:
            pool, self._pool = self._pool, None
        if pool is not None:
            self._adapter.close_pool(pool)


class AsyncConnectionManager:
    """Asynchronous connection manager using the AsyncAdapter protocol."""

    def __init__(self, config: ConnectionConfig, adapter: Any | None = None) -> None:
        self.config = config
        self._adapter = adapter if adapter is not None else _load_adapter(config.driver, "async")
        self._pool: Any = None
        self._pool_lock = asyncio.Lock()

    @property
    def adapter(self) -> Any:
        return self._adapter

    async def initialize_pool(self) -> Any:
        """Initialize the async connection pool once."""
        async with self._pool_lock:
            if self._pool is None:
                self._pool = await self._adapter.create_pool_async(self.config)
            return self._pool

    @asynccontextmanager
    async def get_connection(self):  # type: ignore[no-untyped-def]
        """Lease an async connection for the duration of the block."""
        pool = self._pool if self._pool is not None else await self.initialize_pool()
        connection = await self._adapter.acquire_connection_async(pool)
        try:
            yield connection
        finally:
            await self._adapter.release_connection_async(connection, pool)

    async def close_pool(self) -> None:
        """Close the async connection pool."""
        async with self._pool_lock:
            pool, self._pool = self._pool, None
        if pool is not None:
            await self._adapter.close_pool_async(pool)
