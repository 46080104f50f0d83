"""Connection pools issuing exclusive leases.

A connection is handed to exactly one caller at a time. Acquisition waits
up to ``timeout`` seconds for a free connection, then raises ``PoolError``.
"""

from __future__ import annotations

import asyncio
import logging
import queue
import threading
from collections.abc import Awaitable, Callable
from typing import Any

from dyn_query.core.exceptions import PoolError

logger = logging.getLogger(__name__)


class LeasePool:
    """Thread-safe fixed-size pool for blocking connections.

    Args:
        connections: Open connections owned by the pool from now on.
        timeout: Seconds ``acquire`` waits for an idle connection.
        close_connection: Called for each connection when the pool closes.
    """

    def __init__(
        self,
        connections: list[Any],
        timeout: float,
        close_connection: Callable[[Any], None],
    ) -> None:
        self._timeout = timeout
        self._size = len(connections)
        self._close_connection = close_connection
        self._idle: queue.LifoQueue[Any] = queue.LifoQueue()
        self._closed = False
        self._lock = threading.Lock()
        for connection in connections:
            self._idle.put(connection)

    @property
    def size(self) -> int:
        return self._size

    @property
    def closed(self) -> bool:
        return self._closed

    def __len__(self) -> int:
        """Number of idle connections."""
        return self._idle.qsize()

    def acquire(self) -> Any:
        if self._closed:
            raise PoolError("Pool is closed")
        try:
            return self._idle.get(timeout=self._timeout)
        except queue.Empty:
            raise PoolError(
                f"No connection available within {self._timeout}s "
                f"(pool size {self._size})"
            ) from None

    def release(self, connection: Any) -> None:
        with self._lock:
            if not self._closed:
                self._idle.put(connection)
                return
        # Lease outlived the pool
        self._close_connection(connection)

    def close(self) -> None:
        """Close idle connections. Connections still leased close on release."""
        with self._lock:
            self._closed = True
            while True:
                try:
                    connection = self._idle.get_nowait()
                except queue.Empty:
                    break
                self._close_connection(connection)
        logger.debug("Closed connection pool of size %d", self._size)


class AsyncLeasePool:
    """Fixed-size pool for asyncio connections."""

    def __init__(
        self,
        connections: list[Any],
        timeout: float,
        close_connection: Callable[[Any], Awaitable[None]],
    ) -> None:
        self._timeout = timeout
        self._size = len(connections)
        self._close_connection = close_connection
        self._idle: asyncio.LifoQueue[Any] = asyncio.LifoQueue()
        self._closed = False
        for connection in connections:
            self._idle.put_nowait(connection)

    @property
    def size(self) -> int:
        return self._size

    @property
    def closed(self) -> bool:
        return self._closed

    def __len__(self) -> int:
        return self._idle.qsize()

    async def acquire(self) -> Any:
        if self._closed:
            raise PoolError("Pool is closed")
        try:
            return await asyncio.wait_for(self._idle.get(), timeout=self._timeout)
        except asyncio.TimeoutError:
            raise PoolError(
                f"No connection available within {self._timeout}s "
                f"(pool size {self._size})"
            ) from None

    async def release(self, connection: Any) -> None:
        if self._closed:
            await self._close_connection(connection)
            return
        self._idle.put_nowait(connection)

    async def close(self) -> None:
        self._closed = True
        while not self._idle.empty():
            await self._close_connection(self._idle.get_nowait())
        logger.debug("Closed async connection pool of size %d", self._size)
