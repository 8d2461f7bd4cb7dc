"""
Shared Connection Handle

One driver instance shared by every request of the same user. Access is
always fully exclusive: table config saves mutate driver state and even
load_tables may touch it, so there is no read/write split.

Usage:
    handle = SharedConnection(connection)

    async with handle.acquire() as conn:
        tables = await conn.load_tables()
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from basable.connectors.base import BaseConnection
from basable.models.config import SourceType

logger = logging.getLogger(__name__)


class SharedConnection:
    """Exclusive-access wrapper around exactly one driver."""

    def __init__(self, connection: BaseConnection) -> None:
        self._connection = connection
        self._lock = asyncio.Lock()

    @asynccontextmanager
    async def acquire(self) -> AsyncIterator[BaseConnection]:
        """Hold the connection for the duration of the block."""
        async with self._lock:
            yield self._connection

    async def close(self) -> None:
        """Close the driver once in-flight callers have released it."""
        async with self._lock:
            await self._connection.close()
        logger.info(f"Closed shared connection {self.connection_id}")

    @property
    def connection_id(self) -> str:
        return self._connection.connection_id

    @property
    def source_type(self) -> SourceType:
        return self._connection.source_type

    @property
    def locked(self) -> bool:
        """True while a caller holds the connection."""
        return self._lock.locked()

    def __repr__(self) -> str:
        return f"<SharedConnection {self._connection!r}>"
