"""Tenant-bound data access handle."""

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, List, Optional

import asyncpg

from ..utils.queries import BASIC_HEALTH_CHECK

logger = logging.getLogger(__name__)


class TenantHandle:
    """An asyncpg pool bound to exactly one tenant database.

    Handles are created and cached by the connection router. Business code
    receives them through the access context and must not close them.
    """

    def __init__(self, tenant_id: str, pool: asyncpg.Pool):
        self._tenant_id = tenant_id
        self._pool = pool
        self._closed = False

    @property
    def tenant_id(self) -> str:
        return self._tenant_id

    @property
    def is_closed(self) -> bool:
        return self._closed

    @property
    def size(self) -> int:
        """Current number of connections in the pool."""
        return self._pool.get_size() if not self._closed else 0

    @asynccontextmanager
    async def connection(self) -> AsyncIterator[asyncpg.Connection]:
        """Acquire a connection for several statements."""
        async with self._pool.acquire() as conn:
            yield conn

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[asyncpg.Connection]:
        """Acquire a connection inside a transaction."""
        async with self._pool.acquire() as conn:
            async with conn.transaction():
                yield conn

    async def fetch(self, query: str, *args: Any) -> List[asyncpg.Record]:
        async with self._pool.acquire() as conn:
            return await conn.fetch(query, *args)

    async def fetchrow(self, query: str, *args: Any) -> Optional[asyncpg.Record]:
        async with self._pool.acquire() as conn:
            return await conn.fetchrow(query, *args)

    async def fetchval(self, query: str, *args: Any) -> Any:
        async with self._pool.acquire() as conn:
            return await conn.fetchval(query, *args)

    async def execute(self, query: str, *args: Any) -> str:
        async with self._pool.acquire() as conn:
            return await conn.execute(query, *args)

    async def ping(self) -> None:
        """Run the trivial round-trip query; raises on any failure."""
        await self.fetchval(BASIC_HEALTH_CHECK)

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        await self._pool.close()
        logger.info(f"Closed tenant handle for {self._tenant_id}")

    def __repr__(self) -> str:
        state = "closed" if self._closed else "open"
        return f"TenantHandle(tenant_id={self._tenant_id!r}, {state})"
