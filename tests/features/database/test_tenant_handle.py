"""Tests for asyncpg-backed tenant handles."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from tenant_access.features.database import AsyncPGHandleFactory, TenantHandle
from tenant_access.features.tenants import CredentialResolver, PasswordEncryption


@pytest.fixture
def connection():
    return AsyncMock()


@pytest.fixture
def pool(connection):
    pool = MagicMock()
    pool.acquire.return_value.__aenter__ = AsyncMock(return_value=connection)
    pool.acquire.return_value.__aexit__ = AsyncMock(return_value=False)
    pool.close = AsyncMock()
    pool.get_size.return_value = 3
    return pool


class TestTenantHandle:

    @pytest.mark.asyncio
    async def test_ping_runs_round_trip_query(self, pool, connection):
        handle = TenantHandle("t1", pool)

        await handle.ping()

        connection.fetchval.assert_awaited_once_with("SELECT 1")

    @pytest.mark.asyncio
    async def test_ping_propagates_failure(self, pool, connection):
        connection.fetchval.side_effect = ConnectionError("reset")

        with pytest.raises(ConnectionError):
            await TenantHandle("t1", pool).ping()

    @pytest.mark.asyncio
    async def test_query_helpers(self, pool, connection):
        connection.fetch.return_value = [{"id": 1}]
        connection.execute.return_value = "UPDATE 1"
        handle = TenantHandle("t1", pool)

        assert await handle.fetch("SELECT id FROM customers WHERE x = $1", 5) == [{"id": 1}]
        assert await handle.execute("UPDATE customers SET x = 1") == "UPDATE 1"
        connection.fetch.assert_awaited_once_with("SELECT id FROM customers WHERE x = $1", 5)

    @pytest.mark.asyncio
    async def test_close_is_idempotent(self, pool):
        handle = TenantHandle("t1", pool)
        assert handle.size == 3

        await handle.close()
        await handle.close()

        pool.close.assert_awaited_once()
        assert handle.is_closed
        assert handle.size == 0
        assert "closed" in repr(handle)


class TestAsyncPGHandleFactory:

    @pytest.mark.asyncio
    async def test_open_creates_pool_for_tenant(self, pool, tenant_one):
        factory = AsyncPGHandleFactory(
            CredentialResolver(PasswordEncryption("key")),
            min_size=2,
            max_size=4,
        )

        with patch(
            "tenant_access.features.database.repositories.handle_factory.asyncpg.create_pool",
            new_callable=AsyncMock,
            return_value=pool,
        ) as create_pool:
            handle = await factory.open(tenant_one)

        assert handle.tenant_id == "t1"
        kwargs = create_pool.await_args.kwargs
        assert kwargs["host"] == "db-t1.internal"
        assert kwargs["database"] == "tenant_acme"
        assert kwargs["user"] == "acme_user"
        assert kwargs["min_size"] == 2
        assert kwargs["max_size"] == 4
