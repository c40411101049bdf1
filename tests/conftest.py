"""Pytest configuration and fixtures for tenant-access-core tests."""

import asyncio
from typing import List, Optional

import pytest

from tenant_access.core.entities import Principal
from tenant_access.features.access.services.access_pipeline import RequestAccessPipeline
from tenant_access.features.database.repositories.connection_router import TenantConnectionRouter
from tenant_access.features.tenants.entities.tenant import Tenant
from tenant_access.features.tenants.repositories.tenant_directory import InMemoryTenantDirectory


class FakeHandle:
    """Stands in for a TenantHandle without a database behind it."""

    def __init__(self, tenant_id: str, ping_error: Optional[BaseException] = None, close_error: Optional[BaseException] = None):
        self.tenant_id = tenant_id
        self.ping_error = ping_error
        self.close_error = close_error
        self.ping_calls = 0
        self.close_calls = 0
        self.is_closed = False

    async def ping(self) -> None:
        self.ping_calls += 1
        if self.ping_error is not None:
            raise self.ping_error

    async def close(self) -> None:
        self.close_calls += 1
        self.is_closed = True
        if self.close_error is not None:
            raise self.close_error

    async def fetchval(self, query, *args):
        return 0


class FakeHandleFactory:
    """Counts opens and hands out FakeHandles."""

    def __init__(self, delay: float = 0.0, open_error: Optional[BaseException] = None, bind_to: Optional[str] = None):
        self.delay = delay
        self.open_error = open_error
        self.bind_to = bind_to
        self.ping_error: Optional[BaseException] = None
        self.close_error: Optional[BaseException] = None
        self.open_calls = 0
        self.handles: List[FakeHandle] = []

    async def open(self, tenant: Tenant) -> FakeHandle:
        self.open_calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.open_error is not None:
            raise self.open_error
        handle = FakeHandle(self.bind_to or tenant.id, ping_error=self.ping_error, close_error=self.close_error)
        self.handles.append(handle)
        return handle


@pytest.fixture
def tenant_one():
    return Tenant(
        id="t1",
        slug="acme",
        host="db-t1.internal",
        port=5432,
        database_name="tenant_acme",
        db_username="acme_user",
        credentials_ref="secret-ref",
    )


@pytest.fixture
def tenant_two():
    return Tenant(id="t2", slug="globex", host="db-t2.internal", port=5432, database_name="tenant_globex")


@pytest.fixture
def suspended_tenant():
    return Tenant(id="t3", slug="initech", database_name="tenant_initech", is_suspended=True)


@pytest.fixture
def directory(tenant_one, tenant_two, suspended_tenant):
    return InMemoryTenantDirectory(tenant_one, tenant_two, suspended_tenant)


@pytest.fixture
def handle_factory():
    return FakeHandleFactory()


@pytest.fixture
def router(handle_factory, directory):
    return TenantConnectionRouter(handle_factory, directory=directory, connect_timeout=1.0)


@pytest.fixture
def pipeline(directory, router):
    return RequestAccessPipeline(directory=directory, router=router)


@pytest.fixture
def sales_principal():
    return Principal.build(id="user-sales", system_role="user", tenant_id="t1", tenant_role="sales")


@pytest.fixture
def manager_principal():
    return Principal.build(id="user-manager", system_role="user", tenant_id="t1", tenant_role="manager")


@pytest.fixture
def staff_principal():
    return Principal.build(id="staff-1", system_role="support", tenant_id=None)


@pytest.fixture
def make_handle_factory():
    """Build a FakeHandleFactory with custom behaviour."""
    return FakeHandleFactory
