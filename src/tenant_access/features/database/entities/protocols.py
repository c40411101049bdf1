"""Protocol interfaces for tenant handle creation."""

from abc import abstractmethod
from typing import Protocol, runtime_checkable

from ...tenants.entities.tenant import Tenant
from .tenant_handle import TenantHandle


@runtime_checkable
class TenantHandleFactory(Protocol):
    """Opens a new handle for a tenant.

    The router owns the returned handle: it verifies it, caches it and
    eventually closes it.
    """

    @abstractmethod
    async def open(self, tenant: Tenant) -> TenantHandle:
        ...
