"""Protocol interfaces for tenant lookups."""

from abc import abstractmethod
from typing import Optional, Protocol, runtime_checkable

from .tenant import Tenant


@runtime_checkable
class TenantDirectory(Protocol):
    """Read-only control-plane lookup of tenant metadata."""

    @abstractmethod
    async def get_tenant_by_id(self, tenant_id: str) -> Optional[Tenant]:
        """Find a tenant by id; None when it does not exist."""
        ...

    @abstractmethod
    async def get_tenant_by_slug(self, slug: str) -> Optional[Tenant]:
        """Find a tenant by slug; None when it does not exist."""
        ...
