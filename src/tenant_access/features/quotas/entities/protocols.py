"""Protocol interfaces for plan limits and usage metering."""

from abc import abstractmethod
from typing import Optional, Protocol, runtime_checkable

from ...database.entities.tenant_handle import TenantHandle
from ...tenants.entities.tenant import Tenant
from .quota import PlanLimits, QuotaKind


@runtime_checkable
class UsageProvider(Protocol):
    """Source of plan limits and current usage figures."""

    @abstractmethod
    async def get_limits(self, tenant: Tenant) -> PlanLimits:
        ...

    @abstractmethod
    async def get_usage(self, tenant: Tenant, kind: QuotaKind, handle: Optional[TenantHandle]) -> float:
        """Current usage; bytes for storage, a count otherwise."""
        ...
