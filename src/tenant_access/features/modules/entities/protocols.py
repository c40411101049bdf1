"""Protocol interfaces for module enablement lookups."""

from abc import abstractmethod
from typing import Protocol, runtime_checkable

from ...tenants.entities.tenant import Tenant


@runtime_checkable
class ModuleAccessProvider(Protocol):
    """Answers whether a tenant may use a product module."""

    @abstractmethod
    async def is_module_enabled(self, tenant: Tenant, module: str) -> bool:
        """True when ``module`` is enabled for ``tenant`` right now."""
        ...
