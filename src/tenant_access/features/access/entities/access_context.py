"""Resolved access context handed to business logic."""

from dataclasses import dataclass, field
from typing import FrozenSet, Optional, Union

from ....config.constants import TenantIdSource
from ....core.entities import Principal
from ...data_scope.entities.entity_config import EntityKind
from ...data_scope.entities.predicate import Predicate
from ...data_scope.services.data_scope_translator import DataScopeTranslator, Filters
from ...database.entities.tenant_handle import TenantHandle
from ...quotas.entities.quota import QuotaCheckResult
from ...rate_limit.entities.rate_limit import RateLimitDecision
from ...tenants.entities.tenant import Tenant


@dataclass(frozen=True)
class AccessContext:
    """Result of a successful pass through the access pipeline."""

    principal: Principal
    tenant: Tenant
    tenant_handle: TenantHandle
    permissions: FrozenSet[str]
    tenant_source: TenantIdSource
    translator: DataScopeTranslator = field(repr=False, compare=False)
    quota: Optional[QuotaCheckResult] = None
    rate_limit: Optional[RateLimitDecision] = None

    @property
    def tenant_id(self) -> str:
        return self.tenant.id

    @property
    def can_view_all(self) -> bool:
        return self.translator.resolver.can_view_all(self.permissions)

    def has_permission(self, permission: str) -> bool:
        return self.translator.resolver.has_permission(self.permissions, permission)

    def scope(self, entity_kind: Union[EntityKind, str], extra_filters: Filters = None) -> Predicate:
        """Ownership filter for ``entity_kind`` combined with ``extra_filters``."""
        return self.translator.scope_for(entity_kind, self.permissions, self.principal.id, extra_filters)
