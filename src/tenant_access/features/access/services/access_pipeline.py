"""Request access pipeline.

Runs the access checks for a tenant-scoped request in a fixed order and
stops at the first failure:

1. a principal must be present
2. rate limiting, on endpoints that declare it
3. tenant resolution and the tenant access check
4. permission check
5. module check, on endpoints that name a module
6. tenant handle from the connection router
7. plan quota check, on endpoints that declare it

On success the caller gets an AccessContext carrying the tenant handle,
the effective permissions and the data scope helper.
"""

import logging
from typing import Optional, Sequence, Tuple

from ....core.entities import Principal
from ....core.exceptions import (
    AuthenticationRequired,
    InsufficientPermission,
    MissingTenantContext,
    ModuleNotEnabled,
    TenantAccessDenied,
    TenantNotFound,
    TenantSuspended,
)
from ...data_scope.services.data_scope_translator import DataScopeTranslator
from ...database.repositories.connection_router import TenantConnectionRouter
from ...modules.entities.protocols import ModuleAccessProvider
from ...permissions.services.permission_resolver import PermissionResolver, default_resolver
from ...quotas.services.quota_service import QuotaService
from ...rate_limit.entities.protocols import RateLimiter
from ...rate_limit.entities.rate_limit import RateLimitDecision
from ...tenants.entities.protocols import TenantDirectory
from ...tenants.entities.tenant import Tenant
from ..entities.access_context import AccessContext
from ..entities.access_request import AccessRequest
from ..entities.endpoint_policy import EndpointPolicy
from .tenant_extractors import TenantIdExtractor, TenantReference, default_extractors

logger = logging.getLogger(__name__)


class RequestAccessPipeline:
    """Composes the access guards for tenant-scoped endpoints."""

    def __init__(
        self,
        directory: TenantDirectory,
        router: TenantConnectionRouter,
        resolver: Optional[PermissionResolver] = None,
        rate_limiter: Optional[RateLimiter] = None,
        quota_service: Optional[QuotaService] = None,
        extractors: Optional[Sequence[TenantIdExtractor]] = None,
        translator: Optional[DataScopeTranslator] = None,
        module_access: Optional[ModuleAccessProvider] = None,
    ):
        self.directory = directory
        self.router = router
        self.resolver = resolver or default_resolver
        self.rate_limiter = rate_limiter
        self.quota_service = quota_service
        self.extractors = list(extractors) if extractors is not None else default_extractors()
        self.translator = translator or DataScopeTranslator(self.resolver)
        self.module_access = module_access

    async def authorize(self, request: AccessRequest, policy: Optional[EndpointPolicy] = None) -> AccessContext:
        """Run every guard for ``request`` against ``policy``."""
        policy = policy or EndpointPolicy()

        principal = request.principal
        if principal is None:
            raise AuthenticationRequired()

        rate_limit = await self._check_rate_limit(request, policy)

        reference, tenant_id = await self.locate_tenant(request)
        tenant = await self.resolve_tenant(principal, tenant_id)

        permissions = self.resolver.effective_permissions(principal)
        self._check_permissions(principal, tenant, permissions, policy)
        await self._check_module(principal, tenant, policy)

        handle = await self.router.get_handle(tenant)

        quota = None
        if policy.quota is not None and self.quota_service is not None:
            if principal.is_staff:
                logger.debug(f"Staff principal {principal.id} bypasses {policy.quota.value} quota")
            else:
                # QuotaService fails open when usage cannot be read
                quota = await self.quota_service.enforce(tenant, policy.quota, handle, request.upload_size)

        return AccessContext(
            principal=principal,
            tenant=tenant,
            tenant_handle=handle,
            permissions=permissions,
            tenant_source=reference.source,
            translator=self.translator,
            quota=quota,
            rate_limit=rate_limit,
        )

    async def _check_rate_limit(self, request: AccessRequest, policy: EndpointPolicy) -> Optional[RateLimitDecision]:
        if not policy.rate_limited or self.rate_limiter is None:
            return None
        key = request.client_address or "unknown"
        return await self.rate_limiter.enforce(key)

    async def locate_tenant(self, request: AccessRequest) -> Tuple[TenantReference, str]:
        """Find the tenant id a request targets, trying extractors in order.

        Subdomain slugs that match no tenant are skipped so that later
        extractors, typically the principal's own tenant, still apply.
        """
        for extractor in self.extractors:
            reference = extractor(request)
            if reference is None:
                continue
            if not reference.is_slug:
                return reference, reference.value

            tenant = await self.directory.get_tenant_by_slug(reference.value)
            if tenant is not None:
                return reference, tenant.id
            logger.debug(f"Subdomain {reference.value!r} matches no tenant, trying next source")

        raise MissingTenantContext()

    async def resolve_tenant(self, principal: Principal, tenant_id: str) -> Tenant:
        """Turn a tenant id into an available tenant the principal may act on."""
        self.check_tenant_access(principal, tenant_id)

        tenant = await self.directory.get_tenant_by_id(tenant_id)
        if tenant is None:
            raise TenantNotFound(tenant_id)

        try:
            tenant.ensure_available()
        except TenantSuspended:
            await self.router.invalidate(tenant.id)
            raise

        return tenant

    def check_tenant_access(self, principal: Principal, tenant_id: str) -> None:
        if principal.is_staff:
            if not principal.is_affiliated_with(tenant_id):
                logger.info(
                    f"Staff principal {principal.id} ({principal.system_role.value}) acting on tenant {tenant_id}"
                )
            return

        if not principal.is_affiliated_with(tenant_id):
            logger.warning(
                f"Tenant access denied: principal {principal.id} "
                f"(tenant {principal.tenant_id}) requested tenant {tenant_id}"
            )
            raise TenantAccessDenied(principal.id, tenant_id)

    def _check_permissions(self, principal: Principal, tenant: Tenant, permissions, policy: EndpointPolicy) -> None:
        if not policy.permissions:
            return

        if policy.require_all:
            allowed = self.resolver.has_all(permissions, policy.permissions)
        else:
            allowed = self.resolver.has_any(permissions, policy.permissions)

        if not allowed:
            missing = self.resolver.missing(permissions, policy.permissions)
            logger.info(
                f"Permission denied for principal {principal.id} on tenant {tenant.id}: "
                f"missing {sorted(missing)}"
            )
            raise InsufficientPermission(missing, require_all=policy.require_all)

    async def _check_module(self, principal: Principal, tenant: Tenant, policy: EndpointPolicy) -> None:
        if policy.module is None or self.module_access is None:
            return

        if principal.is_staff:
            logger.debug(f"Staff principal {principal.id} bypasses module {policy.module}")
            return

        if not await self.module_access.is_module_enabled(tenant, policy.module):
            logger.info(f"Module {policy.module} not enabled for tenant {tenant.id}")
            raise ModuleNotEnabled(policy.module, tenant.id)
