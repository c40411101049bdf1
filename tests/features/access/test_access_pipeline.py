"""Tests for the request access pipeline."""

from unittest.mock import AsyncMock

import pytest

from tenant_access.config.constants import TenantIdSource
from tenant_access.core.entities import Principal
from tenant_access.core.exceptions import (
    AuthenticationRequired,
    InsufficientPermission,
    MissingTenantContext,
    ModuleNotEnabled,
    QuotaExceeded,
    RateLimited,
    TenantAccessDenied,
    TenantNotFound,
    TenantSuspended,
)
from tenant_access.features.access import AccessRequest, EndpointPolicy, RequestAccessPipeline, default_extractors
from tenant_access.features.data_scope import AnyOf, FieldEquals, MATCH_ALL, MatchNone
from tenant_access.features.modules import InMemoryModuleAccessProvider
from tenant_access.features.quotas import PlanLimits, QuotaKind, QuotaService
from tenant_access.features.rate_limit import FixedWindowRateLimiter, RateLimitPolicy


class SeatUsageProvider:

    def __init__(self, max_seats: int, seats_in_use: int):
        self.limits = PlanLimits(max_seats=max_seats)
        self.seats_in_use = seats_in_use

    async def get_limits(self, tenant):
        return self.limits

    async def get_usage(self, tenant, kind, handle):
        return self.seats_in_use


def request_for(principal, tenant_id=None, **kwargs):
    path_params = {"tenantId": tenant_id} if tenant_id else {}
    return AccessRequest(principal=principal, path_params=path_params, client_address="10.0.0.1", **kwargs)


class TestTenantAccess:
    """Test cross-tenant isolation."""

    @pytest.mark.asyncio
    async def test_user_cannot_reach_other_tenant(self, pipeline, sales_principal, handle_factory, caplog):
        with pytest.raises(TenantAccessDenied) as exc_info:
            await pipeline.authorize(request_for(sales_principal, "t2"))

        assert exc_info.value.tenant_id == "t2"
        assert handle_factory.open_calls == 0
        assert "Tenant access denied" in caplog.text

    @pytest.mark.asyncio
    async def test_user_reaches_own_tenant_with_scoped_data(self, pipeline, sales_principal):
        policy = EndpointPolicy.of("crm:customers:read")

        context = await pipeline.authorize(request_for(sales_principal, "t1"), policy)

        assert context.tenant_id == "t1"
        assert context.tenant_handle.tenant_id == "t1"
        assert context.tenant_source == TenantIdSource.PATH
        assert not context.can_view_all
        assert context.scope("customers") == AnyOf((
            FieldEquals("assignedTo", "user-sales"),
            FieldEquals("createdBy", "user-sales"),
        ))
        assert isinstance(context.scope("products"), MatchNone)

    @pytest.mark.asyncio
    async def test_manager_sees_everything(self, pipeline, manager_principal):
        context = await pipeline.authorize(request_for(manager_principal, "t1"), EndpointPolicy.of("crm:read"))

        assert context.can_view_all
        assert context.scope("customers") == MATCH_ALL

    @pytest.mark.asyncio
    async def test_staff_may_act_on_any_tenant(self, pipeline, staff_principal):
        context = await pipeline.authorize(request_for(staff_principal, "t2"))

        assert context.tenant_id == "t2"
        assert context.tenant_handle.tenant_id == "t2"

    @pytest.mark.asyncio
    async def test_principal_tenant_is_the_fallback(self, pipeline, sales_principal):
        context = await pipeline.authorize(request_for(sales_principal))

        assert context.tenant_id == "t1"
        assert context.tenant_source == TenantIdSource.PRINCIPAL


class TestSubdomainResolution:
    """Test tenant resolution from the request host."""

    @pytest.fixture
    def subdomain_pipeline(self, directory, router):
        return RequestAccessPipeline(
            directory=directory,
            router=router,
            extractors=default_extractors(subdomain_extraction=True),
        )

    @pytest.mark.asyncio
    async def test_subdomain_slug_is_resolved(self, subdomain_pipeline, sales_principal):
        request = AccessRequest(principal=sales_principal, host="acme.app.example.com")

        context = await subdomain_pipeline.authorize(request)

        assert context.tenant_id == "t1"
        assert context.tenant_source == TenantIdSource.SUBDOMAIN

    @pytest.mark.asyncio
    async def test_subdomain_of_other_tenant_is_denied(self, subdomain_pipeline, sales_principal):
        request = AccessRequest(principal=sales_principal, host="globex.app.example.com")

        with pytest.raises(TenantAccessDenied):
            await subdomain_pipeline.authorize(request)

    @pytest.mark.parametrize("host", [
        "nobody.app.example.com",
        "app.example.com",
        "10.0.0.5:8000",
        "192.168.1.10",
    ])
    @pytest.mark.asyncio
    async def test_unmatched_host_falls_back_to_principal_tenant(self, subdomain_pipeline, sales_principal, host):
        context = await subdomain_pipeline.authorize(AccessRequest(principal=sales_principal, host=host))

        assert context.tenant_id == "t1"
        assert context.tenant_source == TenantIdSource.PRINCIPAL

    @pytest.mark.asyncio
    async def test_unmatched_host_without_fallback(self, subdomain_pipeline, staff_principal):
        request = AccessRequest(principal=staff_principal, host="nobody.app.example.com")

        with pytest.raises(MissingTenantContext):
            await subdomain_pipeline.authorize(request)

    @pytest.mark.asyncio
    async def test_host_is_ignored_by_default(self, pipeline, sales_principal):
        context = await pipeline.authorize(AccessRequest(principal=sales_principal, host="globex.app.example.com"))

        assert context.tenant_id == "t1"
        assert context.tenant_source == TenantIdSource.PRINCIPAL


class TestPipelineFailures:
    """Test the guards that stop a request."""

    @pytest.mark.asyncio
    async def test_missing_principal(self, pipeline, handle_factory):
        with pytest.raises(AuthenticationRequired):
            await pipeline.authorize(AccessRequest(path_params={"tenantId": "t1"}))

        assert handle_factory.open_calls == 0

    @pytest.mark.asyncio
    async def test_missing_tenant(self, pipeline, staff_principal):
        with pytest.raises(MissingTenantContext):
            await pipeline.authorize(AccessRequest(principal=staff_principal))

    @pytest.mark.asyncio
    async def test_unknown_tenant(self, pipeline, staff_principal):
        with pytest.raises(TenantNotFound):
            await pipeline.authorize(request_for(staff_principal, "t404"))

    @pytest.mark.asyncio
    async def test_suspended_tenant(self, pipeline, router, handle_factory):
        principal = Principal.build(id="u3", tenant_id="t3", tenant_role="admin")

        with pytest.raises(TenantSuspended):
            await pipeline.authorize(request_for(principal, "t3"))

        assert router.live_handle_count == 0
        assert handle_factory.open_calls == 0

    @pytest.mark.asyncio
    async def test_insufficient_permission(self, pipeline, sales_principal, handle_factory):
        policy = EndpointPolicy.of("orders:approve", "accounting:read")

        with pytest.raises(InsufficientPermission) as exc_info:
            await pipeline.authorize(request_for(sales_principal, "t1"), policy)

        assert exc_info.value.missing == ["accounting:read", "orders:approve"]
        assert handle_factory.open_calls == 0

    @pytest.mark.asyncio
    async def test_any_of_permissions(self, pipeline, sales_principal):
        policy = EndpointPolicy.of("orders:approve", "orders:read")

        context = await pipeline.authorize(request_for(sales_principal, "t1"), policy)

        assert context.has_permission("orders:read")

    @pytest.mark.asyncio
    async def test_require_all_permissions(self, pipeline, sales_principal):
        policy = EndpointPolicy.of("orders:approve", "orders:read", require_all=True)

        with pytest.raises(InsufficientPermission) as exc_info:
            await pipeline.authorize(request_for(sales_principal, "t1"), policy)

        assert exc_info.value.missing == ["orders:approve"]


class TestRateLimiting:

    @pytest.mark.asyncio
    async def test_rate_limit_short_circuits(self, router, sales_principal):
        directory = AsyncMock()
        limiter = FixedWindowRateLimiter(RateLimitPolicy(max_attempts=1, window_seconds=60))
        pipeline = RequestAccessPipeline(directory=directory, router=router, rate_limiter=limiter)
        await limiter.check("10.0.0.1")

        with pytest.raises(RateLimited):
            await pipeline.authorize(request_for(sales_principal, "t1"), EndpointPolicy.of(rate_limited=True))

        directory.get_tenant_by_id.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_endpoint_without_rate_limit(self, directory, router, sales_principal):
        limiter = FixedWindowRateLimiter(RateLimitPolicy(max_attempts=1, window_seconds=60))
        pipeline = RequestAccessPipeline(directory=directory, router=router, rate_limiter=limiter)

        for _ in range(3):
            context = await pipeline.authorize(request_for(sales_principal, "t1"))
            assert context.rate_limit is None

    @pytest.mark.asyncio
    async def test_decision_is_attached(self, directory, router, sales_principal):
        limiter = FixedWindowRateLimiter(RateLimitPolicy(max_attempts=3, window_seconds=60))
        pipeline = RequestAccessPipeline(directory=directory, router=router, rate_limiter=limiter)

        context = await pipeline.authorize(request_for(sales_principal, "t1"), EndpointPolicy.of(rate_limited=True))

        assert context.rate_limit.allowed
        assert context.rate_limit.remaining == 2


class TestQuotas:

    @pytest.mark.asyncio
    async def test_quota_breach(self, directory, router, manager_principal):
        pipeline = RequestAccessPipeline(
            directory=directory,
            router=router,
            quota_service=QuotaService(SeatUsageProvider(max_seats=2, seats_in_use=2)),
        )

        with pytest.raises(QuotaExceeded):
            await pipeline.authorize(
                request_for(manager_principal, "t1"),
                EndpointPolicy.of("users:invite", quota=QuotaKind.SEATS),
            )

    @pytest.mark.asyncio
    async def test_quota_within_limit(self, directory, router, manager_principal):
        pipeline = RequestAccessPipeline(
            directory=directory,
            router=router,
            quota_service=QuotaService(SeatUsageProvider(max_seats=5, seats_in_use=2)),
        )

        context = await pipeline.authorize(request_for(manager_principal, "t1"), EndpointPolicy.of(quota="seats"))

        assert context.quota.allowed
        assert context.quota.current == 2

    @pytest.mark.asyncio
    async def test_staff_bypass_quotas(self, directory, router, staff_principal):
        pipeline = RequestAccessPipeline(
            directory=directory,
            router=router,
            quota_service=QuotaService(SeatUsageProvider(max_seats=2, seats_in_use=9)),
        )

        context = await pipeline.authorize(request_for(staff_principal, "t1"), EndpointPolicy.of(quota=QuotaKind.SEATS))

        assert context.quota is None


class TestModuleAccess:
    """Test the product module guard."""

    @pytest.fixture
    def module_pipeline(self, directory, router):
        return RequestAccessPipeline(
            directory=directory,
            router=router,
            module_access=InMemoryModuleAccessProvider({"t1": ["crm"]}),
        )

    @pytest.mark.asyncio
    async def test_enabled_module(self, module_pipeline, sales_principal):
        policy = EndpointPolicy.of("crm:customers:read", module="crm")

        context = await module_pipeline.authorize(request_for(sales_principal, "t1"), policy)

        assert context.tenant_id == "t1"

    @pytest.mark.asyncio
    async def test_disabled_module(self, module_pipeline, manager_principal, handle_factory):
        with pytest.raises(ModuleNotEnabled) as exc_info:
            await module_pipeline.authorize(request_for(manager_principal, "t1"), EndpointPolicy.of(module="orders"))

        assert exc_info.value.module == "orders"
        assert exc_info.value.details["tenant_id"] == "t1"
        assert handle_factory.open_calls == 0

    @pytest.mark.asyncio
    async def test_permission_is_checked_before_module(self, module_pipeline, sales_principal):
        policy = EndpointPolicy.of("billing:refund", module="billing")

        with pytest.raises(InsufficientPermission):
            await module_pipeline.authorize(request_for(sales_principal, "t1"), policy)

    @pytest.mark.asyncio
    async def test_staff_bypass_modules(self, directory, router, staff_principal):
        provider = AsyncMock()
        pipeline = RequestAccessPipeline(directory=directory, router=router, module_access=provider)

        context = await pipeline.authorize(request_for(staff_principal, "t2"), EndpointPolicy.of(module="orders"))

        assert context.tenant_id == "t2"
        provider.is_module_enabled.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_endpoint_without_module(self, directory, router, sales_principal):
        provider = AsyncMock()
        pipeline = RequestAccessPipeline(directory=directory, router=router, module_access=provider)

        await pipeline.authorize(request_for(sales_principal, "t1"))

        provider.is_module_enabled.assert_not_awaited()
