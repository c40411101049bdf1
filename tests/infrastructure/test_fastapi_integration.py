"""Integration tests for the FastAPI dependencies and exception handlers."""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient
from jose import jwt
from starlette.requests import Request

from tenant_access.config.constants import RateLimitBackend, TenantIdSource
from tenant_access.config.settings import AccessCoreSettings
from tenant_access.core.exceptions import RateLimited, TenantConnectionFailed
from tenant_access.features.access import AccessContext, JwtPrincipalAuthenticator, RequestAccessPipeline
from tenant_access.features.modules import AsyncPGModuleAccessProvider, InMemoryModuleAccessProvider
from tenant_access.features.rate_limit import FixedWindowRateLimiter, RateLimitPolicy
from tenant_access.infrastructure.fastapi import (
    ExceptionHandlerRegistry,
    TenantAccessDependencies,
    build_access_core,
    create_rate_limiter,
    get_client_ip,
    register_exception_handlers,
)

SECRET = "integration-secret"
FACTORY = "tenant_access.infrastructure.fastapi.factory"


def bearer(**claims):
    claims["exp"] = datetime.now(timezone.utc) + timedelta(minutes=5)
    return {"Authorization": f"Bearer {jwt.encode(claims, SECRET, algorithm='HS256')}"}


@pytest.fixture
def app(directory, router):
    limiter = FixedWindowRateLimiter(RateLimitPolicy(max_attempts=2, window_seconds=60))
    pipeline = RequestAccessPipeline(
        directory=directory,
        router=router,
        rate_limiter=limiter,
        module_access=InMemoryModuleAccessProvider({"t1": ["crm"]}),
    )
    access = TenantAccessDependencies(pipeline, JwtPrincipalAuthenticator(SECRET))

    app = FastAPI()
    register_exception_handlers(app)

    @app.get("/tenants/{tenantId}/customers")
    async def list_customers(ctx: AccessContext = Depends(access.require("crm:customers:read"))):
        where, params = ctx.scope("customers").to_sql()
        return {"tenant": ctx.tenant_id, "where": where, "params": params}

    @app.get("/tenants/{tenantId}/orders")
    async def list_orders(ctx: AccessContext = Depends(access.require("orders:read", module="orders"))):
        return {"tenant": ctx.tenant_id}

    @app.post("/notes")
    async def create_note(ctx: AccessContext = Depends(access.require())):
        return {"tenant": ctx.tenant_id, "source": ctx.tenant_source.value}

    @app.post("/auth/login", dependencies=[Depends(access.rate_limit())])
    async def login():
        return {"ok": True}

    return app


@pytest.fixture
def client(app):
    with TestClient(app) as client:
        yield client


class TestTenantScopedEndpoints:
    """Test the HTTP surface of the access pipeline."""

    def test_own_tenant_is_scoped(self, client):
        response = client.get("/tenants/t1/customers", headers=bearer(sub="u1", tenantId="t1", role="sales"))

        assert response.status_code == 200
        body = response.json()
        assert body["tenant"] == "t1"
        assert body["where"] == '("assignedTo" = $1) OR ("createdBy" = $2)'
        assert body["params"] == ["u1", "u1"]

    def test_manager_is_not_scoped(self, client):
        response = client.get("/tenants/t1/customers", headers=bearer(sub="u2", tenantId="t1", role="manager"))

        assert response.status_code == 200
        assert response.json()["where"] == "TRUE"

    def test_other_tenant_is_forbidden(self, client):
        response = client.get("/tenants/t2/customers", headers=bearer(sub="u1", tenantId="t1", role="sales"))

        assert response.status_code == 403
        error = response.json()["error"]
        assert error["code"] == "TenantAccessDenied"
        assert "db-t2" not in response.text

    def test_missing_token(self, client):
        response = client.get("/tenants/t1/customers")

        assert response.status_code == 401
        assert response.json()["error"]["type"] == "AuthenticationRequired"

    def test_invalid_token(self, client):
        response = client.get("/tenants/t1/customers", headers={"Authorization": "Bearer not-a-jwt"})

        assert response.status_code == 401
        assert response.json()["error"]["message"] == "Invalid token"

    def test_unknown_tenant(self, client):
        response = client.get("/tenants/t404/customers", headers=bearer(sub="s1", systemRole="super_admin"))

        assert response.status_code == 404

    def test_suspended_tenant(self, client):
        response = client.get("/tenants/t3/customers", headers=bearer(sub="u3", tenantId="t3", role="admin"))

        assert response.status_code == 403
        assert response.json()["error"]["code"] == "TenantSuspended"

    def test_missing_permission(self, client):
        response = client.get("/tenants/t1/customers", headers=bearer(sub="u4", tenantId="t1"))

        assert response.status_code == 403
        assert response.json()["error"]["details"]["missing_permissions"] == ["crm:customers:read"]

    def test_module_not_enabled(self, client):
        response = client.get("/tenants/t1/orders", headers=bearer(sub="u1", tenantId="t1", role="sales"))

        assert response.status_code == 403
        assert response.json()["error"]["code"] == "ModuleNotEnabled"

    def test_tenant_from_json_body(self, client):
        response = client.post(
            "/notes",
            json={"tenantId": "t2"},
            headers=bearer(sub="s1", systemRole="support"),
        )

        assert response.status_code == 200
        assert response.json() == {"tenant": "t2", "source": "body"}

    def test_tenant_from_header(self, client):
        headers = bearer(sub="u1", tenantId="t1", role="sales")
        headers["X-Tenant-ID"] = "t2"

        response = client.post("/notes", headers=headers)

        assert response.status_code == 403


class TestRateLimitedEndpoint:

    def test_login_is_rate_limited(self, client):
        assert client.post("/auth/login").status_code == 200
        assert client.post("/auth/login").status_code == 200

        response = client.post("/auth/login")

        assert response.status_code == 429
        assert 0 < int(response.headers["Retry-After"]) <= 60
        assert response.json()["error"]["code"] == "RateLimited"

    def test_rate_limit_is_per_client(self, client):
        for _ in range(2):
            client.post("/auth/login", headers={"X-Forwarded-For": "203.0.113.7"})

        assert client.post("/auth/login", headers={"X-Forwarded-For": "203.0.113.7"}).status_code == 429
        assert client.post("/auth/login", headers={"X-Forwarded-For": "203.0.113.8"}).status_code == 200


def make_request(headers=None, client=("10.0.0.2", 5000)):
    scope = {
        "type": "http",
        "method": "GET",
        "path": "/",
        "query_string": b"",
        "headers": [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()],
        "client": client,
    }
    return Request(scope)


class TestGetClientIp:

    def test_forwarded_for_first_untrusted(self):
        request = make_request({"X-Forwarded-For": "10.1.1.1, 203.0.113.5"})

        assert get_client_ip(request, trusted_proxies={"10.1.1.1"}) == "203.0.113.5"

    def test_invalid_forwarded_entries_are_skipped(self):
        request = make_request({"X-Forwarded-For": "garbage, 203.0.113.9"})

        assert get_client_ip(request) == "203.0.113.9"

    def test_real_ip(self):
        assert get_client_ip(make_request({"X-Real-IP": "198.51.100.4"})) == "198.51.100.4"

    def test_peer_address(self):
        assert get_client_ip(make_request()) == "10.0.0.2"

    def test_unknown(self):
        assert get_client_ip(make_request(client=None)) == "unknown"


class TestExceptionHandlerRegistry:

    def test_rate_limited_sets_retry_after(self):
        response = ExceptionHandlerRegistry().build_response(RateLimited(42))

        assert response.status_code == 429
        assert response.headers["Retry-After"] == "42"

    def test_connection_failure_is_503(self):
        response = ExceptionHandlerRegistry().build_response(TenantConnectionFailed("t1", "timed out"))

        assert response.status_code == 503

    def test_custom_formatter(self):
        registry = ExceptionHandlerRegistry(lambda exc: {"detail": exc.message})

        response = registry.build_response(RateLimited(1))

        assert response.body == b'{"detail":"Too many attempts. Try again in 1 seconds."}'


class TestCreateRateLimiter:

    def test_memory_backend(self):
        limiter = create_rate_limiter(AccessCoreSettings(rate_limit_max_attempts=3))

        assert isinstance(limiter, FixedWindowRateLimiter)
        assert limiter.policy.max_attempts == 3

    def test_redis_backend_requires_client(self):
        with pytest.raises(ValueError):
            create_rate_limiter(AccessCoreSettings(rate_limit_backend=RateLimitBackend.REDIS))


class TestBuildAccessCore:
    """Test wiring from settings."""

    @pytest.fixture
    def control_plane_pool(self):
        pool = MagicMock()
        pool.close = AsyncMock()
        return pool

    @pytest.mark.asyncio
    async def test_redis_backend_without_url_opens_no_pool(self):
        settings = AccessCoreSettings(rate_limit_backend=RateLimitBackend.REDIS)

        with patch(f"{FACTORY}.asyncpg.create_pool", new_callable=AsyncMock) as create_pool:
            with pytest.raises(ValueError):
                await build_access_core(settings)

        create_pool.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_pool_is_closed_when_wiring_fails(self, control_plane_pool):
        with patch(f"{FACTORY}.asyncpg.create_pool", new_callable=AsyncMock, return_value=control_plane_pool), \
                patch(f"{FACTORY}.AsyncPGTenantDirectory", side_effect=RuntimeError("bad schema")):
            with pytest.raises(RuntimeError):
                await build_access_core(AccessCoreSettings())

        control_plane_pool.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_settings_reach_the_pipeline(self, control_plane_pool):
        settings = AccessCoreSettings(tenant_subdomain_extraction=True, control_plane_schema="control")

        with patch(f"{FACTORY}.asyncpg.create_pool", new_callable=AsyncMock, return_value=control_plane_pool):
            core = await build_access_core(settings)

        sources = [extractor.source for extractor in core.pipeline.extractors]
        assert TenantIdSource.SUBDOMAIN in sources
        assert isinstance(core.pipeline.module_access, AsyncPGModuleAccessProvider)
        control_plane_pool.close.assert_not_awaited()
