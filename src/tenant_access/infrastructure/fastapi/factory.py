"""Wiring of a complete access core from settings."""

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, AsyncIterator, Dict, Optional

import asyncpg
import redis.asyncio as redis
from fastapi import FastAPI

from ...config.constants import RateLimitBackend
from ...config.settings import AccessCoreSettings, get_settings
from ...features.access.services.access_pipeline import RequestAccessPipeline
from ...features.access.services.principal_authenticator import JwtPrincipalAuthenticator
from ...features.access.services.tenant_extractors import default_extractors
from ...features.database.repositories.connection_router import TenantConnectionRouter
from ...features.database.repositories.handle_factory import AsyncPGHandleFactory
from ...features.modules.repositories.module_access import AsyncPGModuleAccessProvider
from ...features.quotas.repositories.usage_provider import AsyncPGUsageProvider
from ...features.quotas.services.quota_service import QuotaService
from ...features.rate_limit.entities.rate_limit import RateLimitPolicy
from ...features.rate_limit.services.memory_rate_limiter import FixedWindowRateLimiter
from ...features.rate_limit.services.redis_rate_limiter import RedisRateLimiter
from ...features.tenants.repositories.tenant_directory import AsyncPGTenantDirectory
from ...features.tenants.utils.encryption import CredentialResolver, FallbackCredentials, PasswordEncryption
from .dependencies import TenantAccessDependencies

logger = logging.getLogger(__name__)


@dataclass
class AccessCore:
    """Every long-lived component of the access core, owned together."""

    settings: AccessCoreSettings
    control_plane_pool: asyncpg.Pool
    router: TenantConnectionRouter
    pipeline: RequestAccessPipeline
    dependencies: TenantAccessDependencies
    redis_client: Optional[redis.Redis] = None

    def health(self) -> Dict[str, Any]:
        return self.router.health_snapshot()

    async def shutdown(self) -> None:
        """Close tenant handles, then the shared connections."""
        await self.router.shutdown()
        if self.redis_client is not None:
            await self.redis_client.aclose()
        await self.control_plane_pool.close()
        logger.info("Access core shut down")


def create_rate_limiter(settings: AccessCoreSettings, redis_client: Optional[redis.Redis] = None):
    policy = RateLimitPolicy(
        max_attempts=settings.rate_limit_max_attempts,
        window_seconds=settings.rate_limit_window_seconds,
    )
    if settings.rate_limit_backend == RateLimitBackend.REDIS:
        if redis_client is None:
            raise ValueError("Redis rate limiting requires REDIS_URL")
        return RedisRateLimiter(redis_client, policy, key_prefix=settings.rate_limit_key_prefix)
    return FixedWindowRateLimiter(policy)


async def build_access_core(settings: Optional[AccessCoreSettings] = None) -> AccessCore:
    """Open the control-plane pool and assemble the pipeline.

    The rate limiter is built before any pool is opened, so a bad rate
    limiting setup fails without leaking connections.
    """
    settings = settings or get_settings()

    redis_client = redis.from_url(settings.redis_url) if settings.redis_url else None
    rate_limiter = create_rate_limiter(settings, redis_client)

    control_plane_pool = await asyncpg.create_pool(
        dsn=settings.control_plane_dsn,
        min_size=settings.control_plane_pool_min_size,
        max_size=settings.control_plane_pool_max_size,
    )
    try:
        core = _assemble(settings, control_plane_pool, rate_limiter, redis_client)
    except Exception:
        await control_plane_pool.close()
        if redis_client is not None:
            await redis_client.aclose()
        raise

    logger.info(
        f"Access core ready ({settings.environment}, "
        f"rate limiting: {settings.rate_limit_backend.value})"
    )
    return core


def _assemble(settings: AccessCoreSettings, control_plane_pool: asyncpg.Pool, rate_limiter, redis_client) -> AccessCore:
    schema = settings.control_plane_schema
    directory = AsyncPGTenantDirectory(control_plane_pool, schema=schema)
    credentials = CredentialResolver(
        PasswordEncryption(settings.db_encryption_key.get_secret_value()),
        FallbackCredentials(
            host=settings.tenant_db_default_host,
            port=settings.tenant_db_default_port,
            user=settings.tenant_db_default_username,
            password=settings.tenant_db_default_password.get_secret_value(),
        ),
    )
    handle_factory = AsyncPGHandleFactory(
        credentials,
        min_size=settings.tenant_pool_min_size,
        max_size=settings.tenant_pool_max_size,
        max_inactive_connection_lifetime=settings.tenant_pool_recycle_seconds,
        ssl=settings.tenant_db_ssl,
    )
    router = TenantConnectionRouter(
        handle_factory,
        directory=directory,
        connect_timeout=settings.tenant_connect_timeout_seconds,
    )

    pipeline = RequestAccessPipeline(
        directory=directory,
        router=router,
        rate_limiter=rate_limiter,
        quota_service=QuotaService(AsyncPGUsageProvider(control_plane_pool, schema=schema)),
        module_access=AsyncPGModuleAccessProvider(control_plane_pool, schema=schema),
        extractors=default_extractors(
            field=settings.tenant_field,
            header=settings.tenant_header,
            reserved_subdomains=settings.reserved_subdomains,
            subdomain_extraction=settings.tenant_subdomain_extraction,
        ),
    )
    authenticator = JwtPrincipalAuthenticator(
        settings.jwt_secret.get_secret_value(),
        algorithms=settings.jwt_algorithms,
    )

    return AccessCore(
        settings=settings,
        control_plane_pool=control_plane_pool,
        router=router,
        pipeline=pipeline,
        dependencies=TenantAccessDependencies(pipeline, authenticator),
        redis_client=redis_client,
    )


def access_core_lifespan(settings: Optional[AccessCoreSettings] = None):
    """Lifespan that builds the core on startup and shuts it down on exit.

    The core is stored on ``app.state.access_core``.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        core = await build_access_core(settings)
        app.state.access_core = core
        try:
            yield
        finally:
            await core.shutdown()

    return lifespan
