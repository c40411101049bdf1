"""asyncpg implementation of the tenant handle factory."""

import logging
from typing import Optional

import asyncpg

from ...tenants.entities.tenant import Tenant
from ...tenants.utils.encryption import CredentialResolver
from ..entities.tenant_handle import TenantHandle

logger = logging.getLogger(__name__)


class AsyncPGHandleFactory:
    """Creates one asyncpg pool per tenant database."""

    def __init__(
        self,
        credential_resolver: CredentialResolver,
        min_size: int = 1,
        max_size: int = 10,
        max_inactive_connection_lifetime: float = 300.0,
        ssl: Optional[str] = None,
        command_timeout: Optional[float] = None,
    ):
        self._credentials = credential_resolver
        self._min_size = min_size
        self._max_size = max_size
        self._max_inactive_connection_lifetime = max_inactive_connection_lifetime
        self._ssl = ssl
        self._command_timeout = command_timeout

    async def open(self, tenant: Tenant) -> TenantHandle:
        credentials = self._credentials.resolve(tenant)
        pool = await asyncpg.create_pool(
            host=credentials.host,
            port=credentials.port,
            database=credentials.database,
            user=credentials.user,
            password=credentials.password,
            ssl=self._ssl,
            min_size=self._min_size,
            max_size=self._max_size,
            max_inactive_connection_lifetime=self._max_inactive_connection_lifetime,
            command_timeout=self._command_timeout,
        )
        logger.info(
            f"Created connection pool for tenant {tenant.id}: "
            f"min={self._min_size}, max={self._max_size}"
        )
        return TenantHandle(tenant.id, pool)
