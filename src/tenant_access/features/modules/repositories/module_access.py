"""Module enablement backed by the control-plane database."""

import logging
from typing import Dict, Iterable, Optional

import asyncpg

from ....config.constants import DatabaseSchemas
from ...tenants.entities.tenant import Tenant

logger = logging.getLogger(__name__)


class AsyncPGModuleAccessProvider:
    """Reads module enablement from the control plane.

    A module is enabled when it is active and either the tenant's current
    subscription plan includes it or a direct tenant assignment is enabled
    and inside its ``starts_at``/``ends_at`` window. Lookup failures are
    logged and treated as disabled.
    """

    def __init__(self, pool: asyncpg.Pool, schema: str = DatabaseSchemas.ADMIN):
        self._pool = pool
        self._schema = schema

    async def is_module_enabled(self, tenant: Tenant, module: str) -> bool:
        query = f"""
            SELECT EXISTS (
                SELECT 1
                FROM {self._schema}.module_definitions m
                WHERE m.name = $2
                  AND m.is_active = true
                  AND (
                    EXISTS (
                        SELECT 1
                        FROM {self._schema}.module_tenant_assignments a
                        WHERE a.module_id = m.id
                          AND a.tenant_id::text = $1
                          AND a.is_enabled = true
                          AND (a.starts_at IS NULL OR a.starts_at <= now())
                          AND (a.ends_at IS NULL OR a.ends_at >= now())
                    )
                    OR EXISTS (
                        SELECT 1
                        FROM {self._schema}.subscriptions s
                        JOIN {self._schema}.module_plan_assignments pa ON pa.plan_id = s.plan_id
                        WHERE pa.module_id = m.id
                          AND pa.is_enabled = true
                          AND s.tenant_id::text = $1
                          AND s.status = 'active'
                          AND s.current_period_end >= now()
                    )
                  )
            )
        """
        try:
            async with self._pool.acquire() as conn:
                enabled = await conn.fetchval(query, tenant.id, module)
        except (asyncpg.PostgresError, OSError) as e:
            logger.error(f"Module lookup failed for tenant {tenant.id}, module {module}: {e}")
            return False
        return bool(enabled)


class InMemoryModuleAccessProvider:
    """Dictionary-backed module enablement for tests and local development."""

    def __init__(self, modules: Optional[Dict[str, Iterable[str]]] = None):
        self._modules = {tenant_id: set(names) for tenant_id, names in (modules or {}).items()}

    def enable(self, tenant_id: str, module: str) -> None:
        self._modules.setdefault(tenant_id, set()).add(module)

    async def is_module_enabled(self, tenant: Tenant, module: str) -> bool:
        return module in self._modules.get(tenant.id, set())
