"""Tenant directory backed by the control-plane database."""

import logging
from typing import Any, Mapping, Optional

import asyncpg

from ....config.constants import DatabaseSchemas
from ....core.exceptions import TenantDirectoryError
from ..entities.tenant import Tenant

logger = logging.getLogger(__name__)


class AsyncPGTenantDirectory:
    """Reads tenant metadata from ``<schema>.tenants`` through an asyncpg pool.

    Lookups return None for unknown tenants. Database failures are wrapped in
    TenantDirectoryError so the pipeline never mistakes an outage for a
    missing tenant.
    """

    _COLUMNS = (
        "id, slug, db_host, db_port, database_name, db_username, "
        "db_password_encrypted, status"
    )

    def __init__(self, pool: asyncpg.Pool, schema: str = DatabaseSchemas.ADMIN):
        self._pool = pool
        self._schema = schema
        self._table = f"{schema}.tenants"

    async def get_tenant_by_id(self, tenant_id: str) -> Optional[Tenant]:
        query = f"SELECT {self._COLUMNS} FROM {self._table} WHERE id::text = $1 AND deleted_at IS NULL"
        return await self._fetch_one(query, tenant_id, f"id {tenant_id}")

    async def get_tenant_by_slug(self, slug: str) -> Optional[Tenant]:
        query = f"SELECT {self._COLUMNS} FROM {self._table} WHERE slug = $1 AND deleted_at IS NULL"
        return await self._fetch_one(query, slug, f"slug {slug}")

    async def _fetch_one(self, query: str, value: str, label: str) -> Optional[Tenant]:
        try:
            async with self._pool.acquire() as conn:
                row = await conn.fetchrow(query, value)
        except (asyncpg.PostgresError, OSError) as e:
            logger.error(f"Tenant directory lookup failed for {label}: {e}")
            raise TenantDirectoryError("Tenant directory unavailable") from e

        if row is None:
            return None
        return self._map_row_to_tenant(row)

    @staticmethod
    def _map_row_to_tenant(row: Mapping[str, Any]) -> Tenant:
        status = (row.get("status") or "").lower()
        return Tenant(
            id=str(row["id"]),
            slug=row["slug"],
            host=row.get("db_host"),
            port=row.get("db_port"),
            database_name=row.get("database_name"),
            db_username=row.get("db_username"),
            credentials_ref=row.get("db_password_encrypted"),
            is_active=status == "active",
            is_suspended=status == "suspended",
        )


class InMemoryTenantDirectory:
    """Dictionary-backed directory for tests and local development."""

    def __init__(self, *tenants: Tenant):
        self._by_id = {tenant.id: tenant for tenant in tenants}

    def add(self, tenant: Tenant) -> None:
        self._by_id[tenant.id] = tenant

    async def get_tenant_by_id(self, tenant_id: str) -> Optional[Tenant]:
        return self._by_id.get(tenant_id)

    async def get_tenant_by_slug(self, slug: str) -> Optional[Tenant]:
        for tenant in self._by_id.values():
            if tenant.slug == slug:
                return tenant
        return None
