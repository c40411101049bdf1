"""asyncpg usage provider.

Plan limits come from the control plane (``subscriptions`` joined with
``plans``); usage figures come from the tenant's own database.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

import asyncpg

from ....config.constants import DatabaseSchemas
from ...database.entities.tenant_handle import TenantHandle
from ...tenants.entities.tenant import Tenant
from ..entities.quota import DEFAULT_PLAN_LIMITS, PlanLimits, QuotaKind

logger = logging.getLogger(__name__)

SEAT_USAGE = "SELECT count(*) FROM users WHERE is_active = true"
STORAGE_USAGE = "SELECT coalesce(sum(file_size), 0) FROM files"
MESSAGE_USAGE = """
    SELECT count(*) FROM message_logs
    WHERE channel = $1 AND status = 'sent' AND sent_at >= $2
"""
API_CALL_USAGE = """
    SELECT count(*) FROM audit_logs
    WHERE event_category = 'api' AND created_at >= $1
"""


class AsyncPGUsageProvider:
    """Reads plan limits from the control plane and usage from tenant handles."""

    def __init__(self, control_plane_pool: asyncpg.Pool, schema: str = DatabaseSchemas.ADMIN):
        self._pool = control_plane_pool
        self._schema = schema

    async def get_limits(self, tenant: Tenant) -> PlanLimits:
        query = f"""
            SELECT p.max_users, p.max_storage_gb, p.max_monthly_emails,
                   p.max_monthly_whatsapp, p.max_monthly_api_calls
            FROM {self._schema}.subscriptions s
            JOIN {self._schema}.plans p ON p.id = s.plan_id
            WHERE s.tenant_id::text = $1
              AND s.status = 'active'
              AND s.current_period_end >= now()
            ORDER BY s.created_at DESC
            LIMIT 1
        """
        async with self._pool.acquire() as conn:
            row = await conn.fetchrow(query, tenant.id)

        if row is None:
            return DEFAULT_PLAN_LIMITS

        return PlanLimits(
            max_seats=row["max_users"],
            max_storage_gb=row["max_storage_gb"],
            max_monthly_emails=row["max_monthly_emails"],
            max_monthly_messages=row["max_monthly_whatsapp"],
            max_monthly_api_calls=row["max_monthly_api_calls"],
        )

    async def get_usage(self, tenant: Tenant, kind: QuotaKind, handle: Optional[TenantHandle]) -> float:
        if handle is None:
            raise ValueError(f"Usage for tenant {tenant.id} requires a tenant handle")

        kind = QuotaKind(kind)
        if kind == QuotaKind.SEATS:
            return await handle.fetchval(SEAT_USAGE)
        if kind == QuotaKind.STORAGE:
            return await handle.fetchval(STORAGE_USAGE)
        if kind == QuotaKind.MONTHLY_EMAIL:
            return await handle.fetchval(MESSAGE_USAGE, "email", _start_of_month())
        if kind == QuotaKind.MONTHLY_MESSAGE:
            return await handle.fetchval(MESSAGE_USAGE, "whatsapp", _start_of_month())
        return await handle.fetchval(API_CALL_USAGE, _start_of_month())


def _start_of_month() -> datetime:
    now = datetime.now(timezone.utc)
    return now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
