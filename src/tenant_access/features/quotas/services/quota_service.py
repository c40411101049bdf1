"""Plan limit enforcement."""

import logging
from typing import Optional, Union

from ....core.exceptions import QuotaExceeded
from ...database.entities.tenant_handle import TenantHandle
from ...tenants.entities.tenant import Tenant
from ..entities.protocols import UsageProvider
from ..entities.quota import BYTES_PER_GB, QuotaCheckResult, QuotaKind

logger = logging.getLogger(__name__)


class QuotaService:
    """Checks tenant usage against plan ceilings.

    A ceiling that has been reached always denies. A failure to read limits
    or usage allows the request: metering is not allowed to take the
    product down.
    """

    def __init__(self, usage_provider: UsageProvider):
        self._usage = usage_provider

    async def check(
        self,
        tenant: Tenant,
        kind: Union[QuotaKind, str],
        handle: Optional[TenantHandle] = None,
        additional: float = 0,
    ) -> QuotaCheckResult:
        """Return whether one more unit of ``kind`` fits in the tenant's plan.

        For storage, ``additional`` is the incoming size in bytes.
        """
        kind = QuotaKind(kind)
        try:
            limits = await self._usage.get_limits(tenant)
            maximum = limits.limit_for(kind)
            if not maximum:
                return QuotaCheckResult(kind=kind, allowed=True)
            current = float(await self._usage.get_usage(tenant, kind, handle) or 0)
        except Exception as e:
            # Fail open: an unreadable meter must not block the tenant
            logger.error(f"Quota lookup failed for tenant {tenant.id} ({kind.value}), allowing: {e}")
            return QuotaCheckResult(kind=kind, allowed=True, failed_open=True)

        if kind == QuotaKind.STORAGE:
            current_gb = current / BYTES_PER_GB
            total_gb = current_gb + (additional or 0) / BYTES_PER_GB
            if total_gb >= maximum:
                return QuotaCheckResult(
                    kind=kind,
                    allowed=False,
                    current=round(current_gb, 2),
                    maximum=maximum,
                    reason=f"Storage limit of {maximum}GB reached for your plan",
                )
            return QuotaCheckResult(kind=kind, allowed=True, current=round(current_gb, 2), maximum=maximum)

        if current >= maximum:
            return QuotaCheckResult(
                kind=kind,
                allowed=False,
                current=current,
                maximum=maximum,
                reason=f"Plan limit of {maximum:g} reached for {kind.value}",
            )
        return QuotaCheckResult(kind=kind, allowed=True, current=current, maximum=maximum)

    async def enforce(
        self,
        tenant: Tenant,
        kind: Union[QuotaKind, str],
        handle: Optional[TenantHandle] = None,
        additional: float = 0,
    ) -> QuotaCheckResult:
        """Like check(), but raises QuotaExceeded when the ceiling is reached."""
        result = await self.check(tenant, kind, handle, additional)
        if not result.allowed:
            logger.info(f"Quota exceeded for tenant {tenant.id}: {result.kind.value} {result.current}/{result.maximum}")
            raise QuotaExceeded(result.kind.value, result.current, result.maximum, result.reason)
        return result
