"""Tenant connection router.

Maps tenant ids to live tenant handles. Handles are opened lazily on first
use, verified with a round-trip query, cached per tenant id and closed on
invalidation or shutdown.

Cache reads are lock-free. Creation and eviction for the same tenant id are
serialized by a per-tenant ``asyncio.Lock``; different tenants never share a
lock. Creation runs as a shared task so that concurrent first requests for
the same tenant trigger a single open, and a caller that gets cancelled does
not cancel the open for everyone else. A router instance belongs to the event
loop it is first used on.
"""

import asyncio
import functools
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from ....config.constants import HandleState, HealthStatus
from ....core.exceptions import (
    TenantConnectionFailed,
    TenantHandleMismatch,
    TenantNotFound,
    TenantSuspended,
)
from ...tenants.entities.protocols import TenantDirectory
from ...tenants.entities.tenant import Tenant
from ..entities.handle_status import HandleStatus
from ..entities.protocols import TenantHandleFactory
from ..entities.tenant_handle import TenantHandle

logger = logging.getLogger(__name__)


class TenantConnectionRouter:
    """Per-process cache of tenant handles keyed strictly by tenant id."""

    def __init__(
        self,
        factory: TenantHandleFactory,
        directory: Optional[TenantDirectory] = None,
        connect_timeout: float = 10.0,
    ):
        self._factory = factory
        self._directory = directory
        self._connect_timeout = connect_timeout
        self._handles: Dict[str, TenantHandle] = {}
        self._statuses: Dict[str, HandleStatus] = {}
        self._locks: Dict[str, asyncio.Lock] = {}
        self._pending: Dict[str, "asyncio.Future[TenantHandle]"] = {}
        self._closed = False

    # Resolution

    async def resolve(self, tenant_id: str) -> TenantHandle:
        """Look the tenant up in the directory and return its handle.

        Raises:
            TenantNotFound: unknown tenant
            TenantSuspended: suspended or inactive tenant; any cached handle
                is invalidated
            TenantConnectionFailed: open or verification failed or timed out
        """
        if self._directory is None:
            raise RuntimeError("resolve() requires a tenant directory")

        tenant = await self._directory.get_tenant_by_id(tenant_id)
        if tenant is None:
            raise TenantNotFound(tenant_id)

        try:
            tenant.ensure_available()
        except TenantSuspended:
            await self.invalidate(tenant.id)
            raise

        return await self.get_handle(tenant)

    async def get_handle(self, tenant: Tenant) -> TenantHandle:
        """Return the cached handle for ``tenant`` or open a new one."""
        tenant_id = tenant.id
        if self._closed:
            raise TenantConnectionFailed(tenant_id, "connection router is shut down")

        handle = self._handles.get(tenant_id)
        if handle is None:
            handle = await asyncio.shield(self._creation_for(tenant))

        return self._checked(tenant_id, handle)

    def _creation_for(self, tenant: Tenant) -> "asyncio.Future[TenantHandle]":
        task = self._pending.get(tenant.id)
        if task is None:
            task = asyncio.ensure_future(self._create(tenant))
            self._pending[tenant.id] = task
            task.add_done_callback(functools.partial(self._creation_done, tenant.id))
        return task

    def _creation_done(self, tenant_id: str, task: "asyncio.Future[TenantHandle]") -> None:
        if self._pending.get(tenant_id) is task:
            del self._pending[tenant_id]
        # Mark the outcome as retrieved even when every caller was cancelled
        if not task.cancelled():
            task.exception()

    async def _create(self, tenant: Tenant) -> TenantHandle:
        tenant_id = tenant.id
        async with self._lock_for(tenant_id):
            # Double-check under the lock
            handle = self._handles.get(tenant_id)
            if handle is not None:
                return handle

            status = self._status_entry(tenant_id)
            status.state = HandleState.RESOLVING
            status.last_checked_at = _now()

            try:
                handle = await asyncio.wait_for(self._open_and_verify(tenant), timeout=self._connect_timeout)
            except asyncio.TimeoutError as e:
                self._mark_unhealthy(tenant_id, "timed out")
                logger.error(f"Opening handle for tenant {tenant_id} timed out after {self._connect_timeout}s")
                raise TenantConnectionFailed(tenant_id, "timed out") from e
            except Exception as e:
                self._mark_unhealthy(tenant_id, type(e).__name__)
                logger.error(f"Failed to open handle for tenant {tenant_id}: {type(e).__name__}")
                raise TenantConnectionFailed(tenant_id, "unavailable") from e

            if handle.tenant_id != tenant_id:
                await self._close_quietly(tenant_id, handle)
                self._mark_unhealthy(tenant_id, "handle bound to another tenant")
                raise TenantHandleMismatch(tenant_id, handle.tenant_id)

            if self._closed:
                await self._close_quietly(tenant_id, handle)
                status.state = HandleState.CLOSED
                raise TenantConnectionFailed(tenant_id, "connection router is shut down")

            self._handles[tenant_id] = handle
            now = _now()
            status.state = HandleState.READY
            status.connected_at = now
            status.last_checked_at = now
            status.last_error = None
            status.connection_count += 1
            logger.info(f"Tenant handle ready for {tenant_id}")
            return handle

    async def _open_and_verify(self, tenant: Tenant) -> TenantHandle:
        handle = None
        try:
            handle = await self._factory.open(tenant)
            await handle.ping()
            return handle
        except BaseException:
            # Never leave a half-open handle behind, including on timeout
            if handle is not None:
                await self._close_quietly(tenant.id, handle)
            raise

    def _checked(self, tenant_id: str, handle: TenantHandle) -> TenantHandle:
        if handle.tenant_id != tenant_id:
            raise TenantHandleMismatch(tenant_id, handle.tenant_id)
        return handle

    # Eviction

    async def invalidate(self, tenant_id: str) -> bool:
        """Evict and close the cached handle for ``tenant_id``.

        Returns True when a handle was evicted.
        """
        async with self._lock_for(tenant_id):
            handle = self._handles.pop(tenant_id, None)
            status = self._statuses.get(tenant_id)
            if status is not None:
                status.state = HandleState.CLOSED
                status.last_checked_at = _now()

        if handle is None:
            return False

        await self._close_quietly(tenant_id, handle)
        logger.info(f"Invalidated tenant handle for {tenant_id}")
        return True

    async def shutdown(self) -> None:
        """Close every cached handle. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True

        pending = list(self._pending.values())
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

        handles: List[Tuple[str, TenantHandle]] = list(self._handles.items())
        self._handles.clear()

        results = await asyncio.gather(
            *(handle.close() for _, handle in handles),
            return_exceptions=True,
        )

        failures = 0
        for (tenant_id, _), result in zip(handles, results):
            status = self._status_entry(tenant_id)
            status.state = HandleState.CLOSED
            if isinstance(result, Exception):
                failures += 1
                status.last_error = type(result).__name__
                logger.warning(f"Error closing tenant handle for {tenant_id}: {result}")

        logger.info(f"Closed {len(handles)} tenant handles ({failures} failed)")

    # Observability

    @property
    def live_handle_count(self) -> int:
        return len(self._handles)

    @property
    def is_closed(self) -> bool:
        return self._closed

    def status(self, tenant_id: str) -> HandleStatus:
        """Cached status for ``tenant_id``; UNRESOLVED if never seen."""
        status = self._statuses.get(tenant_id)
        if status is None:
            return HandleStatus(tenant_id=tenant_id)
        return HandleStatus(
            tenant_id=status.tenant_id,
            state=status.state,
            connected_at=status.connected_at,
            last_checked_at=status.last_checked_at,
            last_error=status.last_error,
            connection_count=status.connection_count,
        )

    def health_snapshot(self) -> Dict[str, Any]:
        """Aggregate cached statuses without probing any database."""
        statuses = [self.status(tenant_id) for tenant_id in self._statuses]
        healthy = [s for s in statuses if s.state == HandleState.READY]
        unhealthy = [s for s in statuses if s.state == HandleState.UNHEALTHY]

        overall = HealthStatus.HEALTHY
        if unhealthy:
            overall = HealthStatus.UNHEALTHY if len(unhealthy) >= len(healthy) else HealthStatus.DEGRADED

        return {
            "status": overall.value,
            "live_handles": self.live_handle_count,
            "healthy": len(healthy),
            "unhealthy": len(unhealthy),
            "tenants": {s.tenant_id: s.to_dict() for s in statuses},
            "timestamp": _now().isoformat(),
        }

    async def verify_all(self) -> Dict[str, HealthStatus]:
        """Check every cached handle; evict the ones that fail.

        Meant for background health jobs, never for the request path.
        """
        handles = list(self._handles.items())
        results = await asyncio.gather(
            *(asyncio.wait_for(handle.ping(), timeout=self._connect_timeout) for _, handle in handles),
            return_exceptions=True,
        )

        report: Dict[str, HealthStatus] = {}
        for (tenant_id, handle), result in zip(handles, results):
            if isinstance(result, Exception):
                report[tenant_id] = HealthStatus.UNHEALTHY
                logger.warning(f"Health check failed for tenant {tenant_id}: {type(result).__name__}")
                await self._evict_unhealthy(tenant_id, handle, type(result).__name__)
            else:
                report[tenant_id] = HealthStatus.HEALTHY
                status = self._status_entry(tenant_id)
                status.last_checked_at = _now()
        return report

    async def _evict_unhealthy(self, tenant_id: str, handle: TenantHandle, reason: str) -> None:
        async with self._lock_for(tenant_id):
            # Only evict the handle that was checked, not a newer replacement
            if self._handles.get(tenant_id) is handle:
                del self._handles[tenant_id]
                self._mark_unhealthy(tenant_id, reason)
            else:
                handle = None
        if handle is not None:
            await self._close_quietly(tenant_id, handle)

    # Internals

    def _lock_for(self, tenant_id: str) -> asyncio.Lock:
        lock = self._locks.get(tenant_id)
        if lock is None:
            lock = self._locks.setdefault(tenant_id, asyncio.Lock())
        return lock

    def _status_entry(self, tenant_id: str) -> HandleStatus:
        status = self._statuses.get(tenant_id)
        if status is None:
            status = self._statuses.setdefault(tenant_id, HandleStatus(tenant_id=tenant_id))
        return status

    def _mark_unhealthy(self, tenant_id: str, error: str) -> None:
        self._handles.pop(tenant_id, None)
        status = self._status_entry(tenant_id)
        status.state = HandleState.UNHEALTHY
        status.last_checked_at = _now()
        status.last_error = error

    async def _close_quietly(self, tenant_id: str, handle: TenantHandle) -> None:
        try:
            await handle.close()
        except Exception as e:
            logger.warning(f"Error closing tenant handle for {tenant_id}: {e}")


def _now() -> datetime:
    return datetime.now(timezone.utc)
