"""Database feature.

Tenant handles and the router that opens, caches, verifies and closes them.
"""

from .entities import TenantHandle, HandleStatus, TenantHandleFactory
from .repositories import TenantConnectionRouter, AsyncPGHandleFactory
from .utils import BASIC_HEALTH_CHECK

__all__ = [
    "TenantHandle",
    "HandleStatus",
    "TenantHandleFactory",
    "TenantConnectionRouter",
    "AsyncPGHandleFactory",
    "BASIC_HEALTH_CHECK",
]
