"""Database entities."""

from .tenant_handle import TenantHandle
from .handle_status import HandleStatus
from .protocols import TenantHandleFactory

__all__ = ["TenantHandle", "HandleStatus", "TenantHandleFactory"]
