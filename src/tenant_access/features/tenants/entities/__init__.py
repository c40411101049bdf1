"""Tenant entities."""

from .tenant import Tenant
from .protocols import TenantDirectory

__all__ = ["Tenant", "TenantDirectory"]
