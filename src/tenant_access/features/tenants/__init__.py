"""Tenants feature.

Tenant metadata lookups against the control plane and resolution of the
credentials used to reach each tenant's own database.
"""

from .entities import Tenant, TenantDirectory
from .repositories import AsyncPGTenantDirectory, InMemoryTenantDirectory
from .utils import (
    PasswordEncryption,
    DatabaseCredentials,
    FallbackCredentials,
    CredentialResolver,
)

__all__ = [
    "Tenant",
    "TenantDirectory",
    "AsyncPGTenantDirectory",
    "InMemoryTenantDirectory",
    "PasswordEncryption",
    "DatabaseCredentials",
    "FallbackCredentials",
    "CredentialResolver",
]
