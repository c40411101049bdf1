"""Tenant domain entity.

A read-only view of a row in ``admin.tenants``: identity, connection
coordinates and lifecycle flags. Tenants are owned by the control plane;
nothing in this package mutates them.
"""

from dataclasses import dataclass, field
from typing import Optional

from ....core.exceptions import TenantSuspended


@dataclass(frozen=True)
class Tenant:
    """Tenant metadata needed to route and authorize requests."""

    id: str
    slug: str
    host: Optional[str] = None
    port: Optional[int] = None
    database_name: Optional[str] = None
    db_username: Optional[str] = None
    # Encrypted password token; excluded from repr
    credentials_ref: Optional[str] = field(default=None, repr=False)
    is_active: bool = True
    is_suspended: bool = False

    @property
    def is_available(self) -> bool:
        return self.is_active and not self.is_suspended

    @property
    def has_dedicated_credentials(self) -> bool:
        return bool(self.host and self.port and self.db_username and self.credentials_ref)

    def ensure_available(self) -> "Tenant":
        """Raise TenantSuspended unless the tenant may serve requests."""
        if self.is_suspended:
            raise TenantSuspended(self.id, "suspended")
        if not self.is_active:
            raise TenantSuspended(self.id, "inactive")
        return self
