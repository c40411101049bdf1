"""Principal entity.

The authenticated actor behind a request, as supplied by the
authentication collaborator.
"""

from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, Optional

from ...config.constants import STAFF_ROLES, SystemRole, TenantRole


@dataclass(frozen=True)
class Principal:
    """Authenticated end user or platform staff member."""

    id: str
    system_role: SystemRole = SystemRole.USER
    tenant_id: Optional[str] = None
    tenant_role: Optional[TenantRole] = None
    permission_overrides: FrozenSet[str] = field(default_factory=frozenset)

    def __post_init__(self):
        if not self.id:
            raise ValueError("Principal id must not be empty")
        # Accept raw strings from token claims
        object.__setattr__(self, "system_role", _coerce_system_role(self.system_role))
        object.__setattr__(self, "tenant_role", _coerce_tenant_role(self.tenant_role))
        object.__setattr__(self, "permission_overrides", frozenset(self.permission_overrides or ()))

    @property
    def is_staff(self) -> bool:
        """Platform staff may act on any tenant."""
        return self.system_role in STAFF_ROLES

    @property
    def is_super_admin(self) -> bool:
        return self.system_role == SystemRole.SUPER_ADMIN

    def is_affiliated_with(self, tenant_id: str) -> bool:
        return self.tenant_id is not None and self.tenant_id == tenant_id

    @classmethod
    def build(
        cls,
        id: str,
        system_role: Optional[str] = None,
        tenant_id: Optional[str] = None,
        tenant_role: Optional[str] = None,
        permissions: Optional[Iterable[str]] = None,
    ) -> "Principal":
        """Build a principal from loosely typed values (token claims, sessions)."""
        return cls(
            id=str(id),
            system_role=system_role or SystemRole.USER,
            tenant_id=str(tenant_id) if tenant_id else None,
            tenant_role=tenant_role,
            permission_overrides=frozenset(p for p in (permissions or ()) if isinstance(p, str)),
        )


def _coerce_system_role(value) -> SystemRole:
    if isinstance(value, SystemRole):
        return value
    try:
        return SystemRole(value)
    except ValueError:
        return SystemRole.USER


def _coerce_tenant_role(value) -> Optional[TenantRole]:
    if value is None or isinstance(value, TenantRole):
        return value
    if value == "owner":
        return TenantRole.ADMIN
    try:
        return TenantRole(value)
    except ValueError:
        # Unknown tenant roles carry no defaults
        return None
