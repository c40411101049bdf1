"""Default permission sets per tenant role.

The table is keyed by the closed TenantRole enum. Per-principal overrides
are unioned with these defaults at resolution time, never substituted.
"""

from types import MappingProxyType
from typing import FrozenSet, Mapping, Optional, Union

from ....config.constants import PermissionTokens, TenantRole


_MANAGER: FrozenSet[str] = frozenset({
    "crm:read", "crm:write", "crm:export", "crm:assign",
    "orders:read", "orders:write", "orders:assign", "orders:approve",
    "tasks:read", "tasks:write", "tasks:assign", "tasks:complete",
    "products:read", "products:write", "products:manage_inventory",
    "accounting:read", "accounting:reports",
    "reports:read", "reports:create", "reports:export",
    "users:read", "users:write", "users:invite",
    PermissionTokens.VIEW_ALL,
})

# No view_all: sales only see records they own
_SALES: FrozenSet[str] = frozenset({
    "crm:customers:read", "crm:customers:write", "crm:customers:export",
    "crm:interactions:read", "crm:interactions:write",
    "orders:read", "orders:write",
    "tasks:read", "tasks:write",
    "products:read",
    "reports:read",
})

_OPERATOR: FrozenSet[str] = frozenset({
    "crm:read",
    "orders:read",
    "tasks:read", "tasks:write", "tasks:complete",
    "products:read",
})

_ACCOUNTANT: FrozenSet[str] = frozenset({
    "crm:read",
    "orders:read",
    "accounting:read", "accounting:write", "accounting:reports",
    "reports:read", "reports:create", "reports:export",
    PermissionTokens.VIEW_ALL,
})

_VIEWER: FrozenSet[str] = frozenset({
    "crm:read",
    "orders:read",
    "tasks:read",
    "products:read",
    "accounting:read",
    "reports:read",
})

# Every literal grantable through a non-admin role
KNOWN_PERMISSIONS: FrozenSet[str] = _MANAGER | _SALES | _OPERATOR | _ACCOUNTANT | _VIEWER

_ADMIN: FrozenSet[str] = KNOWN_PERMISSIONS | frozenset({
    PermissionTokens.GLOBAL_WILDCARD,
    PermissionTokens.VIEW_ALL,
    PermissionTokens.ANY_VIEW_ALL,
    "dashboard:read",
})

ROLE_DEFAULT_PERMISSIONS: Mapping[TenantRole, FrozenSet[str]] = MappingProxyType({
    TenantRole.ADMIN: _ADMIN,
    TenantRole.MANAGER: _MANAGER,
    TenantRole.SALES: _SALES,
    TenantRole.OPERATOR: _OPERATOR,
    TenantRole.ACCOUNTANT: _ACCOUNTANT,
    TenantRole.VIEWER: _VIEWER,
})


def default_permissions_for(role: Optional[Union[TenantRole, str]]) -> FrozenSet[str]:
    """Return the default permission set for a tenant role.

    Unknown or missing roles get an empty set.
    """
    if role is None:
        return frozenset()
    try:
        return ROLE_DEFAULT_PERMISSIONS[TenantRole(role)]
    except ValueError:
        return frozenset()
