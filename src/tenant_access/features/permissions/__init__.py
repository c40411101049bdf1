"""Permissions feature.

Parses hierarchical ``module[:submodule]:action`` permission strings,
resolves wildcard matches and builds a principal's effective permission
set from role defaults and per-principal overrides.
"""

from .entities import (
    PermissionString,
    KNOWN_PERMISSIONS,
    ROLE_DEFAULT_PERMISSIONS,
    default_permissions_for,
)
from .services import (
    PermissionResolver,
    default_resolver,
    has_permission,
    has_any,
    has_all,
    can_view_all,
    effective_permissions,
)

__all__ = [
    "PermissionString",
    "KNOWN_PERMISSIONS",
    "ROLE_DEFAULT_PERMISSIONS",
    "default_permissions_for",
    "PermissionResolver",
    "default_resolver",
    "has_permission",
    "has_any",
    "has_all",
    "can_view_all",
    "effective_permissions",
]
