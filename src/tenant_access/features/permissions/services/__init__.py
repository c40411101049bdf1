"""Permission services."""

from .permission_resolver import (
    PermissionResolver,
    default_resolver,
    has_permission,
    has_any,
    has_all,
    can_view_all,
    effective_permissions,
)

__all__ = [
    "PermissionResolver",
    "default_resolver",
    "has_permission",
    "has_any",
    "has_all",
    "can_view_all",
    "effective_permissions",
]
