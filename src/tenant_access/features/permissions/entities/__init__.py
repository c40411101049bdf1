"""Permission entities."""

from .permission import PermissionString
from .role_defaults import (
    KNOWN_PERMISSIONS,
    ROLE_DEFAULT_PERMISSIONS,
    default_permissions_for,
)

__all__ = [
    "PermissionString",
    "KNOWN_PERMISSIONS",
    "ROLE_DEFAULT_PERMISSIONS",
    "default_permissions_for",
]
