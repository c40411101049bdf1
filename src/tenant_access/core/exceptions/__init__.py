"""Exceptions module for tenant-access-core.

Every failure the access core surfaces to the boundary layer is a typed
subclass of TenantAccessError.
"""

from .base import (
    TenantAccessError,
    get_http_status_code,
    create_error_response,
)

from .domain import (
    # Authentication Errors
    AuthenticationError,
    AuthenticationRequired,
    AuthenticationFailed,

    # Tenant Errors
    TenantError,
    MissingTenantContext,
    TenantNotFound,
    TenantSuspended,
    TenantAccessDenied,
    TenantDirectoryError,

    # Connection Errors
    TenantConnectionError,
    TenantConnectionFailed,
    TenantHandleMismatch,

    # Authorization Errors
    AuthorizationError,
    InsufficientPermission,
    MalformedPermission,
    QuotaExceeded,
    ModuleNotEnabled,

    # Rate limiting
    RateLimited,
)

from .http_mapping import HTTP_STATUS_MAP

__all__ = [
    "TenantAccessError",
    "get_http_status_code",
    "create_error_response",
    "HTTP_STATUS_MAP",
    "AuthenticationError",
    "AuthenticationRequired",
    "AuthenticationFailed",
    "TenantError",
    "MissingTenantContext",
    "TenantNotFound",
    "TenantSuspended",
    "TenantAccessDenied",
    "TenantDirectoryError",
    "TenantConnectionError",
    "TenantConnectionFailed",
    "TenantHandleMismatch",
    "AuthorizationError",
    "InsufficientPermission",
    "MalformedPermission",
    "QuotaExceeded",
    "ModuleNotEnabled",
    "RateLimited",
]
