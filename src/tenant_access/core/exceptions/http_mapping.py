"""HTTP status code mapping for exceptions."""

from typing import Dict, Type

from .base import TenantAccessError
from .domain import *


HTTP_STATUS_MAP: Dict[Type[Exception], int] = {
    # 400 Bad Request
    MissingTenantContext: 400,

    # 401 Unauthorized
    AuthenticationError: 401,
    AuthenticationRequired: 401,
    AuthenticationFailed: 401,

    # 403 Forbidden
    AuthorizationError: 403,
    InsufficientPermission: 403,
    QuotaExceeded: 403,
    ModuleNotEnabled: 403,
    TenantAccessDenied: 403,
    TenantSuspended: 403,

    # 404 Not Found
    TenantNotFound: 404,

    # 429 Too Many Requests
    RateLimited: 429,

    # 500 Internal Server Error
    MalformedPermission: 500,
    TenantDirectoryError: 500,
    TenantHandleMismatch: 500,
    TenantError: 500,

    # 503 Service Unavailable
    TenantConnectionError: 503,
    TenantConnectionFailed: 503,

    # Default
    TenantAccessError: 500,
}


def get_http_status_code(exception: Exception) -> int:
    """Get HTTP status code for exception, walking the class hierarchy."""
    for exception_type in type(exception).__mro__:
        if exception_type in HTTP_STATUS_MAP:
            return HTTP_STATUS_MAP[exception_type]
    return 500
