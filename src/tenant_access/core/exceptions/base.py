"""Base exceptions for tenant-access-core.

All exceptions inherit from TenantAccessError and carry an error code,
a human message and a details dict so the boundary layer can render a
structured response without parsing log lines.
"""

from typing import Any, Dict, Optional


class TenantAccessError(Exception):
    """Base exception for all tenant-access-core errors."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}

    def __str__(self) -> str:
        return self.message


def get_http_status_code(exception: Exception) -> int:
    """Get HTTP status code for exception.

    Args:
        exception: The exception instance

    Returns:
        HTTP status code
    """
    from .http_mapping import get_http_status_code as lookup_status_code
    return lookup_status_code(exception)


def create_error_response(exception: TenantAccessError) -> Dict[str, Any]:
    """Create standardized error response from exception.

    Args:
        exception: The tenant-access exception

    Returns:
        Error response dictionary
    """
    return {
        "error": {
            "code": exception.error_code,
            "message": exception.message,
            "details": exception.details,
            "type": exception.__class__.__name__,
        }
    }
