"""Domain exceptions for tenant-access-core.

None of these carry tenant connection coordinates or credentials; callers
only ever see tenant ids, permission strings and counters.
"""

from typing import Iterable, Optional

from .base import TenantAccessError


# Authentication Errors
class AuthenticationError(TenantAccessError):
    """Base class for authentication-related errors."""
    pass


class AuthenticationRequired(AuthenticationError):
    """Raised when a protected operation is reached without a principal."""

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message)


class AuthenticationFailed(AuthenticationError):
    """Raised when presented credentials cannot be verified."""
    pass


# Tenant Errors
class TenantError(TenantAccessError):
    """Base class for tenant-related errors."""
    pass


class MissingTenantContext(TenantError):
    """Raised when no tenant identifier is found in any accepted source."""

    def __init__(self, message: str = "Tenant identification required"):
        super().__init__(message)


class TenantNotFound(TenantError):
    """Raised when the tenant directory has no such tenant."""

    def __init__(self, tenant_ref: str):
        self.tenant_ref = tenant_ref
        super().__init__(
            f"Tenant not found: {tenant_ref}",
            details={"tenant": tenant_ref},
        )


class TenantSuspended(TenantError):
    """Raised when a tenant is suspended or inactive."""

    def __init__(self, tenant_id: str, reason: str = "suspended"):
        self.tenant_id = tenant_id
        self.reason = reason
        super().__init__(
            f"Tenant {tenant_id} is {reason}",
            details={"tenant_id": tenant_id, "reason": reason},
        )


class TenantAccessDenied(TenantError):
    """Raised when a principal may not act on the requested tenant."""

    def __init__(self, principal_id: str, tenant_id: str):
        self.principal_id = principal_id
        self.tenant_id = tenant_id
        super().__init__(
            "Access denied to this tenant",
            details={"tenant_id": tenant_id},
        )


class TenantDirectoryError(TenantError):
    """Raised when the control-plane lookup itself fails."""
    pass


# Connection Errors
class TenantConnectionError(TenantAccessError):
    """Base class for tenant connection errors."""
    pass


class TenantConnectionFailed(TenantConnectionError):
    """Raised when opening or verifying a tenant handle fails."""

    def __init__(self, tenant_id: str, reason: str = "connection failed"):
        self.tenant_id = tenant_id
        self.reason = reason
        super().__init__(
            f"Could not connect to the data store for tenant {tenant_id}: {reason}",
            details={"tenant_id": tenant_id, "reason": reason},
        )


class TenantHandleMismatch(TenantConnectionError):
    """Raised when a handle bound to one tenant is offered for another."""

    def __init__(self, expected_tenant_id: str, bound_tenant_id: str):
        self.expected_tenant_id = expected_tenant_id
        self.bound_tenant_id = bound_tenant_id
        super().__init__(
            f"Tenant handle bound to {bound_tenant_id} cannot serve tenant {expected_tenant_id}",
            details={"tenant_id": expected_tenant_id},
        )


# Authorization Errors
class AuthorizationError(TenantAccessError):
    """Base class for authorization-related errors."""
    pass


class InsufficientPermission(AuthorizationError):
    """Raised when the effective permissions do not satisfy a requirement."""

    def __init__(self, missing: Iterable[str], require_all: bool = False):
        self.missing = sorted(missing)
        joiner = " and " if require_all else " or "
        prefix = "Required" if require_all else "Required one of"
        super().__init__(
            f"Insufficient permissions. {prefix}: {joiner.join(self.missing)}",
            details={"missing_permissions": self.missing, "require_all": require_all},
        )


class MalformedPermission(AuthorizationError):
    """Raised when a permission string is not module:action or module:submodule:action."""

    def __init__(self, permission: str):
        self.permission = permission
        super().__init__(
            f"Invalid permission format: {permission!r}",
            details={"permission": permission},
        )


class QuotaExceeded(AuthorizationError):
    """Raised when a tenant usage ceiling has been reached."""

    def __init__(self, kind: str, current: float, maximum: float, message: Optional[str] = None):
        self.kind = kind
        self.current = current
        self.maximum = maximum
        super().__init__(
            message or f"Plan limit reached for {kind}: {current} of {maximum}",
            details={"kind": kind, "current": current, "maximum": maximum},
        )


class ModuleNotEnabled(AuthorizationError):
    """Raised when a tenant does not have a required product module enabled."""

    def __init__(self, module: str, tenant_id: str):
        self.module = module
        self.tenant_id = tenant_id
        super().__init__(
            f"Module \"{module}\" is not enabled for this tenant",
            details={"module": module, "tenant_id": tenant_id},
        )


# Rate limiting
class RateLimited(TenantAccessError):
    """Raised when a client key has made too many attempts."""

    def __init__(self, retry_after_seconds: int):
        self.retry_after_seconds = retry_after_seconds
        super().__init__(
            f"Too many attempts. Try again in {retry_after_seconds} seconds.",
            details={"retry_after_seconds": retry_after_seconds},
        )
