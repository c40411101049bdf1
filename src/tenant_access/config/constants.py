"""Constants and enumerations shared across tenant-access-core."""

from enum import Enum
from typing import Final, FrozenSet


class SystemRole(str, Enum):
    """Platform-level roles carried by every principal."""

    SUPER_ADMIN = "super_admin"
    SUPPORT = "support"
    BILLING_ADMIN = "billing_admin"
    TENANT_ADMIN = "tenant_admin"
    USER = "user"


class TenantRole(str, Enum):
    """Roles inside a single tenant."""

    ADMIN = "admin"
    MANAGER = "manager"
    SALES = "sales"
    OPERATOR = "operator"
    ACCOUNTANT = "accountant"
    VIEWER = "viewer"


# Roles allowed to act on any tenant
STAFF_ROLES: Final[FrozenSet[SystemRole]] = frozenset({
    SystemRole.SUPER_ADMIN,
    SystemRole.SUPPORT,
    SystemRole.BILLING_ADMIN,
})


class HandleState(str, Enum):
    """Lifecycle of a cached tenant handle."""

    UNRESOLVED = "unresolved"
    RESOLVING = "resolving"
    READY = "ready"
    UNHEALTHY = "unhealthy"
    CLOSED = "closed"


class HealthStatus(str, Enum):
    """Aggregated health status."""

    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"
    UNKNOWN = "unknown"


class TenantIdSource(str, Enum):
    """Where a tenant identifier was found on a request."""

    PATH = "path"
    QUERY = "query"
    BODY = "body"
    HEADER = "header"
    SUBDOMAIN = "subdomain"
    PRINCIPAL = "principal"


class RateLimitBackend(str, Enum):
    """Storage backends for rate-limit windows."""

    MEMORY = "memory"
    REDIS = "redis"


class DatabaseSchemas:
    """Database schema names used by the control plane."""

    ADMIN: Final[str] = "admin"


class PermissionTokens:
    """Special permission tokens."""

    GLOBAL_WILDCARD: Final[str] = "*"
    ADMIN_WILDCARD: Final[str] = "admin:*"
    VIEW_ALL: Final[str] = "view_all"
    ANY_VIEW_ALL: Final[str] = "*:view_all"
    WILDCARD_SEGMENT: Final[str] = "*"
    SEPARATOR: Final[str] = ":"


# Actions reported by capability summaries
CAPABILITY_ACTIONS: Final[tuple] = ("read", "write", "delete", "export", "assign", "approve", "manage")

# Sentinel tenant field name used by the default request-body/query extractors
TENANT_ID_FIELD: Final[str] = "tenantId"
