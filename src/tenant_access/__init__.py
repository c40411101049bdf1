"""Tenant Access Core - tenant routing and authorization for database-per-tenant services.

Resolves which tenant a request targets, checks the caller may act on it,
hands back a handle to that tenant's own database, and turns the caller's
permissions into row-level ownership filters.
"""

# Initialize logging configuration on import
from .config.logging_config import setup_logging
setup_logging()

from .__version__ import __version__

from .config import (
    AccessCoreSettings,
    get_settings,
    SystemRole,
    TenantRole,
    HandleState,
    HealthStatus,
    TenantIdSource,
)

from .core.entities import Principal
from .core.exceptions import (
    TenantAccessError,
    AuthenticationRequired,
    AuthenticationFailed,
    MissingTenantContext,
    TenantNotFound,
    TenantSuspended,
    TenantAccessDenied,
    TenantDirectoryError,
    TenantConnectionFailed,
    TenantHandleMismatch,
    InsufficientPermission,
    MalformedPermission,
    QuotaExceeded,
    ModuleNotEnabled,
    RateLimited,
)

from .features.permissions import PermissionResolver, PermissionString
from .features.data_scope import (
    DataScopeTranslator,
    EntityKind,
    Predicate,
    MatchAll,
    MatchNone,
    FieldEquals,
    AllOf,
    AnyOf,
)
from .features.tenants import Tenant, TenantDirectory, AsyncPGTenantDirectory
from .features.database import TenantHandle, TenantConnectionRouter, AsyncPGHandleFactory
from .features.rate_limit import FixedWindowRateLimiter, RedisRateLimiter, RateLimitPolicy
from .features.quotas import QuotaKind, QuotaService, PlanLimits
from .features.modules import ModuleAccessProvider, AsyncPGModuleAccessProvider
from .features.access import (
    AccessRequest,
    AccessContext,
    EndpointPolicy,
    RequestAccessPipeline,
    JwtPrincipalAuthenticator,
)

__all__ = [
    "__version__",
    "AccessCoreSettings",
    "get_settings",
    "SystemRole",
    "TenantRole",
    "HandleState",
    "HealthStatus",
    "TenantIdSource",
    "Principal",
    "TenantAccessError",
    "AuthenticationRequired",
    "AuthenticationFailed",
    "MissingTenantContext",
    "TenantNotFound",
    "TenantSuspended",
    "TenantAccessDenied",
    "TenantDirectoryError",
    "TenantConnectionFailed",
    "TenantHandleMismatch",
    "InsufficientPermission",
    "MalformedPermission",
    "QuotaExceeded",
    "ModuleNotEnabled",
    "RateLimited",
    "PermissionResolver",
    "PermissionString",
    "DataScopeTranslator",
    "EntityKind",
    "Predicate",
    "MatchAll",
    "MatchNone",
    "FieldEquals",
    "AllOf",
    "AnyOf",
    "Tenant",
    "TenantDirectory",
    "AsyncPGTenantDirectory",
    "TenantHandle",
    "TenantConnectionRouter",
    "AsyncPGHandleFactory",
    "FixedWindowRateLimiter",
    "RedisRateLimiter",
    "RateLimitPolicy",
    "QuotaKind",
    "QuotaService",
    "PlanLimits",
    "ModuleAccessProvider",
    "AsyncPGModuleAccessProvider",
    "AccessRequest",
    "AccessContext",
    "EndpointPolicy",
    "RequestAccessPipeline",
    "JwtPrincipalAuthenticator",
]
