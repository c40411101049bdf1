"""Configuration for tenant-access-core."""

from .constants import (
    SystemRole,
    TenantRole,
    STAFF_ROLES,
    HandleState,
    HealthStatus,
    TenantIdSource,
    RateLimitBackend,
    DatabaseSchemas,
    PermissionTokens,
)
from .settings import AccessCoreSettings, get_settings
from .logging_config import LoggingConfig, setup_logging, get_logger

__all__ = [
    "SystemRole",
    "TenantRole",
    "STAFF_ROLES",
    "HandleState",
    "HealthStatus",
    "TenantIdSource",
    "RateLimitBackend",
    "DatabaseSchemas",
    "PermissionTokens",
    "AccessCoreSettings",
    "get_settings",
    "LoggingConfig",
    "setup_logging",
    "get_logger",
]
