"""FastAPI integration for tenant-access-core."""

from .dependencies import TenantAccessDependencies, access_request_from, get_client_ip
from .exception_handlers import ExceptionHandlerRegistry, register_exception_handlers
from .factory import AccessCore, build_access_core, create_rate_limiter, access_core_lifespan

__all__ = [
    "TenantAccessDependencies",
    "access_request_from",
    "get_client_ip",
    "ExceptionHandlerRegistry",
    "register_exception_handlers",
    "AccessCore",
    "build_access_core",
    "create_rate_limiter",
    "access_core_lifespan",
]
