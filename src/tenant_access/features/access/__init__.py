"""Access feature.

The request access pipeline: authentication check, rate limiting, tenant
resolution, tenant access, permissions, tenant handle and quotas, in that
order.
"""

from .entities import AccessRequest, EndpointPolicy, AccessContext
from .services import (
    TenantReference,
    TenantIdExtractor,
    default_extractors,
    extract_tenant_reference,
    JwtPrincipalAuthenticator,
    RequestAccessPipeline,
)

__all__ = [
    "AccessRequest",
    "EndpointPolicy",
    "AccessContext",
    "TenantReference",
    "TenantIdExtractor",
    "default_extractors",
    "extract_tenant_reference",
    "JwtPrincipalAuthenticator",
    "RequestAccessPipeline",
]
