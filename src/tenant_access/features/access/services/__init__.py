from .tenant_extractors import (
    TenantReference,
    TenantIdExtractor,
    extract_subdomain,
    path_param_extractor,
    query_param_extractor,
    body_field_extractor,
    header_extractor,
    subdomain_extractor,
    principal_extractor,
    default_extractors,
    extract_tenant_reference,
)
from .principal_authenticator import JwtPrincipalAuthenticator
from .access_pipeline import RequestAccessPipeline

__all__ = [
    "TenantReference",
    "TenantIdExtractor",
    "extract_subdomain",
    "path_param_extractor",
    "query_param_extractor",
    "body_field_extractor",
    "header_extractor",
    "subdomain_extractor",
    "principal_extractor",
    "default_extractors",
    "extract_tenant_reference",
    "JwtPrincipalAuthenticator",
    "RequestAccessPipeline",
]
