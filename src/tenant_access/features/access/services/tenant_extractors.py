"""Ordered tenant identifier extraction.

Each extractor looks at one part of the request. The pipeline tries them in
list order and the first non-empty value wins, so the priority order is
just the order of ``default_extractors()``.
"""

import ipaddress
from dataclasses import dataclass
from typing import Any, Callable, Iterable, List, Optional, Sequence

from ....config.constants import TENANT_ID_FIELD, TenantIdSource
from ..entities.access_request import AccessRequest

DEFAULT_TENANT_HEADER = "X-Tenant-ID"
DEFAULT_RESERVED_SUBDOMAINS = ("www", "api")


@dataclass(frozen=True)
class TenantReference:
    """A tenant identifier together with where it came from.

    Subdomain values are slugs, not ids, and must be resolved through the
    tenant directory before use.
    """

    value: str
    source: TenantIdSource

    @property
    def is_slug(self) -> bool:
        return self.source == TenantIdSource.SUBDOMAIN


@dataclass(frozen=True)
class TenantIdExtractor:
    source: TenantIdSource
    extract: Callable[[AccessRequest], Optional[str]]

    def __call__(self, request: AccessRequest) -> Optional[TenantReference]:
        value = _non_empty(self.extract(request))
        if value is None:
            return None
        return TenantReference(value=value, source=self.source)


def _non_empty(value: Any) -> Optional[str]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (list, tuple)):
        value = value[0] if value else None
        if value is None:
            return None
    value = str(value).strip()
    return value or None


def _strip_port(host: str) -> str:
    if host.startswith("["):
        return host[1:].split("]")[0]
    if host.count(":") > 1:
        return host
    return host.split(":")[0]


def _is_ip_literal(hostname: str) -> bool:
    try:
        ipaddress.ip_address(hostname)
    except ValueError:
        return False
    return True


def extract_subdomain(host: Optional[str], reserved: Iterable[str] = DEFAULT_RESERVED_SUBDOMAINS) -> Optional[str]:
    """First label of a host with at least three labels, unless reserved.

    IP literals never carry a tenant.
    """
    if not host:
        return None
    hostname = _strip_port(host.strip().lower())
    if _is_ip_literal(hostname):
        return None
    parts = hostname.split(".")
    if len(parts) <= 2 or not parts[0]:
        return None
    subdomain = parts[0]
    if subdomain in {r.lower() for r in reserved}:
        return None
    return subdomain


def path_param_extractor(field: str = TENANT_ID_FIELD) -> TenantIdExtractor:
    return TenantIdExtractor(TenantIdSource.PATH, lambda request: request.path_params.get(field))


def query_param_extractor(field: str = TENANT_ID_FIELD) -> TenantIdExtractor:
    return TenantIdExtractor(TenantIdSource.QUERY, lambda request: request.query_params.get(field))


def body_field_extractor(field: str = TENANT_ID_FIELD) -> TenantIdExtractor:
    def extract(request: AccessRequest) -> Optional[str]:
        body = request.body
        if not hasattr(body, "get"):
            return None
        return body.get(field)

    return TenantIdExtractor(TenantIdSource.BODY, extract)


def header_extractor(header: str = DEFAULT_TENANT_HEADER) -> TenantIdExtractor:
    return TenantIdExtractor(TenantIdSource.HEADER, lambda request: request.header(header))


def subdomain_extractor(reserved: Sequence[str] = DEFAULT_RESERVED_SUBDOMAINS) -> TenantIdExtractor:
    reserved = tuple(reserved)
    return TenantIdExtractor(
        TenantIdSource.SUBDOMAIN,
        lambda request: extract_subdomain(request.effective_host, reserved),
    )


def principal_extractor() -> TenantIdExtractor:
    return TenantIdExtractor(
        TenantIdSource.PRINCIPAL,
        lambda request: request.principal.tenant_id if request.principal else None,
    )


def default_extractors(
    field: str = TENANT_ID_FIELD,
    header: str = DEFAULT_TENANT_HEADER,
    reserved_subdomains: Sequence[str] = DEFAULT_RESERVED_SUBDOMAINS,
    subdomain_extraction: bool = False,
) -> List[TenantIdExtractor]:
    """Path, query, body, header, subdomain, then the principal's own tenant.

    The subdomain extractor is only included when ``subdomain_extraction``
    is enabled.
    """
    extractors = [
        path_param_extractor(field),
        query_param_extractor(field),
        body_field_extractor(field),
        header_extractor(header),
    ]
    if subdomain_extraction:
        extractors.append(subdomain_extractor(reserved_subdomains))
    extractors.append(principal_extractor())
    return extractors


def extract_tenant_reference(
    request: AccessRequest,
    extractors: Sequence[TenantIdExtractor],
) -> Optional[TenantReference]:
    for extractor in extractors:
        reference = extractor(request)
        if reference is not None:
            return reference
    return None
