"""FastAPI dependencies for tenant-scoped endpoints."""

import ipaddress
import json
import logging
from typing import Any, Callable, Collection, Mapping, Optional, Union

from fastapi import Request

from ...core.entities import Principal
from ...core.exceptions import AuthenticationRequired
from ...features.access.entities.access_context import AccessContext
from ...features.access.entities.access_request import AccessRequest
from ...features.access.entities.endpoint_policy import EndpointPolicy
from ...features.access.services.access_pipeline import RequestAccessPipeline
from ...features.access.services.principal_authenticator import JwtPrincipalAuthenticator
from ...features.quotas.entities.quota import QuotaKind
from ...features.rate_limit.entities.rate_limit import RateLimitDecision

logger = logging.getLogger(__name__)

_BODY_METHODS = frozenset({"POST", "PUT", "PATCH", "DELETE"})


def get_client_ip(request: Request, trusted_proxies: Collection[str] = ()) -> str:
    """Real client IP, accounting for proxies."""
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        # First valid address that is not one of our proxies
        for ip in (part.strip() for part in forwarded_for.split(",")):
            try:
                ipaddress.ip_address(ip)
            except ValueError:
                continue
            if ip not in trusted_proxies:
                return ip

    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        try:
            ipaddress.ip_address(real_ip.strip())
            return real_ip.strip()
        except ValueError:
            pass

    if request.client and request.client.host:
        return request.client.host
    return "unknown"


async def _read_json_body(request: Request) -> Optional[Mapping[str, Any]]:
    if request.method not in _BODY_METHODS:
        return None
    if "json" not in request.headers.get("content-type", ""):
        return None
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return None
    return body if isinstance(body, dict) else None


async def access_request_from(
    request: Request,
    principal: Optional[Principal] = None,
    trusted_proxies: Collection[str] = (),
) -> AccessRequest:
    """Build a transport-agnostic AccessRequest from a Starlette request."""
    return AccessRequest(
        principal=principal,
        path_params=dict(request.path_params),
        query_params=dict(request.query_params),
        body=await _read_json_body(request),
        headers=dict(request.headers),
        host=request.headers.get("host"),
        client_address=get_client_ip(request, trusted_proxies),
    )


class TenantAccessDependencies:
    """Factory for FastAPI dependencies backed by one access pipeline."""

    def __init__(
        self,
        pipeline: RequestAccessPipeline,
        authenticator: Optional[JwtPrincipalAuthenticator] = None,
        trusted_proxies: Collection[str] = (),
    ):
        self.pipeline = pipeline
        self.authenticator = authenticator
        self.trusted_proxies = frozenset(trusted_proxies)

    async def get_principal(self, request: Request) -> Principal:
        """Principal set by upstream middleware, else from the bearer token."""
        principal = getattr(request.state, "principal", None)
        if isinstance(principal, Principal):
            return principal
        if self.authenticator is None:
            raise AuthenticationRequired()
        principal = self.authenticator.authenticate_header(request.headers.get("Authorization"))
        request.state.principal = principal
        return principal

    def require(
        self,
        *permissions: str,
        quota: Optional[Union[QuotaKind, str]] = None,
        rate_limited: bool = False,
        require_all: bool = False,
        module: Optional[str] = None,
    ) -> Callable:
        """Dependency that runs the access pipeline and yields an AccessContext.

        Example:
            @app.get("/tenants/{tenantId}/customers")
            async def list_customers(ctx: AccessContext = Depends(access.require("crm:customers:read"))):
                where, params = ctx.scope("customers").to_sql()
        """
        policy = EndpointPolicy.of(
            *permissions,
            require_all=require_all,
            quota=quota,
            rate_limited=rate_limited,
            module=module,
        )

        async def dependency(request: Request) -> AccessContext:
            principal = await self.get_principal(request)
            access_request = await access_request_from(request, principal, self.trusted_proxies)
            context = await self.pipeline.authorize(access_request, policy)
            request.state.access_context = context
            return context

        return dependency

    def rate_limit(self) -> Callable:
        """Dependency for unauthenticated sensitive endpoints such as login."""

        async def dependency(request: Request) -> Optional[RateLimitDecision]:
            if self.pipeline.rate_limiter is None:
                return None
            key = get_client_ip(request, self.trusted_proxies)
            return await self.pipeline.rate_limiter.enforce(key)

        return dependency
