"""Access pipeline entities."""

from .access_request import AccessRequest
from .endpoint_policy import EndpointPolicy
from .access_context import AccessContext

__all__ = ["AccessRequest", "EndpointPolicy", "AccessContext"]
