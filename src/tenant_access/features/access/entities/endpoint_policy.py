"""Per-endpoint access requirements."""

from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, Optional, Union

from ...quotas.entities.quota import QuotaKind


@dataclass(frozen=True)
class EndpointPolicy:
    """What a protected operation requires before it may run.

    ``permissions`` are OR-combined unless ``require_all`` is set. An empty
    permission set means any member of the tenant may call the endpoint.
    ``module`` names a product module the tenant must have enabled.
    """

    permissions: FrozenSet[str] = field(default_factory=frozenset)
    require_all: bool = False
    quota: Optional[QuotaKind] = None
    rate_limited: bool = False
    module: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "permissions", frozenset(self.permissions or ()))
        if self.quota is not None:
            object.__setattr__(self, "quota", QuotaKind(self.quota))

    @classmethod
    def of(
        cls,
        *permissions: str,
        require_all: bool = False,
        quota: Optional[Union[QuotaKind, str]] = None,
        rate_limited: bool = False,
        module: Optional[str] = None,
    ) -> "EndpointPolicy":
        return cls(
            permissions=frozenset(permissions),
            require_all=require_all,
            quota=quota,
            rate_limited=rate_limited,
            module=module,
        )

    def with_permissions(self, permissions: Iterable[str]) -> "EndpointPolicy":
        return EndpointPolicy(
            permissions=self.permissions | frozenset(permissions),
            require_all=self.require_all,
            quota=self.quota,
            rate_limited=self.rate_limited,
            module=self.module,
        )
