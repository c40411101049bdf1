"""Protocol interfaces for rate limiters."""

from abc import abstractmethod
from typing import Protocol, runtime_checkable

from .rate_limit import RateLimitDecision


@runtime_checkable
class RateLimiter(Protocol):
    """Counts attempts per client key and decides whether to allow them."""

    @abstractmethod
    async def check(self, key: str) -> RateLimitDecision:
        """Record an attempt for ``key`` and return the decision."""
        ...

    @abstractmethod
    async def enforce(self, key: str) -> RateLimitDecision:
        """Like check(), but raises RateLimited when denied."""
        ...

    @abstractmethod
    async def reset(self, key: str) -> None:
        ...
