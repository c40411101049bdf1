"""Rate limit entities."""

from .rate_limit import RateLimitPolicy, RateWindow, RateLimitDecision
from .protocols import RateLimiter

__all__ = ["RateLimitPolicy", "RateWindow", "RateLimitDecision", "RateLimiter"]
