"""Rate limit feature.

Fixed-window attempt counters keyed by client address, used to guard
sensitive endpoints such as login and password reset.
"""

from .entities import RateLimitPolicy, RateWindow, RateLimitDecision, RateLimiter
from .services import FixedWindowRateLimiter, RedisRateLimiter

__all__ = [
    "RateLimitPolicy",
    "RateWindow",
    "RateLimitDecision",
    "RateLimiter",
    "FixedWindowRateLimiter",
    "RedisRateLimiter",
]
