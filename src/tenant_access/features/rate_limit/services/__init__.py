from .memory_rate_limiter import FixedWindowRateLimiter
from .redis_rate_limiter import RedisRateLimiter

__all__ = ["FixedWindowRateLimiter", "RedisRateLimiter"]
