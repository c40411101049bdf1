"""Redis-backed fixed-window rate limiter for multi-process deployments."""

import logging
import math
from typing import Optional

import redis.asyncio as redis

from ....core.exceptions import RateLimited
from ..entities.rate_limit import RateLimitDecision, RateLimitPolicy

logger = logging.getLogger(__name__)

# Returns {allowed, attempts, ttl_ms}. Runs atomically on the server.
_CHECK_SCRIPT = """
local current = tonumber(redis.call('GET', KEYS[1]) or '0')
local limit = tonumber(ARGV[1])
local window_ms = tonumber(ARGV[2])
if current >= limit then
    return {0, current, redis.call('PTTL', KEYS[1])}
end
current = redis.call('INCR', KEYS[1])
if current == 1 then
    redis.call('PEXPIRE', KEYS[1], window_ms)
end
return {1, current, redis.call('PTTL', KEYS[1])}
"""


class RedisRateLimiter:
    """Fixed-window limiter whose counters live in Redis.

    Window expiry is delegated to key TTLs, so there is nothing to purge.
    """

    def __init__(
        self,
        redis_client: redis.Redis,
        policy: Optional[RateLimitPolicy] = None,
        key_prefix: str = "rate_limit",
    ):
        self._redis = redis_client
        self.policy = policy or RateLimitPolicy()
        self._key_prefix = key_prefix
        self._script = redis_client.register_script(_CHECK_SCRIPT)

    def _build_key(self, key: str) -> str:
        return f"{self._key_prefix}:{key}"

    async def check(self, key: str) -> RateLimitDecision:
        limit = self.policy.max_attempts
        window_ms = int(self.policy.window_seconds * 1000)
        allowed, attempts, ttl_ms = await self._script(keys=[self._build_key(key)], args=[limit, window_ms])

        if allowed:
            return RateLimitDecision(allowed=True, attempts=int(attempts), limit=limit)

        # A key without TTL cannot recover on its own; report a full window
        ttl_ms = int(ttl_ms) if int(ttl_ms) > 0 else window_ms
        return RateLimitDecision(
            allowed=False,
            attempts=int(attempts),
            limit=limit,
            retry_after_seconds=max(1, math.ceil(ttl_ms / 1000)),
        )

    async def enforce(self, key: str) -> RateLimitDecision:
        decision = await self.check(key)
        if not decision.allowed:
            logger.warning(f"Rate limit exceeded for {key}, retry after {decision.retry_after_seconds}s")
            raise RateLimited(decision.retry_after_seconds)
        return decision

    async def reset(self, key: str) -> None:
        await self._redis.delete(self._build_key(key))

    def purge_expired(self) -> int:
        return 0
