"""In-process fixed-window rate limiter."""

import logging
import math
import threading
import time
from typing import Callable, Dict, Optional

from ....core.exceptions import RateLimited
from ..entities.rate_limit import RateLimitDecision, RateLimitPolicy, RateWindow

logger = logging.getLogger(__name__)


class FixedWindowRateLimiter:
    """Fixed-window attempt counter kept in process memory.

    The window map is guarded by a ``threading.Lock`` so the read, compare
    and increment for a key happen atomically, whether callers are tasks on
    one loop or threads. Each instance owns its own windows.
    """

    def __init__(
        self,
        policy: Optional[RateLimitPolicy] = None,
        clock: Callable[[], float] = time.monotonic,
        purge_every: int = 1000,
    ):
        self.policy = policy or RateLimitPolicy()
        self._clock = clock
        self._windows: Dict[str, RateWindow] = {}
        self._lock = threading.Lock()
        self._purge_every = purge_every
        self._checks_since_purge = 0

    async def check(self, key: str) -> RateLimitDecision:
        return self.check_sync(key)

    def check_sync(self, key: str) -> RateLimitDecision:
        """Record an attempt for ``key``.

        A denied attempt is not counted, so a blocked client cannot extend
        its own window.
        """
        limit = self.policy.max_attempts
        with self._lock:
            now = self._clock()
            window = self._windows.get(key)

            if window is None or window.is_expired(now):
                self._windows[key] = RateWindow(attempts=1, reset_at=now + self.policy.window_seconds)
                decision = RateLimitDecision(allowed=True, attempts=1, limit=limit)
            elif window.attempts >= limit:
                retry_after = max(1, math.ceil(window.reset_at - now))
                decision = RateLimitDecision(
                    allowed=False,
                    attempts=window.attempts,
                    limit=limit,
                    retry_after_seconds=retry_after,
                )
            else:
                window.attempts += 1
                decision = RateLimitDecision(allowed=True, attempts=window.attempts, limit=limit)

            self._checks_since_purge += 1
            if self._checks_since_purge >= self._purge_every:
                self._purge_locked(now)

        return decision

    async def enforce(self, key: str) -> RateLimitDecision:
        decision = await self.check(key)
        if not decision.allowed:
            logger.warning(f"Rate limit exceeded for {key}, retry after {decision.retry_after_seconds}s")
            raise RateLimited(decision.retry_after_seconds)
        return decision

    async def reset(self, key: str) -> None:
        with self._lock:
            self._windows.pop(key, None)

    def purge_expired(self) -> int:
        """Drop expired windows; returns how many were removed."""
        with self._lock:
            return self._purge_locked(self._clock())

    def _purge_locked(self, now: float) -> int:
        expired = [key for key, window in self._windows.items() if window.is_expired(now)]
        for key in expired:
            del self._windows[key]
        self._checks_since_purge = 0
        if expired:
            logger.debug(f"Purged {len(expired)} expired rate limit windows")
        return len(expired)

    def __len__(self) -> int:
        return len(self._windows)
