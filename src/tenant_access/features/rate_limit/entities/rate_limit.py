"""Rate limit value objects."""

from dataclasses import dataclass
from typing import Dict


@dataclass(frozen=True)
class RateLimitPolicy:
    """Fixed-window policy: ``max_attempts`` per ``window_seconds``."""

    max_attempts: int = 5
    window_seconds: float = 15 * 60

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.window_seconds <= 0:
            raise ValueError("window_seconds must be positive")


@dataclass
class RateWindow:
    """Attempt counter for one client key."""

    attempts: int
    reset_at: float

    def is_expired(self, now: float) -> bool:
        return now > self.reset_at


@dataclass(frozen=True)
class RateLimitDecision:
    """Outcome of one rate-limit check."""

    allowed: bool
    attempts: int
    limit: int
    retry_after_seconds: int = 0

    @property
    def remaining(self) -> int:
        return max(0, self.limit - self.attempts)

    def headers(self) -> Dict[str, str]:
        headers = {
            "X-RateLimit-Limit": str(self.limit),
            "X-RateLimit-Remaining": str(self.remaining),
        }
        if not self.allowed:
            headers["Retry-After"] = str(self.retry_after_seconds)
        return headers
