"""Quota entities."""

from .quota import (
    QuotaKind,
    PlanLimits,
    DEFAULT_PLAN_LIMITS,
    QuotaCheckResult,
    BYTES_PER_GB,
)
from .protocols import UsageProvider

__all__ = [
    "QuotaKind",
    "PlanLimits",
    "DEFAULT_PLAN_LIMITS",
    "QuotaCheckResult",
    "BYTES_PER_GB",
    "UsageProvider",
]
