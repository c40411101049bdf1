"""Quotas feature.

Plan limits (seats, storage, monthly messages and API calls) checked against
current tenant usage.
"""

from .entities import (
    QuotaKind,
    PlanLimits,
    DEFAULT_PLAN_LIMITS,
    QuotaCheckResult,
    UsageProvider,
)
from .repositories import AsyncPGUsageProvider
from .services import QuotaService

__all__ = [
    "QuotaKind",
    "PlanLimits",
    "DEFAULT_PLAN_LIMITS",
    "QuotaCheckResult",
    "UsageProvider",
    "AsyncPGUsageProvider",
    "QuotaService",
]
