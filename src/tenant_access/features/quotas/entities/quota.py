"""Plan limit value objects."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union


class QuotaKind(str, Enum):
    """Tenant usage ceilings an endpoint may declare."""

    SEATS = "seats"
    STORAGE = "storage"
    MONTHLY_EMAIL = "monthly_email"
    MONTHLY_MESSAGE = "monthly_message"
    MONTHLY_API_CALL = "monthly_api_call"


BYTES_PER_GB = 1024 * 1024 * 1024


@dataclass(frozen=True)
class PlanLimits:
    """Ceilings from a tenant's active plan. None or 0 means unlimited."""

    max_seats: Optional[int] = None
    max_storage_gb: Optional[float] = None
    max_monthly_emails: Optional[int] = None
    max_monthly_messages: Optional[int] = None
    max_monthly_api_calls: Optional[int] = None

    def limit_for(self, kind: Union[QuotaKind, str]) -> Optional[float]:
        kind = QuotaKind(kind)
        if kind == QuotaKind.SEATS:
            return self.max_seats
        if kind == QuotaKind.STORAGE:
            return self.max_storage_gb
        if kind == QuotaKind.MONTHLY_EMAIL:
            return self.max_monthly_emails
        if kind == QuotaKind.MONTHLY_MESSAGE:
            return self.max_monthly_messages
        return self.max_monthly_api_calls


# Limits for tenants without an active subscription
DEFAULT_PLAN_LIMITS = PlanLimits(
    max_seats=2,
    max_storage_gb=1,
    max_monthly_emails=100,
    max_monthly_messages=50,
    max_monthly_api_calls=1000,
)


@dataclass(frozen=True)
class QuotaCheckResult:
    """Outcome of a quota check.

    ``current`` and ``maximum`` are in the kind's unit: a count, or GB for
    storage. ``failed_open`` marks a check allowed only because usage could
    not be determined.
    """

    kind: QuotaKind
    allowed: bool
    current: Optional[float] = None
    maximum: Optional[float] = None
    reason: Optional[str] = None
    failed_open: bool = False
