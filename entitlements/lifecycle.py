"""
Subscription lifecycle.

    trialing -> active -> past_due -> cancelled
    trialing -> cancelled          (trial ended without conversion)
    past_due -> active             (payment retried successfully)

Transitions are driven by billing events outside this package; here they are
only described so callers can validate incoming state changes. Activity is
decided by is_subscription_active alone.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Dict, FrozenSet, Optional

_LEGACY_ALIASES = {
    "trial": "trialing",
    "canceled": "cancelled",
}


class SubscriptionStatus(str, Enum):
    TRIALING = "trialing"
    ACTIVE = "active"
    PAST_DUE = "past_due"
    CANCELLED = "cancelled"
    EXPIRED = "expired"
    PAUSED = "paused"
    SUSPENDED = "suspended"
    NONE = "none"  # No subscription

    @classmethod
    def parse(cls, value: "str | SubscriptionStatus") -> "SubscriptionStatus":
        if isinstance(value, cls):
            return value
        normalized = str(value).strip().lower()
        normalized = _LEGACY_ALIASES.get(normalized, normalized)
        try:
            return cls(normalized)
        except ValueError:
            raise ValueError(f"unknown subscription status: {value!r}") from None


ALLOWED_TRANSITIONS: Dict[SubscriptionStatus, FrozenSet[SubscriptionStatus]] = {
    SubscriptionStatus.NONE: frozenset({SubscriptionStatus.TRIALING, SubscriptionStatus.ACTIVE}),
    SubscriptionStatus.TRIALING: frozenset(
        {SubscriptionStatus.ACTIVE, SubscriptionStatus.CANCELLED, SubscriptionStatus.EXPIRED}
    ),
    SubscriptionStatus.ACTIVE: frozenset(
        {
            SubscriptionStatus.PAST_DUE,
            SubscriptionStatus.CANCELLED,
            SubscriptionStatus.PAUSED,
            SubscriptionStatus.SUSPENDED,
        }
    ),
    SubscriptionStatus.PAST_DUE: frozenset(
        {SubscriptionStatus.ACTIVE, SubscriptionStatus.CANCELLED, SubscriptionStatus.SUSPENDED}
    ),
    SubscriptionStatus.PAUSED: frozenset({SubscriptionStatus.ACTIVE, SubscriptionStatus.CANCELLED}),
    SubscriptionStatus.SUSPENDED: frozenset({SubscriptionStatus.ACTIVE, SubscriptionStatus.CANCELLED}),
    SubscriptionStatus.CANCELLED: frozenset({SubscriptionStatus.EXPIRED}),
    SubscriptionStatus.EXPIRED: frozenset(),
}


def can_transition(current: SubscriptionStatus, target: SubscriptionStatus) -> bool:
    return SubscriptionStatus.parse(target) in ALLOWED_TRANSITIONS[SubscriptionStatus.parse(current)]


def is_subscription_active(
    status: SubscriptionStatus,
    now: datetime,
    trial_ends_at: Optional[datetime] = None,
) -> bool:
    """Active subscriptions, and trials that have not yet ended. A trial without an end date is not active."""
    status = SubscriptionStatus.parse(status)
    if status is SubscriptionStatus.ACTIVE:
        return True
    if status is SubscriptionStatus.TRIALING:
        return trial_ends_at is not None and now < trial_ends_at
    return False
