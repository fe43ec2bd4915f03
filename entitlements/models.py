from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Literal, Mapping, Optional, Tuple, Union

from .config import DEFAULT_FEATURE_VALUES, DEFAULT_QUOTA_LIMITS, QUOTA_USAGE_KEYS
from .lifecycle import SubscriptionStatus, is_subscription_active

ResolutionSource = Literal["override", "plan", "default", "inactive"]
OverrideValue = Union[bool, int]


def _require_aware(name: str, value: Optional[datetime]) -> None:
    if value is not None and value.tzinfo is None:
        raise ValueError(f"{name} must be timezone-aware")


@dataclass(frozen=True)
class PlanFeatures:
    """Plan defaults: boolean feature flags and numeric quota limits."""

    features: Mapping[str, bool] = field(default_factory=dict)
    quotas: Mapping[str, int] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "features", MappingProxyType({str(k).strip(): bool(v) for k, v in self.features.items()}))
        object.__setattr__(self, "quotas", MappingProxyType({str(k).strip(): int(v) for k, v in self.quotas.items()}))

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Union[bool, int, float]]) -> "PlanFeatures":
        """Split a flat plan feature row (flags and limits mixed) by value type."""
        features = {}
        quotas = {}
        for key, value in raw.items():
            if isinstance(value, bool):
                features[key] = value
            elif isinstance(value, (int, float)):
                quotas[key] = int(value)
            else:
                raise ValueError(f"plan feature {key!r} must be a boolean or a number")
        return cls(features=features, quotas=quotas)


FALLBACK_PLAN_FEATURES = PlanFeatures(features=DEFAULT_FEATURE_VALUES, quotas=DEFAULT_QUOTA_LIMITS)


@dataclass(frozen=True)
class SubscriptionSnapshot:
    """Subscription truth at the instant of the query."""

    status: SubscriptionStatus
    plan_features: Optional[PlanFeatures] = None
    plan_id: Optional[str] = None
    current_period_end: Optional[datetime] = None
    trial_ends_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    payment_failures: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "status", SubscriptionStatus.parse(self.status))
        for name in ("current_period_end", "trial_ends_at", "cancelled_at"):
            _require_aware(name, getattr(self, name))
        if self.payment_failures < 0:
            raise ValueError("payment_failures cannot be negative")

    def is_active(self, now: datetime) -> bool:
        return is_subscription_active(self.status, now, self.trial_ends_at)


@dataclass(frozen=True)
class EntitlementOverride:
    """Admin-granted exception on a single feature or quota key.

    Boolean values patch features, integer values patch quota limits.
    """

    feature_key: str
    value: OverrideValue
    expires_at: Optional[datetime] = None
    is_active: bool = True
    id: Optional[str] = None
    starts_at: Optional[datetime] = None
    reason: Optional[str] = None

    def __post_init__(self) -> None:
        feature_key = str(self.feature_key).strip()
        if not feature_key:
            raise ValueError("feature_key is required")
        if not isinstance(self.value, (bool, int)):
            raise ValueError("override value must be a boolean or an integer")
        _require_aware("expires_at", self.expires_at)
        _require_aware("starts_at", self.starts_at)
        object.__setattr__(self, "feature_key", feature_key)

    @property
    def is_feature_value(self) -> bool:
        return isinstance(self.value, bool)

    def is_live(self, now: datetime) -> bool:
        if not self.is_active:
            return False
        if self.starts_at is not None and self.starts_at > now:
            return False
        return self.expires_at is None or self.expires_at > now


@dataclass(frozen=True)
class UsageSnapshot:
    """Consumed amounts, keyed by usage counter (quotesUsed) or quota key (maxQuotes)."""

    counters: Mapping[str, Union[int, float]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "counters", MappingProxyType(dict(self.counters)))

    def used_for(self, quota_key: str) -> Union[int, float]:
        usage_key = QUOTA_USAGE_KEYS.get(quota_key)
        if usage_key is not None and usage_key in self.counters:
            return self.counters[usage_key]
        return self.counters.get(quota_key, 0)


@dataclass(frozen=True)
class EntitlementInput:
    user_id: str
    subscription: SubscriptionSnapshot
    current_time: datetime
    tenant_id: Optional[str] = None
    overrides: Tuple[EntitlementOverride, ...] = ()
    usage: UsageSnapshot = field(default_factory=UsageSnapshot)

    def __post_init__(self) -> None:
        user_id = str(self.user_id).strip()
        if not user_id:
            raise ValueError("user_id is required")
        _require_aware("current_time", self.current_time)
        object.__setattr__(self, "user_id", user_id)
        object.__setattr__(self, "overrides", tuple(self.overrides))


@dataclass(frozen=True)
class FeatureDecision:
    enabled: bool
    source: ResolutionSource
    reason: str
    override_id: Optional[str] = None


@dataclass(frozen=True)
class QuotaDecision:
    limit: int
    used: Union[int, float]
    remaining: Union[int, float]
    source: ResolutionSource
    reason: str
    override_id: Optional[str] = None

    @property
    def exceeded(self) -> bool:
        return self.used > self.limit


@dataclass(frozen=True)
class EntitlementDecision:
    """Authoritative feature and quota decision for one user at one instant."""

    user_id: str
    tenant_id: Optional[str]
    subscription_status: SubscriptionStatus
    is_active: bool
    features: Mapping[str, FeatureDecision]
    quotas: Mapping[str, QuotaDecision]
    computed_at: datetime
    expires_at: datetime
    applied_overrides: Tuple[str, ...] = ()
    warnings: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "features", MappingProxyType(dict(self.features)))
        object.__setattr__(self, "quotas", MappingProxyType(dict(self.quotas)))
        object.__setattr__(self, "applied_overrides", tuple(self.applied_overrides))
        object.__setattr__(self, "warnings", tuple(self.warnings))

    def has_feature(self, feature_key: str) -> bool:
        normalized_key = str(feature_key).strip()
        if not normalized_key:
            return False
        result = self.features.get(normalized_key)
        return bool(result and result.enabled)

    def quota(self, quota_key: str) -> Optional[QuotaDecision]:
        return self.quotas.get(str(quota_key).strip())
