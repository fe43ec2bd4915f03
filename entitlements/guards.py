"""Request-side checks against a computed EntitlementDecision."""

from typing import Union

from .errors import FeatureDeniedError, QuotaExceededError, SubscriptionInactiveError
from .models import EntitlementDecision, QuotaDecision


def require_feature(decision: EntitlementDecision, feature_key: str) -> None:
    if not decision.is_active:
        raise SubscriptionInactiveError(
            user_id=decision.user_id,
            subscription_status=decision.subscription_status.value,
            feature_key=feature_key,
        )
    if decision.has_feature(feature_key):
        return
    result = decision.features.get(str(feature_key).strip())
    reason = result.reason if result else "Unknown feature"
    raise FeatureDeniedError(user_id=decision.user_id, feature_key=feature_key, reason=reason)


def require_quota(decision: EntitlementDecision, quota_key: str, amount: Union[int, float] = 1) -> QuotaDecision:
    """Raise QuotaExceededError unless `amount` more units fit; unknown quotas allow nothing."""
    quota = decision.quota(quota_key)
    if quota is None:
        raise QuotaExceededError(user_id=decision.user_id, quota_key=quota_key, limit=0, used=0, requested=amount)
    if quota.remaining < amount:
        raise QuotaExceededError(
            user_id=decision.user_id,
            quota_key=quota_key,
            limit=quota.limit,
            used=quota.used,
            requested=amount,
        )
    return quota
