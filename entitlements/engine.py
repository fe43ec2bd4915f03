"""
Entitlement decision engine.

Pure function of its inputs: no I/O, no caching, no clock reads. The caller
loads the subscription, overrides and usage, passes the current time, and
owns any cache of the resulting decision (expires_at is a hint for it).
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Mapping, Optional

from .config import DECISION_TTL_SECONDS, FEATURE_KEYS, OVERRIDE_EXPIRY_BUFFER_SECONDS, QUOTA_KEYS
from .lifecycle import SubscriptionStatus
from .models import (
    EntitlementDecision,
    EntitlementInput,
    EntitlementOverride,
    FeatureDecision,
    PlanFeatures,
    QuotaDecision,
)
from .resolvers import (
    FEATURE_RESOLVERS,
    QUOTA_RESOLVERS,
    ResolutionContext,
    resolve,
    select_live_overrides,
)

logger = logging.getLogger(__name__)


def _ordered_keys(known: Iterable[str], *extra_sources: Iterable[str]) -> List[str]:
    known_list = list(known)
    extra = set()
    for source in extra_sources:
        extra.update(source)
    return known_list + sorted(extra.difference(known_list))


def _decision_expiry(
    now: datetime,
    overrides: Iterable[EntitlementOverride],
    pending: Iterable[EntitlementOverride],
    trial_ends_at: Optional[datetime],
) -> datetime:
    """Earliest point at which the decision may change on its own."""
    candidates = [o.expires_at - timedelta(seconds=OVERRIDE_EXPIRY_BUFFER_SECONDS) for o in overrides if o.expires_at]
    # scheduled overrides change the decision the moment they start
    candidates.extend(o.starts_at for o in pending)
    if trial_ends_at is not None and trial_ends_at > now:
        candidates.append(trial_ends_at)
    if not candidates:
        return now + timedelta(seconds=DECISION_TTL_SECONDS)
    return max(now, min(candidates))


def _collect_warnings(entitlement_input: EntitlementInput, is_active: bool) -> List[str]:
    subscription = entitlement_input.subscription
    warnings: List[str] = []
    if subscription.payment_failures > 0:
        warnings.append(f"{subscription.payment_failures} payment failure(s) detected")
    if subscription.status is SubscriptionStatus.PAST_DUE:
        warnings.append("Payment is past due")
    if subscription.status is SubscriptionStatus.TRIALING and not is_active:
        warnings.append("Trial has ended")
    if subscription.plan_features is None:
        warnings.append("Plan data unavailable - using free tier limits")
    return warnings


def compute_entitlements(entitlement_input: EntitlementInput) -> EntitlementDecision:
    """Resolve every feature and quota for the user at entitlement_input.current_time.

    Per key: live override, else plan default, else fallback. Quotas are always
    resolved; features are forced off while the subscription is inactive, even
    when an override would grant them.
    """
    now = entitlement_input.current_time
    subscription = entitlement_input.subscription
    plan: Optional[PlanFeatures] = subscription.plan_features
    is_active = subscription.is_active(now)

    warnings = _collect_warnings(entitlement_input, is_active)

    feature_overrides, quota_overrides, mismatched = select_live_overrides(
        entitlement_input.overrides, now, plan
    )
    for override in mismatched:
        logger.warning(
            "Ignoring override with mismatched value type",
            extra={"user_id": entitlement_input.user_id, "feature_key": override.feature_key, "override_id": override.id},
        )
        warnings.append(f"Override for {override.feature_key} ignored: value type does not match the key")

    ctx = ResolutionContext(plan=plan, feature_overrides=feature_overrides, quota_overrides=quota_overrides)
    applied: List[str] = []

    features: Dict[str, FeatureDecision] = {}
    plan_feature_keys: Mapping[str, bool] = plan.features if plan else {}
    for key in _ordered_keys(FEATURE_KEYS, plan_feature_keys, feature_overrides):
        if not is_active:
            features[key] = FeatureDecision(enabled=False, source="inactive", reason="Subscription inactive")
            continue
        resolution = resolve(key, ctx, FEATURE_RESOLVERS)
        features[key] = FeatureDecision(
            enabled=bool(resolution.value),
            source=resolution.source,
            reason=resolution.reason,
            override_id=resolution.override_id,
        )
        if resolution.override_id and resolution.override_id not in applied:
            applied.append(resolution.override_id)

    quotas: Dict[str, QuotaDecision] = {}
    plan_quota_keys: Mapping[str, int] = plan.quotas if plan else {}
    for key in _ordered_keys(QUOTA_KEYS, plan_quota_keys, quota_overrides):
        resolution = resolve(key, ctx, QUOTA_RESOLVERS)
        limit = int(resolution.value)
        used = entitlement_input.usage.used_for(key)
        quotas[key] = QuotaDecision(
            limit=limit,
            used=used,
            remaining=max(0, limit - used),
            source=resolution.source,
            reason=resolution.reason,
            override_id=resolution.override_id,
        )
        if resolution.override_id and resolution.override_id not in applied:
            applied.append(resolution.override_id)

    live_overrides = list(feature_overrides.values()) + list(quota_overrides.values())
    pending_overrides = [
        o
        for o in entitlement_input.overrides
        if o.is_active
        and o.starts_at is not None
        and o.starts_at > now
        and (o.expires_at is None or o.expires_at > o.starts_at)
    ]
    trial_ends_at = subscription.trial_ends_at if subscription.status is SubscriptionStatus.TRIALING else None

    decision = EntitlementDecision(
        user_id=entitlement_input.user_id,
        tenant_id=entitlement_input.tenant_id,
        subscription_status=subscription.status,
        is_active=is_active,
        features=features,
        quotas=quotas,
        computed_at=now,
        expires_at=_decision_expiry(now, live_overrides, pending_overrides, trial_ends_at),
        applied_overrides=applied,
        warnings=warnings,
    )
    logger.debug(
        "Entitlements computed",
        extra={
            "user_id": decision.user_id,
            "subscription_status": decision.subscription_status.value,
            "is_active": decision.is_active,
            "applied_overrides": len(decision.applied_overrides),
        },
    )
    return decision
