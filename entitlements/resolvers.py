"""
Ordered value resolvers for entitlement keys.

Each resolver returns a Resolution or None; the first answer wins.
Order: live override -> plan default -> hard-coded fallback. The fallback
always answers, so an unknown feature resolves to False rather than failing open.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Dict, Iterable, List, Optional, Tuple, Union

from .config import FEATURE_KEYS, QUOTA_KEYS
from .models import FALLBACK_PLAN_FEATURES, EntitlementOverride, PlanFeatures, ResolutionSource


@dataclass(frozen=True)
class Resolution:
    value: Union[bool, int]
    source: ResolutionSource
    reason: str
    override_id: Optional[str] = None


@dataclass(frozen=True)
class ResolutionContext:
    """Per-call inputs shared by the resolvers."""

    plan: Optional[PlanFeatures]
    feature_overrides: Dict[str, EntitlementOverride]
    quota_overrides: Dict[str, EntitlementOverride]


Resolver = Callable[[str, ResolutionContext], Optional[Resolution]]


def _expiry_rank(override: EntitlementOverride) -> Tuple[int, Optional[datetime]]:
    # open-ended overrides outrank any dated one
    if override.expires_at is None:
        return (1, None)
    return (0, override.expires_at)


def _prefer(candidate: EntitlementOverride, existing: EntitlementOverride) -> bool:
    """True if candidate should replace existing for the same key."""
    candidate_rank, existing_rank = _expiry_rank(candidate), _expiry_rank(existing)
    if candidate_rank != existing_rank:
        return candidate_rank > existing_rank
    # equal expiry: the more restrictive value wins
    if candidate.is_feature_value:
        return candidate.value is False and existing.value is True
    return candidate.value < existing.value


def is_quota_key(key: str, plan: Optional[PlanFeatures]) -> bool:
    return key in QUOTA_KEYS or (plan is not None and key in plan.quotas)


def is_feature_key(key: str, plan: Optional[PlanFeatures]) -> bool:
    return key in FEATURE_KEYS or (plan is not None and key in plan.features)


def select_live_overrides(
    overrides: Iterable[EntitlementOverride],
    now: datetime,
    plan: Optional[PlanFeatures] = None,
) -> Tuple[Dict[str, EntitlementOverride], Dict[str, EntitlementOverride], List[EntitlementOverride]]:
    """Index live overrides by key, split into feature and quota patches.

    Expired, inactive and not-yet-started overrides are dropped silently. The
    third element lists live overrides whose value kind does not fit their key
    (a flag on a quota or a number on a feature); those are not applied.
    """
    features: Dict[str, EntitlementOverride] = {}
    quotas: Dict[str, EntitlementOverride] = {}
    mismatched: List[EntitlementOverride] = []
    for override in overrides:
        if not override.is_live(now):
            continue
        key = override.feature_key
        if override.is_feature_value:
            if is_quota_key(key, plan):
                mismatched.append(override)
                continue
            target = features
        else:
            if is_feature_key(key, plan):
                mismatched.append(override)
                continue
            target = quotas
        existing = target.get(key)
        if existing is None or _prefer(override, existing):
            target[key] = override
    return features, quotas, mismatched


def _override_reason(override: EntitlementOverride, default: str) -> str:
    return override.reason or default


def resolve_feature_override(key: str, ctx: ResolutionContext) -> Optional[Resolution]:
    override = ctx.feature_overrides.get(key)
    if override is None:
        return None
    return Resolution(
        value=bool(override.value),
        source="override",
        reason=_override_reason(override, "Admin override"),
        override_id=override.id,
    )


def resolve_feature_from_plan(key: str, ctx: ResolutionContext) -> Optional[Resolution]:
    if ctx.plan is None or key not in ctx.plan.features:
        return None
    enabled = ctx.plan.features[key]
    return Resolution(value=enabled, source="plan", reason="Included in plan" if enabled else "Not included in plan")


def resolve_feature_fallback(key: str, ctx: ResolutionContext) -> Optional[Resolution]:
    return Resolution(value=False, source="default", reason="Not granted")


def resolve_quota_override(key: str, ctx: ResolutionContext) -> Optional[Resolution]:
    override = ctx.quota_overrides.get(key)
    if override is None:
        return None
    return Resolution(
        value=int(override.value),
        source="override",
        reason=_override_reason(override, "Admin quota override"),
        override_id=override.id,
    )


def resolve_quota_from_plan(key: str, ctx: ResolutionContext) -> Optional[Resolution]:
    if ctx.plan is None or key not in ctx.plan.quotas:
        return None
    return Resolution(value=ctx.plan.quotas[key], source="plan", reason="Plan quota")


def resolve_quota_fallback(key: str, ctx: ResolutionContext) -> Optional[Resolution]:
    if ctx.plan is None and key in FALLBACK_PLAN_FEATURES.quotas:
        return Resolution(
            value=FALLBACK_PLAN_FEATURES.quotas[key],
            source="default",
            reason="Plan unavailable - free tier limit",
        )
    return Resolution(value=0, source="default", reason="No quota configured")


FEATURE_RESOLVERS: Tuple[Resolver, ...] = (
    resolve_feature_override,
    resolve_feature_from_plan,
    resolve_feature_fallback,
)

QUOTA_RESOLVERS: Tuple[Resolver, ...] = (
    resolve_quota_override,
    resolve_quota_from_plan,
    resolve_quota_fallback,
)


def resolve(key: str, ctx: ResolutionContext, resolvers: Iterable[Resolver]) -> Resolution:
    for resolver in resolvers:
        resolution = resolver(key, ctx)
        if resolution is not None:
            return resolution
    raise LookupError(f"no resolver answered for {key!r}")
