"""
Subscription entitlement decisions.

This module provides:
- compute_entitlements: pure feature/quota decision from a subscription snapshot
- SubscriptionStatus / is_subscription_active: the subscription lifecycle
- Ordered resolvers: live override -> plan default -> fallback
- PlanCatalog: plan defaults loaded from config/plans.json
- require_feature / require_quota: request-side guards over a decision
"""

from entitlements.catalog import PlanCatalog, normalize_plan_key
from entitlements.engine import compute_entitlements
from entitlements.errors import (
    EntitlementError,
    FeatureDeniedError,
    QuotaExceededError,
    SubscriptionInactiveError,
)
from entitlements.guards import require_feature, require_quota
from entitlements.lifecycle import (
    ALLOWED_TRANSITIONS,
    SubscriptionStatus,
    can_transition,
    is_subscription_active,
)
from entitlements.models import (
    FALLBACK_PLAN_FEATURES,
    EntitlementDecision,
    EntitlementInput,
    EntitlementOverride,
    FeatureDecision,
    PlanFeatures,
    QuotaDecision,
    SubscriptionSnapshot,
    UsageSnapshot,
)

__all__ = [
    # Engine
    "compute_entitlements",
    # Lifecycle
    "ALLOWED_TRANSITIONS",
    "SubscriptionStatus",
    "can_transition",
    "is_subscription_active",
    # Models
    "FALLBACK_PLAN_FEATURES",
    "EntitlementDecision",
    "EntitlementInput",
    "EntitlementOverride",
    "FeatureDecision",
    "PlanFeatures",
    "QuotaDecision",
    "SubscriptionSnapshot",
    "UsageSnapshot",
    # Catalog
    "PlanCatalog",
    "normalize_plan_key",
    # Guards
    "require_feature",
    "require_quota",
    # Errors
    "EntitlementError",
    "FeatureDeniedError",
    "QuotaExceededError",
    "SubscriptionInactiveError",
]
