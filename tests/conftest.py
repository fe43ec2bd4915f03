"""
Shared pytest fixtures for pricing and entitlement tests.

Everything is built from explicit snapshots; no clock or environment is read.
"""

from datetime import datetime, timedelta, timezone

import pytest

from entitlements.models import (
    EntitlementInput,
    EntitlementOverride,
    PlanFeatures,
    SubscriptionSnapshot,
    UsageSnapshot,
)
from paper_pricing.models import BfPriceEntry, PricingData, PricingRules, ShadePremium

NOW = datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc)


# ============================================================================
# PRICING
# ============================================================================

@pytest.fixture
def pricing_data():
    """Snapshot from the worked examples: BF 18 at 50/kg, Kraft +2, low +5, high +8."""
    return PricingData(
        bf_prices=(BfPriceEntry(bf=18, base_price=50), BfPriceEntry(bf=22, base_price="54.50")),
        shade_premiums=(ShadePremium(shade="Kraft", premium=2), ShadePremium(shade="Natural", premium=0)),
        rules=PricingRules(
            low_gsm_limit=100,
            high_gsm_limit=200,
            low_gsm_adjustment=5,
            high_gsm_adjustment=8,
        ),
    )


# ============================================================================
# ENTITLEMENTS
# ============================================================================

@pytest.fixture
def now():
    return NOW


@pytest.fixture
def growth_plan():
    return PlanFeatures.from_mapping(
        {
            "apiAccess": False,
            "dataExport": True,
            "emailAutomation": True,
            "advancedReports": False,
            "maxQuotes": 100,
            "maxEmailProviders": 3,
            "maxPartyProfiles": 50,
            "maxTeamMembers": 5,
            "maxApiCalls": 0,
            "maxStorageMb": 1024,
        }
    )


@pytest.fixture
def make_input(growth_plan):
    """Factory for EntitlementInput with an active growth subscription by default."""

    def _make(
        *,
        status="active",
        plan=growth_plan,
        overrides=(),
        usage=None,
        trial_ends_at=None,
        payment_failures=0,
        current_time=NOW,
    ):
        return EntitlementInput(
            user_id="user-1",
            tenant_id="tenant-1",
            subscription=SubscriptionSnapshot(
                status=status,
                plan_features=plan,
                plan_id="growth",
                current_period_end=current_time + timedelta(days=20),
                trial_ends_at=trial_ends_at,
                payment_failures=payment_failures,
            ),
            overrides=tuple(overrides),
            usage=UsageSnapshot(counters=usage or {}),
            current_time=current_time,
        )

    return _make


@pytest.fixture
def grant():
    """Factory for feature/quota overrides expiring a week from NOW unless told otherwise."""

    def _grant(feature_key, value=True, *, expires_in=timedelta(days=7), override_id=None, **kwargs):
        return EntitlementOverride(
            feature_key=feature_key,
            value=value,
            expires_at=None if expires_in is None else NOW + expires_in,
            id=override_id,
            **kwargs,
        )

    return _grant
