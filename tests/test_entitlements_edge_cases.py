from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from entitlements.catalog import PlanCatalog, normalize_plan_key
from entitlements.engine import compute_entitlements
from entitlements.errors import FeatureDeniedError, QuotaExceededError, SubscriptionInactiveError
from entitlements.guards import require_feature, require_quota
from entitlements.models import (
    EntitlementInput,
    EntitlementOverride,
    PlanFeatures,
    SubscriptionSnapshot,
    UsageSnapshot,
)
from entitlements.schemas import EntitlementDecisionResponse, EntitlementRequest

NOW = datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc)


def _write_plans(tmp_path, payload) -> str:
    config_file = tmp_path / "plans.json"
    config_file.write_text(json.dumps(payload), encoding="utf-8")
    return str(config_file)


# ----- Plan catalog -----

def test_catalog_loads_feature_lists_and_flag_maps(tmp_path):
    path = _write_plans(
        tmp_path,
        {
            "plans": {
                "starter": {"features": ["dataExport"], "limits": {"maxQuotes": 100}},
                "pro": {"features": {"apiAccess": True, "dataExport": False}, "limits": {}},
            }
        },
    )

    catalog = PlanCatalog(path)

    assert catalog.plan_keys() == ["pro", "starter"]
    assert catalog.get_plan("starter") == PlanFeatures(features={"dataExport": True}, quotas={"maxQuotes": 100})
    assert catalog.get_plan("pro").features["dataExport"] is False


def test_catalog_strips_keys_and_plan_prefix(tmp_path):
    path = _write_plans(
        tmp_path,
        {"plans": {" growth ": {"features": [" reports "], "limits": {" maxQuotes ": 3}}}},
    )

    plan = PlanCatalog(path).get_plan("plan_growth")

    assert plan.features == {"reports": True}
    assert plan.quotas == {"maxQuotes": 3}


def test_normalize_plan_key():
    assert normalize_plan_key(" plan_pro ") == "pro"
    assert normalize_plan_key("enterprise") == "enterprise"


def test_catalog_unknown_plan(tmp_path):
    catalog = PlanCatalog(_write_plans(tmp_path, {"plans": {"free": {}}}))

    with pytest.raises(KeyError):
        catalog.get_plan("platinum")
    with pytest.raises(ValueError, match="plan_key is required"):
        catalog.get_plan("  ")
    assert catalog.plan_features_for("platinum") is None
    assert catalog.plan_features_for(None) is None


def test_unknown_catalog_plan_drives_engine_fallback(tmp_path):
    catalog = PlanCatalog(_write_plans(tmp_path, {"plans": {"free": {"limits": {"maxQuotes": 10}}}}))

    decision = compute_entitlements(
        EntitlementInput(
            user_id="user-1",
            subscription=SubscriptionSnapshot(status="active", plan_features=catalog.plan_features_for("platinum")),
            current_time=NOW,
        )
    )

    assert decision.quotas["maxQuotes"].source == "default"
    assert decision.quotas["maxQuotes"].limit == 10


@pytest.mark.parametrize(
    "payload,message",
    [
        ({}, "named 'plans'"),
        ({"plans": {}}, "at least one plan"),
        ({"plans": {"free": []}}, "must be an object"),
        ({"plans": {"free": {"features": "apiAccess"}}}, "features must be"),
        ({"plans": {"free": {"features": {"apiAccess": "yes"}}}}, "must be true or false"),
        ({"plans": {"free": {"features": [""]}}}, "invalid feature key"),
        ({"plans": {"free": {"limits": []}}}, "limits must be an object"),
        ({"plans": {"free": {"limits": {"maxQuotes": True}}}}, "must be a number"),
    ],
)
def test_catalog_rejects_invalid_config(tmp_path, payload, message):
    with pytest.raises(ValueError, match=message):
        PlanCatalog(_write_plans(tmp_path, payload))


def test_catalog_reload_picks_up_changes(tmp_path):
    path = _write_plans(tmp_path, {"plans": {"free": {"limits": {"maxQuotes": 10}}}})
    catalog = PlanCatalog(path)

    _write_plans(tmp_path, {"plans": {"free": {"limits": {"maxQuotes": 20}}}})
    catalog.reload()

    assert catalog.get_plan("free").quotas["maxQuotes"] == 20


def test_catalog_failed_reload_keeps_previous_plans(tmp_path):
    path = _write_plans(tmp_path, {"plans": {"free": {"limits": {"maxQuotes": 10}}}})
    catalog = PlanCatalog(path)

    _write_plans(tmp_path, {"plans": {}})
    with pytest.raises(ValueError):
        catalog.reload()

    assert catalog.get_plan("free").quotas["maxQuotes"] == 10


def test_shipped_plans_config_is_valid():
    catalog = PlanCatalog(str(Path(__file__).resolve().parent.parent / "config" / "plans.json"))
    assert {"free", "starter", "professional", "enterprise"} <= set(catalog.plan_keys())
    assert catalog.get_plan("enterprise").features["apiAccess"] is True


# ----- Guards -----

def _decision(status="active", features=None, quotas=None, usage=None):
    return compute_entitlements(
        EntitlementInput(
            user_id="user-1",
            subscription=SubscriptionSnapshot(
                status=status,
                plan_features=PlanFeatures(features=features or {}, quotas=quotas or {}),
            ),
            current_time=NOW,
            usage=UsageSnapshot(counters=usage or {}),
        )
    )


def test_require_feature_paywalls_inactive_subscription():
    decision = _decision(status="cancelled", features={"apiAccess": True})

    with pytest.raises(SubscriptionInactiveError) as exc:
        require_feature(decision, "apiAccess")

    assert exc.value.status_code == 402
    assert exc.value.to_dict()["action_required"] == "upgrade"
    assert exc.value.to_dict()["subscription_status"] == "cancelled"


def test_require_feature_denies_missing_feature():
    decision = _decision(features={"apiAccess": False})

    with pytest.raises(FeatureDeniedError) as exc:
        require_feature(decision, "apiAccess")
    assert exc.value.to_dict()["error"] == "FEATURE_DENIED"

    with pytest.raises(FeatureDeniedError, match="Unknown feature"):
        require_feature(decision, "teleportation")


def test_require_feature_passes_when_granted():
    require_feature(_decision(features={"apiAccess": True}), "apiAccess")


def test_require_quota():
    decision = _decision(quotas={"maxQuotes": 10}, usage={"quotesUsed": 9})

    assert require_quota(decision, "maxQuotes").remaining == 1
    with pytest.raises(QuotaExceededError) as exc:
        require_quota(decision, "maxQuotes", amount=2)
    assert exc.value.status_code == 429
    assert exc.value.to_dict()["limit"] == 10
    with pytest.raises(QuotaExceededError):
        require_quota(decision, "maxWidgets")


# ----- Wire schemas -----

def test_request_schema_parses_camel_case_snapshot():
    request = EntitlementRequest.model_validate(
        {
            "userId": "user-9",
            "tenantId": "tenant-3",
            "subscription": {
                "status": "trial",
                "planFeatures": {"apiAccess": False, "dataExport": True, "maxQuotes": 50},
                "currentPeriodEnd": None,
                "trialEndsAt": "2026-01-20T00:00:00Z",
                "cancelledAt": None,
                "paymentFailures": 0,
            },
            "overrides": [
                {"id": "ovr-1", "featureName": "apiAccess", "value": True, "expiresAt": None, "isActive": True},
                {"featureName": "maxQuotes", "value": 80, "expiresAt": "2026-01-10T00:00:00Z", "isActive": True},
            ],
            "usage": {"quotesUsed": 60},
            "currentTime": "2026-01-15T12:00:00Z",
        }
    )

    decision = compute_entitlements(request.to_input())
    payload = EntitlementDecisionResponse.from_decision(decision).model_dump(by_alias=True, mode="json")

    assert payload["userId"] == "user-9"
    assert payload["subscriptionStatus"] == "trialing"
    assert payload["isActive"] is True
    assert payload["features"]["apiAccess"] is True
    assert payload["features"]["dataExport"] is True
    # quota override expired on the 10th
    assert payload["quotas"]["maxQuotes"] == {"limit": 50, "used": 60, "remaining": 0, "exceeded": True}
    assert payload["featureProvenance"]["apiAccess"]["overrideId"] == "ovr-1"
    assert payload["quotaProvenance"]["maxQuotes"]["source"] == "plan"
    assert payload["appliedOverrides"] == ["ovr-1"]


def test_response_keeps_feature_and_quota_provenance_for_shared_key():
    entitlement_input = EntitlementInput(
        user_id="user-9",
        subscription=SubscriptionSnapshot(status="active"),
        current_time=NOW,
        overrides=(
            EntitlementOverride(feature_key="betaWidget", value=True, id="o-flag"),
            EntitlementOverride(feature_key="betaWidget", value=5, id="o-limit"),
        ),
    )

    decision = compute_entitlements(entitlement_input)
    payload = EntitlementDecisionResponse.from_decision(decision).model_dump(by_alias=True, mode="json")

    assert payload["features"]["betaWidget"] is True
    assert payload["quotas"]["betaWidget"]["limit"] == 5
    assert payload["featureProvenance"]["betaWidget"]["overrideId"] == "o-flag"
    assert payload["quotaProvenance"]["betaWidget"]["overrideId"] == "o-limit"
    assert "provenance" not in payload


def test_request_schema_rejects_unknown_status():
    with pytest.raises(ValueError):
        EntitlementRequest.model_validate(
            {"userId": "u", "subscription": {"status": "lifetime"}, "currentTime": "2026-01-15T12:00:00Z"}
        )


# ----- Input validation -----

def test_whitespace_only_user_id_rejected():
    with pytest.raises(ValueError, match="user_id is required"):
        EntitlementInput(user_id="   ", subscription=SubscriptionSnapshot(status="active"), current_time=NOW)


def test_naive_current_time_rejected():
    with pytest.raises(ValueError, match="current_time must be timezone-aware"):
        EntitlementInput(
            user_id="user-1",
            subscription=SubscriptionSnapshot(status="active"),
            current_time=datetime(2026, 1, 15, 12, 0),
        )


def test_naive_override_expiry_rejected():
    with pytest.raises(ValueError, match="expires_at must be timezone-aware"):
        EntitlementOverride(feature_key="apiAccess", value=True, expires_at=datetime(2026, 2, 1))


def test_override_value_must_be_flag_or_integer():
    with pytest.raises(ValueError, match="boolean or an integer"):
        EntitlementOverride(feature_key="maxQuotes", value=2.5)


def test_negative_payment_failures_rejected():
    with pytest.raises(ValueError, match="payment_failures"):
        SubscriptionSnapshot(status="past_due", payment_failures=-1)


def test_plan_features_from_mapping_rejects_text():
    with pytest.raises(ValueError, match="boolean or a number"):
        PlanFeatures.from_mapping({"apiAccess": "yes"})


def test_override_is_live_until_expiry():
    override = EntitlementOverride(feature_key="apiAccess", value=True, expires_at=NOW + timedelta(seconds=1))
    assert override.is_live(NOW) is True
    assert override.is_live(NOW + timedelta(seconds=1)) is False
