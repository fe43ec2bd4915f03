"""
Pydantic schemas for the entitlement boundary.

EntitlementRequest parses the camelCase snapshot a request handler assembles;
EntitlementDecisionResponse renders a decision for the user-facing API.
"""

from datetime import datetime
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from .lifecycle import SubscriptionStatus
from .models import (
    EntitlementDecision,
    EntitlementInput,
    EntitlementOverride,
    PlanFeatures,
    SubscriptionSnapshot,
    UsageSnapshot,
)


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SubscriptionPayload(_CamelModel):
    status: SubscriptionStatus
    plan_id: Optional[str] = None
    plan_features: Optional[Dict[str, Union[bool, int]]] = None
    current_period_end: Optional[datetime] = None
    trial_ends_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    payment_failures: int = Field(default=0, ge=0)

    @field_validator("status", mode="before")
    @classmethod
    def parse_status(cls, value):
        return SubscriptionStatus.parse(value)


class OverridePayload(_CamelModel):
    id: Optional[str] = None
    feature_name: str = Field(..., min_length=1)
    value: Union[bool, int]
    expires_at: Optional[datetime] = None
    starts_at: Optional[datetime] = None
    is_active: bool = True
    reason: Optional[str] = None


class EntitlementRequest(_CamelModel):
    """Snapshot input for computing one user's entitlements."""
    user_id: str = Field(..., min_length=1)
    tenant_id: Optional[str] = None
    subscription: SubscriptionPayload
    overrides: List[OverridePayload] = Field(default_factory=list)
    usage: Dict[str, Union[int, float]] = Field(default_factory=dict)
    current_time: datetime

    def to_input(self) -> EntitlementInput:
        sub = self.subscription
        return EntitlementInput(
            user_id=self.user_id,
            tenant_id=self.tenant_id,
            subscription=SubscriptionSnapshot(
                status=sub.status,
                plan_id=sub.plan_id,
                plan_features=PlanFeatures.from_mapping(sub.plan_features) if sub.plan_features is not None else None,
                current_period_end=sub.current_period_end,
                trial_ends_at=sub.trial_ends_at,
                cancelled_at=sub.cancelled_at,
                payment_failures=sub.payment_failures,
            ),
            overrides=tuple(
                EntitlementOverride(
                    feature_key=o.feature_name,
                    value=o.value,
                    expires_at=o.expires_at,
                    is_active=o.is_active,
                    id=o.id,
                    starts_at=o.starts_at,
                    reason=o.reason,
                )
                for o in self.overrides
            ),
            usage=UsageSnapshot(counters=self.usage),
            current_time=self.current_time,
        )


class QuotaResponse(_CamelModel):
    limit: int
    used: Union[int, float]
    remaining: Union[int, float]
    exceeded: bool


class ProvenanceResponse(_CamelModel):
    source: str
    reason: str
    override_id: Optional[str] = None


class EntitlementDecisionResponse(_CamelModel):
    user_id: str
    tenant_id: Optional[str] = None
    subscription_status: str
    is_active: bool
    features: Dict[str, bool]
    quotas: Dict[str, QuotaResponse]
    feature_provenance: Dict[str, ProvenanceResponse]
    quota_provenance: Dict[str, ProvenanceResponse]
    applied_overrides: List[str]
    warnings: List[str]
    computed_at: datetime
    expires_at: datetime

    @classmethod
    def from_decision(cls, decision: EntitlementDecision) -> "EntitlementDecisionResponse":
        # features and quotas may share a key, so each keeps its own map
        feature_provenance = {
            key: ProvenanceResponse(source=feature.source, reason=feature.reason, override_id=feature.override_id)
            for key, feature in decision.features.items()
        }
        quota_provenance = {
            key: ProvenanceResponse(source=quota.source, reason=quota.reason, override_id=quota.override_id)
            for key, quota in decision.quotas.items()
        }

        return cls(
            user_id=decision.user_id,
            tenant_id=decision.tenant_id,
            subscription_status=decision.subscription_status.value,
            is_active=decision.is_active,
            features={key: feature.enabled for key, feature in decision.features.items()},
            quotas={
                key: QuotaResponse(limit=q.limit, used=q.used, remaining=q.remaining, exceeded=q.exceeded)
                for key, q in decision.quotas.items()
            },
            feature_provenance=feature_provenance,
            quota_provenance=quota_provenance,
            applied_overrides=list(decision.applied_overrides),
            warnings=list(decision.warnings),
            computed_at=decision.computed_at,
            expires_at=decision.expires_at,
        )
