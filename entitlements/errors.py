"""
Entitlement error hierarchy.

Provides:
- EntitlementError: base for all entitlement failures
- SubscriptionInactiveError: no active subscription (paywall / upgrade prompt)
- FeatureDeniedError: feature not entitled on an active subscription
- QuotaExceededError: quota has no remaining capacity
"""

from typing import Optional, Union

from fastapi import status


class EntitlementError(Exception):
    """Base exception for entitlement-related failures."""

    error_code = "ENTITLEMENT_ERROR"
    status_code = status.HTTP_403_FORBIDDEN

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def to_dict(self) -> dict:
        return {"error": self.error_code, "message": self.message}


class SubscriptionInactiveError(EntitlementError):
    """
    Raised when a gated action is attempted without an active subscription.

    Maps to a paywall rather than a generic error.
    """

    error_code = "SUBSCRIPTION_INACTIVE"
    status_code = status.HTTP_402_PAYMENT_REQUIRED

    def __init__(self, user_id: str, subscription_status: str, feature_key: Optional[str] = None):
        self.user_id = user_id
        self.subscription_status = subscription_status
        self.feature_key = feature_key
        self.action_required = "upgrade"
        super().__init__(f"Subscription is {subscription_status}; an active plan is required")

    def to_dict(self) -> dict:
        d = super().to_dict()
        d.update(
            {
                "subscription_status": self.subscription_status,
                "action_required": self.action_required,
            }
        )
        if self.feature_key is not None:
            d["feature_key"] = self.feature_key
        return d


class FeatureDeniedError(EntitlementError):
    """Raised when a feature is not enabled for the user."""

    error_code = "FEATURE_DENIED"

    def __init__(self, user_id: str, feature_key: str, reason: str):
        self.user_id = user_id
        self.feature_key = feature_key
        self.reason = reason
        super().__init__(f"Feature {feature_key} denied for {user_id}: {reason}")

    def to_dict(self) -> dict:
        return {
            "error": self.error_code,
            "feature_key": self.feature_key,
            "message": self.reason,
        }


class QuotaExceededError(EntitlementError):
    """Raised when a request would consume more than the remaining quota."""

    error_code = "QUOTA_EXCEEDED"
    status_code = status.HTTP_429_TOO_MANY_REQUESTS

    def __init__(
        self,
        user_id: str,
        quota_key: str,
        limit: int,
        used: Union[int, float],
        requested: Union[int, float] = 1,
    ):
        self.user_id = user_id
        self.quota_key = quota_key
        self.limit = limit
        self.used = used
        self.requested = requested
        super().__init__(f"Quota {quota_key} exceeded: {used} of {limit} used")

    def to_dict(self) -> dict:
        d = super().to_dict()
        d.update({"quota_key": self.quota_key, "limit": self.limit, "used": self.used})
        return d
