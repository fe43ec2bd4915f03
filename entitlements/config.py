"""
Entitlement configuration.

Known feature and quota dimensions, the free-tier fallback used when plan
data is missing, and decision cache-hint timings.
"""

import os
from typing import Dict, Tuple

FEATURE_KEYS: Tuple[str, ...] = (
    "apiAccess",
    "whatsappIntegration",
    "prioritySupport",
    "customBranding",
    "advancedReports",
    "multiUser",
    "emailAutomation",
    "dataExport",
)

# Quota key -> usage counter name
QUOTA_USAGE_KEYS: Dict[str, str] = {
    "maxQuotes": "quotesUsed",
    "maxEmailProviders": "emailProvidersUsed",
    "maxPartyProfiles": "partyProfilesUsed",
    "maxTeamMembers": "teamMembersUsed",
    "maxApiCalls": "apiCallsUsed",
    "maxStorageMb": "storageMbUsed",
}

QUOTA_KEYS: Tuple[str, ...] = tuple(QUOTA_USAGE_KEYS)

# Free tier limits, applied when the subscription carries no plan data
DEFAULT_FEATURE_VALUES: Dict[str, bool] = {key: False for key in FEATURE_KEYS}
DEFAULT_QUOTA_LIMITS: Dict[str, int] = {
    "maxQuotes": 10,
    "maxEmailProviders": 1,
    "maxPartyProfiles": 5,
    "maxTeamMembers": 1,
    "maxApiCalls": 0,
    "maxStorageMb": 100,
}

# Cache hint on decisions without live overrides
DECISION_TTL_SECONDS = int(os.getenv("ENTITLEMENT_DECISION_TTL_SECONDS", "3600"))

# Decisions shaped by an override go stale this long before the override expires
OVERRIDE_EXPIRY_BUFFER_SECONDS = int(os.getenv("ENTITLEMENT_OVERRIDE_EXPIRY_BUFFER_SECONDS", "300"))

PLANS_CONFIG_PATH = os.getenv("ENTITLEMENT_PLANS_PATH", "config/plans.json")
