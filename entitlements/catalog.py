from __future__ import annotations

import json
import logging
from pathlib import Path
from threading import RLock
from typing import Dict, Mapping, Optional

from .config import PLANS_CONFIG_PATH
from .models import PlanFeatures

logger = logging.getLogger(__name__)


def normalize_plan_key(plan_key: str) -> str:
    normalized = str(plan_key).strip()
    if normalized.startswith("plan_"):
        return normalized[len("plan_") :]
    return normalized


class PlanCatalog:
    """Loads plan feature defaults from config/plans.json with reload support."""

    def __init__(self, config_path: Optional[str] = None) -> None:
        self._config_path = Path(config_path or PLANS_CONFIG_PATH)
        self._lock = RLock()
        self._plans: Mapping[str, PlanFeatures]
        self.reload()

    def reload(self) -> None:
        """Reload config from disk; a failed parse keeps the previous catalog."""
        raw = self._read_config_file()
        parsed = self._parse_config(raw)
        with self._lock:
            self._plans = parsed
        logger.info("Loaded plan catalog", extra={"path": str(self._config_path), "plans": len(parsed)})

    def plan_keys(self) -> list[str]:
        with self._lock:
            return sorted(self._plans)

    def get_plan(self, plan_key: str) -> PlanFeatures:
        if not str(plan_key or "").strip():
            raise ValueError("plan_key is required")
        normalized = normalize_plan_key(plan_key)
        with self._lock:
            plan = self._plans.get(normalized)
        if plan is None:
            raise KeyError(f"unknown plan_key: {plan_key}")
        return plan

    def plan_features_for(self, plan_key: Optional[str]) -> Optional[PlanFeatures]:
        """Plan defaults, or None for a missing/unknown plan so the engine falls back to the free tier."""
        if not plan_key or not str(plan_key).strip():
            return None
        try:
            return self.get_plan(plan_key)
        except KeyError:
            logger.warning("Unknown plan key, falling back to default entitlements", extra={"plan_key": plan_key})
            return None

    def _read_config_file(self) -> dict:
        with self._config_path.open("r", encoding="utf-8") as handle:
            raw = json.load(handle)
        if not isinstance(raw, dict):
            raise ValueError("plans config must contain a top-level object")
        return raw

    @staticmethod
    def _parse_config(raw: dict) -> Dict[str, PlanFeatures]:
        plans_raw = raw.get("plans")
        if not isinstance(plans_raw, dict):
            raise ValueError("plans config must include an object field named 'plans'")

        plans: Dict[str, PlanFeatures] = {}
        for plan_key, plan_data in plans_raw.items():
            if not isinstance(plan_key, str) or not plan_key.strip():
                raise ValueError("each plan key must be a non-empty string")
            if not isinstance(plan_data, dict):
                raise ValueError(f"plan '{plan_key}' must be an object")

            features = plan_data.get("features", {})
            if isinstance(features, list):
                features = {feature_key: True for feature_key in features}
            if not isinstance(features, dict):
                raise ValueError(f"plan '{plan_key}' features must be a list of keys or an object of flags")

            normalized_features: Dict[str, bool] = {}
            for feature_key, enabled in features.items():
                if not isinstance(feature_key, str) or not feature_key.strip():
                    raise ValueError(f"plan '{plan_key}' has invalid feature key: {feature_key!r}")
                if not isinstance(enabled, bool):
                    raise ValueError(f"plan '{plan_key}' feature '{feature_key}' must be true or false")
                normalized_features[feature_key.strip()] = enabled

            limits = plan_data.get("limits", {})
            if not isinstance(limits, dict):
                raise ValueError(f"plan '{plan_key}' limits must be an object")

            normalized_limits: Dict[str, int] = {}
            for limit_key, limit_value in limits.items():
                if not isinstance(limit_key, str) or not limit_key.strip():
                    raise ValueError(f"plan '{plan_key}' has invalid limit key: {limit_key!r}")
                if isinstance(limit_value, bool):
                    raise ValueError(f"plan '{plan_key}' limit '{limit_key}' must be a number")
                normalized_limits[limit_key.strip()] = int(limit_value)

            plans[normalize_plan_key(plan_key)] = PlanFeatures(
                features=normalized_features,
                quotas=normalized_limits,
            )

        if not plans:
            raise ValueError("plans config must define at least one plan")

        return plans
