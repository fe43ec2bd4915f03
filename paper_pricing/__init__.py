"""
Paper rate pricing for corrugated box quotes.

This module provides:
- calculate_paper_rate: per-kg rate with an ordered, explainable breakdown
- Pricing snapshot types: BfPriceEntry, ShadePremium, PricingRules, PricingData
- Paper specification strings: generate_paper_spec, validate_paper_spec
- Errors for callers that surface missing rates as validation failures
"""

from paper_pricing.calculator import (
    GsmBand,
    calculate_paper_rate,
    calculate_paper_rate_simple,
    require_paper_rate,
    resolve_gsm_band,
)
from paper_pricing.errors import PaperSpecError, PricingError, RateUnavailableError
from paper_pricing.models import (
    DEFAULT_HIGH_GSM_LIMIT,
    DEFAULT_LOW_GSM_LIMIT,
    BfPriceEntry,
    PaperPricingParams,
    PriceBreakdown,
    PricingData,
    PricingRules,
    ShadePremium,
)
from paper_pricing.paper_spec import (
    PaperLayer,
    PaperSpecResult,
    ShadeAbbreviation,
    format_paper_spec_from_layers,
    generate_paper_spec,
    generate_paper_spec_or_raise,
    get_shade_abbreviation,
    validate_paper_spec,
)

__all__ = [
    # Calculator
    "GsmBand",
    "calculate_paper_rate",
    "calculate_paper_rate_simple",
    "require_paper_rate",
    "resolve_gsm_band",
    # Models
    "DEFAULT_HIGH_GSM_LIMIT",
    "DEFAULT_LOW_GSM_LIMIT",
    "BfPriceEntry",
    "PaperPricingParams",
    "PriceBreakdown",
    "PricingData",
    "PricingRules",
    "ShadePremium",
    # Paper spec
    "PaperLayer",
    "PaperSpecResult",
    "ShadeAbbreviation",
    "format_paper_spec_from_layers",
    "generate_paper_spec",
    "generate_paper_spec_or_raise",
    "get_shade_abbreviation",
    "validate_paper_spec",
    # Errors
    "PaperSpecError",
    "PricingError",
    "RateUnavailableError",
]
