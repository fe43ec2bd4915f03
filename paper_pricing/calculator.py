"""
Paper rate calculation.

Final rate per kg = BF base price + GSM band adjustment + shade premium + market adjustment.

GSM banding is half-open: gsm < low is the low band, gsm >= high is the high band,
everything in [low, high) is normal. Boundary values already priced in production
depend on this, so a GSM equal to the high limit is charged the high adjustment.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import List, Literal, Optional, Union

from .errors import RateUnavailableError
from .models import (
    DEFAULT_HIGH_GSM_LIMIT,
    DEFAULT_LOW_GSM_LIMIT,
    PaperPricingParams,
    PriceBreakdown,
    PricingData,
    PricingRules,
)

logger = logging.getLogger(__name__)

GsmBandName = Literal["low", "normal", "high", "none"]

ZERO = Decimal("0")


@dataclass(frozen=True)
class GsmBand:
    band: GsmBandName
    adjustment: Decimal
    low_limit: Union[int, float]
    high_limit: Union[int, float]


def _money(value: Decimal) -> str:
    return f"₹{value:.2f}"


def _signed(value: Decimal) -> str:
    sign = "-" if value < 0 else "+"
    return f"{sign}{_money(abs(value))}"


def resolve_gsm_band(gsm: Union[int, float], rules: Optional[PricingRules]) -> GsmBand:
    if rules is None:
        return GsmBand("none", ZERO, DEFAULT_LOW_GSM_LIMIT, DEFAULT_HIGH_GSM_LIMIT)

    low, high = rules.low_limit, rules.high_limit
    if gsm < low:
        return GsmBand("low", rules.low_adjustment, low, high)
    if gsm >= high:
        return GsmBand("high", rules.high_adjustment, low, high)
    return GsmBand("normal", ZERO, low, high)


def _gsm_note(gsm: Union[int, float], band: GsmBand) -> str:
    if band.band == "low":
        return f"GSM {gsm} below {band.low_limit}: {_signed(band.adjustment)}"
    if band.band == "high":
        return f"GSM {gsm} at/above {band.high_limit}: {_signed(band.adjustment)}"
    if band.band == "normal":
        return f"GSM {gsm} in normal range ({band.low_limit}-{band.high_limit}): no adjustment"
    return f"GSM {gsm}: no pricing rules configured (no adjustment)"


def calculate_paper_rate(params: PaperPricingParams, pricing: PricingData) -> Optional[PriceBreakdown]:
    """Compute the per-kg rate for a paper selection.

    Returns None when the BF has no configured base price; the caller must treat
    that as "rate not available" for the line item. Missing rules or shade entries
    contribute zero and are explained in the notes.
    """
    bf_entry = pricing.find_bf(params.bf)
    if bf_entry is None:
        logger.debug("No base price configured", extra={"bf": params.bf})
        return None

    notes: List[str] = []

    bf_base_price = bf_entry.base_price
    notes.append(f"BF {params.bf} base price: {_money(bf_base_price)}")

    band = resolve_gsm_band(params.gsm, pricing.rules)
    gsm_adjustment = band.adjustment
    notes.append(_gsm_note(params.gsm, band))

    shade_entry = pricing.find_shade(params.shade)
    shade_premium = shade_entry.premium if shade_entry else ZERO
    if shade_entry is None:
        notes.append(f"{params.shade} shade: not configured (no premium)")
    elif shade_premium != 0:
        notes.append(f"{params.shade} shade premium: {_signed(shade_premium)}")
    else:
        notes.append(f"{params.shade} shade: no premium")

    market_adjustment = pricing.rules.market if pricing.rules else ZERO
    if market_adjustment != 0:
        notes.append(f"Market adjustment: {_signed(market_adjustment)}")
    else:
        notes.append("Market adjustment: none")

    final_rate = bf_base_price + gsm_adjustment + shade_premium + market_adjustment
    notes.append(f"Final rate: {_money(final_rate)}/Kg")

    return PriceBreakdown(
        bf_base_price=bf_base_price,
        gsm_adjustment=gsm_adjustment,
        shade_premium=shade_premium,
        market_adjustment=market_adjustment,
        final_rate=final_rate,
        notes=tuple(notes),
    )


def calculate_paper_rate_simple(
    bf: Union[int, float],
    gsm: Union[int, float],
    shade: str,
    pricing: PricingData,
) -> Optional[Decimal]:
    breakdown = calculate_paper_rate(PaperPricingParams(bf=bf, gsm=gsm, shade=shade), pricing)
    return breakdown.final_rate if breakdown else None


def require_paper_rate(params: PaperPricingParams, pricing: PricingData) -> PriceBreakdown:
    """Like calculate_paper_rate, but raises RateUnavailableError instead of returning None."""
    breakdown = calculate_paper_rate(params, pricing)
    if breakdown is None:
        raise RateUnavailableError(bf=params.bf, gsm=params.gsm, shade=params.shade)
    return breakdown
