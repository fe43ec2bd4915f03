"""
Pydantic schemas for the paper rate calculator boundary.

Request handlers receive camelCase JSON; these models validate it and
convert to the immutable calculator inputs.
"""

from decimal import Decimal
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from .models import (
    BfPriceEntry,
    PaperPricingParams,
    PriceBreakdown,
    PricingData,
    PricingRules,
    ShadePremium,
)


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class BfPricePayload(_CamelModel):
    bf: Union[int, float]
    base_price: Decimal


class ShadePremiumPayload(_CamelModel):
    shade: str = Field(..., min_length=1)
    premium: Decimal


class PricingRulesPayload(_CamelModel):
    low_gsm_limit: Optional[Union[int, float]] = None
    high_gsm_limit: Optional[Union[int, float]] = None
    low_gsm_adjustment: Optional[Decimal] = None
    high_gsm_adjustment: Optional[Decimal] = None
    market_adjustment: Optional[Decimal] = None


class PricingDataPayload(_CamelModel):
    bf_prices: List[BfPricePayload] = Field(default_factory=list)
    shade_premiums: List[ShadePremiumPayload] = Field(default_factory=list)
    rules: Optional[PricingRulesPayload] = None

    def to_pricing_data(self) -> PricingData:
        return PricingData(
            bf_prices=tuple(BfPriceEntry(bf=p.bf, base_price=p.base_price) for p in self.bf_prices),
            shade_premiums=tuple(ShadePremium(shade=s.shade, premium=s.premium) for s in self.shade_premiums),
            rules=PricingRules(**self.rules.model_dump()) if self.rules is not None else None,
        )


class PaperRateRequest(_CamelModel):
    """Request body for a paper rate calculation."""
    bf: Union[int, float]
    gsm: Union[int, float]
    shade: str = ""
    pricing: PricingDataPayload = Field(default_factory=PricingDataPayload)

    @field_validator("gsm")
    @classmethod
    def validate_gsm(cls, value):
        if value <= 0:
            raise ValueError("gsm must be positive")
        return value

    def to_params(self) -> PaperPricingParams:
        return PaperPricingParams(bf=self.bf, gsm=self.gsm, shade=self.shade)


class PriceBreakdownResponse(_CamelModel):
    bf_base_price: Decimal
    gsm_adjustment: Decimal
    shade_premium: Decimal
    market_adjustment: Decimal
    final_rate: Decimal
    notes: List[str]

    @classmethod
    def from_breakdown(cls, breakdown: PriceBreakdown) -> "PriceBreakdownResponse":
        return cls(
            bf_base_price=breakdown.bf_base_price,
            gsm_adjustment=breakdown.gsm_adjustment,
            shade_premium=breakdown.shade_premium,
            market_adjustment=breakdown.market_adjustment,
            final_rate=breakdown.final_rate,
            notes=list(breakdown.notes),
        )
