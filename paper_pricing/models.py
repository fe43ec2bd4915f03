from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional, Tuple, Union

Number = Union[int, float, str, Decimal]

DEFAULT_LOW_GSM_LIMIT = 100
DEFAULT_HIGH_GSM_LIMIT = 200


def to_decimal(value: Optional[Number], default: Decimal = Decimal("0")) -> Decimal:
    """Coerce a numeric value to Decimal, going through str so floats keep their printed value."""
    if value is None:
        return default
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise TypeError("boolean is not a valid amount")
    return Decimal(str(value).strip())


@dataclass(frozen=True)
class BfPriceEntry:
    """Base price per kg for one BF grade."""

    bf: Union[int, float]
    base_price: Decimal

    def __post_init__(self) -> None:
        object.__setattr__(self, "base_price", to_decimal(self.base_price))


@dataclass(frozen=True)
class ShadePremium:
    """Per-kg premium for a paper shade, matched case-insensitively."""

    shade: str
    premium: Decimal

    def __post_init__(self) -> None:
        if not str(self.shade).strip():
            raise ValueError("shade is required")
        object.__setattr__(self, "premium", to_decimal(self.premium))

    def matches(self, shade: str) -> bool:
        return self.shade.lower() == str(shade).lower()


@dataclass(frozen=True)
class PricingRules:
    """Tenant pricing rules. Unset fields fall back to the documented defaults."""

    low_gsm_limit: Optional[Union[int, float]] = None
    high_gsm_limit: Optional[Union[int, float]] = None
    low_gsm_adjustment: Optional[Decimal] = None
    high_gsm_adjustment: Optional[Decimal] = None
    market_adjustment: Optional[Decimal] = None

    def __post_init__(self) -> None:
        for name in ("low_gsm_adjustment", "high_gsm_adjustment", "market_adjustment"):
            value = getattr(self, name)
            if value is not None:
                object.__setattr__(self, name, to_decimal(value))

    @property
    def low_limit(self) -> Union[int, float]:
        return DEFAULT_LOW_GSM_LIMIT if self.low_gsm_limit is None else self.low_gsm_limit

    @property
    def high_limit(self) -> Union[int, float]:
        return DEFAULT_HIGH_GSM_LIMIT if self.high_gsm_limit is None else self.high_gsm_limit

    @property
    def low_adjustment(self) -> Decimal:
        return to_decimal(self.low_gsm_adjustment)

    @property
    def high_adjustment(self) -> Decimal:
        return to_decimal(self.high_gsm_adjustment)

    @property
    def market(self) -> Decimal:
        return to_decimal(self.market_adjustment)


@dataclass(frozen=True)
class PricingData:
    """Point-in-time pricing snapshot supplied by the caller."""

    bf_prices: Tuple[BfPriceEntry, ...] = ()
    shade_premiums: Tuple[ShadePremium, ...] = ()
    rules: Optional[PricingRules] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "bf_prices", tuple(self.bf_prices))
        object.__setattr__(self, "shade_premiums", tuple(self.shade_premiums))

    def find_bf(self, bf: Union[int, float]) -> Optional[BfPriceEntry]:
        for entry in self.bf_prices:
            if entry.bf == bf:
                return entry
        return None

    def find_shade(self, shade: str) -> Optional[ShadePremium]:
        for entry in self.shade_premiums:
            if entry.matches(shade):
                return entry
        return None


@dataclass(frozen=True)
class PaperPricingParams:
    bf: Union[int, float]
    gsm: Union[int, float]
    shade: str


@dataclass(frozen=True)
class PriceBreakdown:
    """Explainable per-kg paper rate. ``notes`` is ordered: base, GSM, shade, market, final."""

    bf_base_price: Decimal
    gsm_adjustment: Decimal
    shade_premium: Decimal
    market_adjustment: Decimal
    final_rate: Decimal
    notes: Tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "notes", tuple(self.notes))
