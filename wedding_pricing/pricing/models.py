"""
Input and result types for the dynamic pricing engine.
"""

import math
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any

from wedding_pricing.catalog.models import Product


class PricingInputError(ValueError):
    """Raised when guest or night counts are invalid."""

    pass


class PricingType(str, Enum):
    """How a product's price scales."""

    FIXED = "fixed"
    PER_PERSON = "per-person"
    PER_ADULT = "per-adult"
    PER_NIGHT = "per-night"
    SEASONAL = "seasonal"


@dataclass(frozen=True)
class PricingInputs:
    """
    Variable context for a price calculation.

    Counts may be given as integral floats or Decimals (10.0) and are stored
    as int.

    Attributes:
        adults: Adult guest count (>= 0).
        children: Child guest count (>= 0).
        nights: Night count; None or 0 means "use the default".
        selected_date: Wedding date (ISO string). Not used in amounts.
    """

    adults: int = 0
    children: int = 0
    nights: int | None = None
    selected_date: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "adults", _check_count("adults", self.adults))
        object.__setattr__(self, "children", _check_count("children", self.children))
        if self.nights is not None:
            object.__setattr__(self, "nights", _check_count("nights", self.nights))

    @property
    def total_guests(self) -> int:
        return self.adults + self.children


def _check_count(name: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
        raise PricingInputError(f"{name} must be a number, got {value!r}")
    if isinstance(value, float) and not math.isfinite(value):
        raise PricingInputError(f"{name} must be finite, got {value!r}")
    if isinstance(value, Decimal) and not value.is_finite():
        raise PricingInputError(f"{name} must be finite, got {value!r}")
    if value < 0:
        raise PricingInputError(f"{name} cannot be negative, got {value!r}")
    if value != int(value):
        raise PricingInputError(f"{name} must be a whole number, got {value!r}")
    return int(value)


@dataclass(frozen=True)
class ProductPricing:
    """
    Priced line item.

    Attributes:
        base_price: Unit price before multipliers (IDR).
        calculation: Human-readable arithmetic, e.g. "100,000 IDR × 50 guests × 1".
        pricing_type: How the price scaled.
        total_price: Line total (IDR), unrounded.
    """

    base_price: Decimal
    calculation: str
    pricing_type: PricingType
    total_price: Decimal


@dataclass(frozen=True)
class PriceBreakdownEntry:
    """One entry of a package breakdown, in input order."""

    product: Product
    pricing: ProductPricing
    quantity: int
    is_optional: bool = False
    category: str | None = None

    @property
    def item(self) -> str:
        return self.product.name

    @property
    def calculation(self) -> str:
        return self.pricing.calculation

    @property
    def price(self) -> Decimal:
        return self.pricing.total_price


@dataclass
class PackageTotal:
    """Aggregate of a package calculation."""

    total_price: Decimal = Decimal("0")
    breakdown: list[PriceBreakdownEntry] = field(default_factory=list)
