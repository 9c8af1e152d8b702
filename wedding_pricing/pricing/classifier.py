"""
Pricing type classification for constant-priced products.

Products do not declare whether a constant price is per guest, per adult or
flat, so it is inferred from the product and vendor names. Rules are checked
in order and the first match wins; alcohol is checked before catering because
a bar package can also mention a menu.
"""

from dataclasses import dataclass
from typing import Callable

from wedding_pricing.catalog.models import Product
from wedding_pricing.pricing.models import PricingType

ADULT_ONLY_KEYWORDS = ("alcohol", "wine", "beer", "cocktail", "champagne", "spirits")
PER_PERSON_NAME_KEYWORDS = ("menu", "meal", "catering", "buffet", "per pax", "per person")
PER_PERSON_VENDOR_KEYWORDS = ("catering", "menu")


def _contains_any(text: str, keywords: tuple[str, ...]) -> bool:
    return any(keyword in text for keyword in keywords)


@dataclass(frozen=True)
class ClassificationRule:
    """A (predicate, pricing type) pair. The predicate gets lower-cased name and vendor."""

    label: str
    predicate: Callable[[str, str], bool]
    pricing_type: PricingType

    def matches(self, name: str, vendor: str) -> bool:
        return self.predicate(name, vendor)


CLASSIFICATION_RULES: tuple[ClassificationRule, ...] = (
    ClassificationRule(
        label="adult-only drinks",
        predicate=lambda name, vendor: _contains_any(name, ADULT_ONLY_KEYWORDS),
        pricing_type=PricingType.PER_ADULT,
    ),
    ClassificationRule(
        label="catering and meals",
        predicate=lambda name, vendor: (
            _contains_any(name, PER_PERSON_NAME_KEYWORDS)
            or _contains_any(vendor, PER_PERSON_VENDOR_KEYWORDS)
        ),
        pricing_type=PricingType.PER_PERSON,
    ),
)


def determine_pricing_type(
    product: Product,
    rules: tuple[ClassificationRule, ...] = CLASSIFICATION_RULES,
) -> PricingType:
    """
    Classify a constant-priced product as fixed, per-adult or per-person.

    Args:
        product: Product to classify.
        rules: Ordered rules; the first match wins.

    Returns:
        PricingType: Matched type, or FIXED when no rule matches.
    """
    name = (product.name or "").lower()
    vendor = (product.vendor_trading_name or "").lower()

    for rule in rules:
        if rule.matches(name, vendor):
            return rule.pricing_type

    return PricingType.FIXED
