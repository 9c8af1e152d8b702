"""
Quote Service for wedding package estimates.

Composes the pricing engine and the currency converter:
- Prices every template product in IDR
- Groups the breakdown into display categories with subtotals
- Converts the package total into the requested currencies
"""

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Iterable

from wedding_pricing.catalog.models import LineItem
from wedding_pricing.currency.converter import ConversionResult, CurrencyConverter
from wedding_pricing.pricing.models import PriceBreakdownEntry, PricingInputs
from wedding_pricing.pricing.pricing_engine import DynamicPricingEngine
from wedding_pricing.utils.config_loader import AppConfig

logger = logging.getLogger(__name__)


# Display order and labels for breakdown categories
CATEGORY_ORDER: tuple[tuple[str, str], ...] = (
    ("planner", "Wedding Planning"),
    ("venue", "Venue"),
    ("accommodation", "Accommodation"),
    ("beauty", "Hair & Makeup"),
    ("photography", "Photo & Video"),
    ("ceremony", "Celebrants & MC"),
    ("catering", "Catering"),
    ("entertainment", "Entertainment"),
    ("styling", "Florist & Styling"),
    ("venue-services", "Sound & Lighting"),
    ("transportation", "Transport"),
)

UNCATEGORIZED = "other"


@dataclass
class CategoryBreakdown:
    """Entries of one display category with their subtotal."""

    key: str
    label: str
    entries: list[PriceBreakdownEntry] = field(default_factory=list)
    subtotal: Decimal = Decimal("0")

    def to_dict(self) -> dict[str, Any]:
        return {
            "category": self.key,
            "label": self.label,
            "subtotal": float(self.subtotal),
            "items": [entry_to_dict(entry) for entry in self.entries],
        }


@dataclass
class PackageQuote:
    """Full quote for a package template."""

    inputs: PricingInputs
    nights: int
    total_price: Decimal
    categories: list[CategoryBreakdown]
    conversions: list[ConversionResult]
    rates_source: str

    @property
    def total_guests(self) -> int:
        return self.inputs.total_guests

    def to_dict(self) -> dict[str, Any]:
        return {
            "adults": self.inputs.adults,
            "children": self.inputs.children,
            "totalGuests": self.total_guests,
            "nights": self.nights,
            "selectedDate": self.inputs.selected_date,
            "totalPrice": float(self.total_price),
            "categories": [category.to_dict() for category in self.categories],
            "conversions": [conversion.to_dict() for conversion in self.conversions],
            "ratesSource": self.rates_source,
        }


def entry_to_dict(entry: PriceBreakdownEntry) -> dict[str, Any]:
    """Serialize a breakdown entry for JSON responses."""
    return {
        "productId": entry.product.product_id,
        "item": entry.item,
        "vendor": entry.product.vendor_trading_name,
        "quantity": entry.quantity,
        "isOptional": entry.is_optional,
        "pricingType": entry.pricing.pricing_type.value,
        "basePrice": float(entry.pricing.base_price),
        "calculation": entry.calculation,
        "price": float(entry.price),
    }


def resolve_category(entry: PriceBreakdownEntry) -> str:
    """Line item override, else the product's first category, else "other"."""
    if entry.category:
        return entry.category
    if entry.product.categories:
        return entry.product.categories[0]
    return UNCATEGORIZED


def group_by_category(breakdown: Iterable[PriceBreakdownEntry]) -> list[CategoryBreakdown]:
    """
    Group breakdown entries into ordered display categories.

    Known categories come first in CATEGORY_ORDER; unknown ones follow in
    order of first appearance so no entry drops out of the total.
    """
    labels = dict(CATEGORY_ORDER)
    groups: dict[str, CategoryBreakdown] = {}

    for entry in breakdown:
        key = resolve_category(entry)
        group = groups.get(key)
        if group is None:
            label = labels.get(key) or key.replace("-", " ").title()
            group = groups[key] = CategoryBreakdown(key=key, label=label)
        group.entries.append(entry)
        group.subtotal += entry.price

    ordered = [groups.pop(key) for key, _ in CATEGORY_ORDER if key in groups]
    ordered.extend(groups.values())
    return ordered


class QuoteService:
    """
    Service for building package quotes.

    Attributes:
        engine: Pricing engine (pure, IDR only).
        converter: Currency converter with its rate cache.
    """

    def __init__(
        self,
        app_config: AppConfig | None = None,
        engine: DynamicPricingEngine | None = None,
        converter: CurrencyConverter | None = None,
    ):
        self.app_config = app_config or AppConfig()
        self.engine = engine or DynamicPricingEngine(self.app_config)
        self.converter = converter or CurrencyConverter(self.app_config)
        self.logger = logging.getLogger(f"{__name__}.QuoteService")

    def build_quote(
        self,
        line_items: list[LineItem],
        inputs: PricingInputs,
        currencies: Iterable[str] | None = None,
    ) -> PackageQuote:
        """
        Price a package and convert its total.

        Args:
            line_items: Template products.
            inputs: Guest and night counts.
            currencies: Display currencies; defaults to every supported one.

        Returns:
            PackageQuote: Grouped breakdown, IDR total and conversions.

        Raises:
            UnsupportedCurrencyError: If a requested currency is unsupported.
        """
        self.logger.info(
            f"Building quote for {len(line_items)} products, "
            f"{inputs.adults} adults, {inputs.children} children"
        )

        package = self.engine.compute_package_total(line_items, inputs)
        categories = group_by_category(package.breakdown)

        targets = list(currencies) if currencies else list(self.converter.supported)
        rates = self.converter.get_rates()
        conversions = [
            self.converter.convert_using(rates, package.total_price, currency) for currency in targets
        ]

        return PackageQuote(
            inputs=inputs,
            nights=inputs.nights or self.engine.default_nights,
            total_price=package.total_price,
            categories=categories,
            conversions=conversions,
            rates_source=rates.source,
        )
