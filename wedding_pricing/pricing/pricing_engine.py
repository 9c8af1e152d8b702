"""
Dynamic pricing engine module.

Estimates wedding package costs in IDR from guest counts, nights and each
product's pricing descriptor.

Per product:
- Venue inclusion: always 0
- Constant: sell_price × multiplier × quantity, where the multiplier is the
  guest count (per-person), adult count (per-adult) or 1 (fixed)
- Variable: base (× nights for per-night) + event fee + banjar fee,
  then × quantity
- Anything else: 0, "Contact for pricing"

All arithmetic is Decimal and unrounded; rounding is left to display.
"""

import logging
from collections.abc import Iterable
from decimal import Decimal

from wedding_pricing.catalog.models import (
    ConstantPricing,
    LineItem,
    VariablePricing,
    VenueInclusion,
)
from wedding_pricing.pricing.classifier import determine_pricing_type
from wedding_pricing.pricing.models import (
    PackageTotal,
    PriceBreakdownEntry,
    PricingInputs,
    PricingType,
    ProductPricing,
)
from wedding_pricing.utils.config_loader import AppConfig
from wedding_pricing.utils.number_format import format_grouped

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


class DynamicPricingEngine:
    """
    Engine for pricing package template products.

    Stateless apart from configuration; safe to share between requests.

    Attributes:
        config: Application configuration.
        default_nights: Night count used when inputs leave nights unset.
    """

    def __init__(self, config: AppConfig | None = None) -> None:
        """
        Initialize the pricing engine.

        Args:
            config: Application configuration (defaults if omitted).
        """
        self.config = config or AppConfig()
        self.default_nights = getattr(self.config.pricing, "default_nights", 3) or 3

    def compute_product_price(self, line_item: LineItem, inputs: PricingInputs) -> ProductPricing:
        """
        Price a single template product.

        Args:
            line_item: Product with quantity.
            inputs: Guest and night counts.

        Returns:
            ProductPricing: Base price, calculation text, type and total.
        """
        pricing = line_item.product.pricing

        if isinstance(pricing, VenueInclusion):
            return ProductPricing(
                base_price=ZERO,
                calculation="Venue Inclusion",
                pricing_type=PricingType.FIXED,
                total_price=ZERO,
            )

        if isinstance(pricing, ConstantPricing):
            return self._price_constant(line_item, pricing, inputs)

        if isinstance(pricing, VariablePricing):
            return self._price_variable(line_item, pricing, inputs)

        logger.debug(f"No pricing model for '{line_item.product.name}', quoting on request")
        return ProductPricing(
            base_price=ZERO,
            calculation="Contact for pricing",
            pricing_type=PricingType.FIXED,
            total_price=ZERO,
        )

    def _price_constant(
        self,
        line_item: LineItem,
        pricing: ConstantPricing,
        inputs: PricingInputs,
    ) -> ProductPricing:
        base_price = pricing.sell_price
        quantity = line_item.quantity
        pricing_type = determine_pricing_type(line_item.product)
        base_text = f"{format_grouped(base_price)} IDR"

        if pricing_type == PricingType.PER_PERSON:
            guests = inputs.total_guests
            total_price = base_price * guests * quantity
            calculation = f"{base_text} × {guests} guests × {quantity}"
        elif pricing_type == PricingType.PER_ADULT:
            total_price = base_price * inputs.adults * quantity
            calculation = f"{base_text} × {inputs.adults} adults × {quantity}"
        else:
            total_price = base_price * quantity
            calculation = f"{base_text} × {quantity}" if quantity > 1 else base_text

        return ProductPricing(
            base_price=base_price,
            calculation=calculation,
            pricing_type=pricing_type,
            total_price=total_price,
        )

    def _price_variable(
        self,
        line_item: LineItem,
        pricing: VariablePricing,
        inputs: PricingInputs,
    ) -> ProductPricing:
        base_price = pricing.base_sell_price
        nights = inputs.nights or self.default_nights
        base_text = format_grouped(base_price)

        total_price = base_price
        calculation = f"{base_text} IDR base"

        if pricing.unit_type == "per-night":
            total_price = base_price * nights
            calculation = f"{base_text} IDR × {nights} nights"

        if pricing.event_fee_sell:
            total_price += pricing.event_fee_sell
            calculation += f" + {format_grouped(pricing.event_fee_sell)} IDR event fee"

        if pricing.banjar_fee:
            total_price += pricing.banjar_fee
            calculation += f" + {format_grouped(pricing.banjar_fee)} IDR banjar fee"

        if line_item.quantity > 1:
            total_price *= line_item.quantity
            calculation = f"({calculation}) × {line_item.quantity}"

        return ProductPricing(
            base_price=base_price,
            calculation=calculation,
            pricing_type=PricingType.SEASONAL,
            total_price=total_price,
        )

    def compute_package_total(
        self,
        line_items: Iterable[LineItem],
        inputs: PricingInputs,
    ) -> PackageTotal:
        """
        Price every line item and sum the totals.

        Items are priced independently in input order; repeated products
        are not merged.

        Args:
            line_items: Template products.
            inputs: Guest and night counts.

        Returns:
            PackageTotal: Running total and ordered breakdown.
        """
        result = PackageTotal()

        for line_item in line_items:
            product_pricing = self.compute_product_price(line_item, inputs)
            result.total_price += product_pricing.total_price
            result.breakdown.append(
                PriceBreakdownEntry(
                    product=line_item.product,
                    pricing=product_pricing,
                    quantity=line_item.quantity,
                    is_optional=line_item.is_optional,
                    category=line_item.category,
                )
            )

        logger.debug(
            f"Priced {len(result.breakdown)} products for {inputs.total_guests} guests: "
            f"{format_grouped(result.total_price)} IDR"
        )
        return result


def compute_product_price(line_item: LineItem, inputs: PricingInputs) -> ProductPricing:
    """Convenience wrapper using a default-configured engine."""
    return DynamicPricingEngine().compute_product_price(line_item, inputs)


def compute_package_total(line_items: Iterable[LineItem], inputs: PricingInputs) -> PackageTotal:
    """Convenience wrapper using a default-configured engine."""
    return DynamicPricingEngine().compute_package_total(line_items, inputs)
