"""
Pricing module.

Computes per-product prices and package totals in IDR from guest counts,
nights and each product's pricing descriptor.
"""

from wedding_pricing.pricing.classifier import CLASSIFICATION_RULES, determine_pricing_type
from wedding_pricing.pricing.models import (
    PackageTotal,
    PriceBreakdownEntry,
    PricingInputError,
    PricingInputs,
    PricingType,
    ProductPricing,
)
from wedding_pricing.pricing.pricing_engine import (
    DynamicPricingEngine,
    compute_package_total,
    compute_product_price,
)

__all__ = [
    "CLASSIFICATION_RULES",
    "DynamicPricingEngine",
    "PackageTotal",
    "PriceBreakdownEntry",
    "PricingInputError",
    "PricingInputs",
    "PricingType",
    "ProductPricing",
    "compute_package_total",
    "compute_product_price",
    "determine_pricing_type",
]
