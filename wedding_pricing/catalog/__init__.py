"""
Catalog module.

Typed product and template records parsed from content store documents,
plus an importer for spreadsheet product exports.
"""

from wedding_pricing.catalog.models import (
    CatalogError,
    ConstantPricing,
    LineItem,
    PricingDescriptor,
    Product,
    Unpriced,
    VariablePricing,
    VenueInclusion,
    parse_line_items,
    parse_pricing,
)
from wedding_pricing.catalog.importer import CatalogImporter, load_catalog

__all__ = [
    "CatalogError",
    "CatalogImporter",
    "ConstantPricing",
    "LineItem",
    "PricingDescriptor",
    "Product",
    "Unpriced",
    "VariablePricing",
    "VenueInclusion",
    "load_catalog",
    "parse_line_items",
    "parse_pricing",
]
