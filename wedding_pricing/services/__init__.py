"""
Service layer.

Composes pricing and currency conversion into package quotes.
"""

from wedding_pricing.services.quote_service import (
    CATEGORY_ORDER,
    CategoryBreakdown,
    PackageQuote,
    QuoteService,
    group_by_category,
)

__all__ = [
    "CATEGORY_ORDER",
    "CategoryBreakdown",
    "PackageQuote",
    "QuoteService",
    "group_by_category",
]
