"""
Currency module.

IDR conversion backed by a TTL-cached exchange rate table, with a fixed
fallback table when the rate provider is unavailable.
"""

from wedding_pricing.currency.converter import (
    ConversionResult,
    CurrencyConverter,
    RateInfo,
)
from wedding_pricing.currency.exchange_rates import (
    CurrencyError,
    ExchangeRateFetcher,
    ExchangeRateTable,
    RateCache,
    RateFetchError,
    UnsupportedCurrencyError,
    build_fallback_table,
)
from wedding_pricing.currency.formatting import format_currency

__all__ = [
    "ConversionResult",
    "CurrencyConverter",
    "CurrencyError",
    "ExchangeRateFetcher",
    "ExchangeRateTable",
    "RateCache",
    "RateFetchError",
    "RateInfo",
    "UnsupportedCurrencyError",
    "build_fallback_table",
    "format_currency",
]
