"""
Currency converter module.

Converts IDR amounts into display amounts in other currencies using the
cached rate table. Conversion is presentation-only: the IDR amount passed
in is returned untouched alongside the converted value.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any, Iterable

from wedding_pricing.currency.exchange_rates import (
    Clock,
    ExchangeRateTable,
    RateCache,
    UnsupportedCurrencyError,
)
from wedding_pricing.currency.formatting import format_currency
from wedding_pricing.utils.config_loader import AppConfig
from wedding_pricing.utils.number_format import to_decimal

logger = logging.getLogger(__name__)


DEFAULT_TARGET_CURRENCIES = ("USD", "EUR", "GBP", "AUD")


@dataclass(frozen=True)
class ConversionResult:
    """
    A converted amount.

    Attributes:
        amount: Value in the target currency (unrounded).
        currency: Target currency code.
        idr: Original IDR amount.
        formatted: Display string for `amount`.
    """

    amount: Decimal
    currency: str
    idr: Decimal
    formatted: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "amount": float(self.amount),
            "currency": self.currency,
            "idr": float(self.idr),
            "formatted": self.formatted,
        }


@dataclass(frozen=True)
class RateInfo:
    """Freshness of the current rate table, for display."""

    last_updated: datetime
    source: str
    age: str
    is_stale: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "lastUpdated": self.last_updated.isoformat(),
            "source": self.source,
            "age": self.age,
            "isStale": self.is_stale,
        }


def describe_age(age_hours: int) -> str:
    """Human-readable age bucket for a whole number of hours."""
    if age_hours < 1:
        return "Less than 1 hour ago"
    if age_hours == 1:
        return "1 hour ago"
    return f"{age_hours} hours ago"


class CurrencyConverter:
    """
    Converts IDR amounts using a RateCache.

    Attributes:
        config: Application configuration.
        cache: Owned rate cache; pass one in to share or fake it in tests.
        base_currency: Currency amounts are expressed in (IDR).
        supported: Currency codes accepted as targets.
    """

    def __init__(
        self,
        config: AppConfig | None = None,
        cache: RateCache | None = None,
        clock: Clock | None = None,
    ) -> None:
        self.config = config or AppConfig()
        self.cache = cache or RateCache.from_config(self.config, clock=clock)
        self.base_currency = self.config.currency.base_currency
        self.supported = tuple(self.config.currency.supported)

    def get_rates(self) -> ExchangeRateTable:
        """Current rate table (cached, fetched or fallback)."""
        return self.cache.get_rates()

    def convert(self, amount, target_currency: str) -> ConversionResult:
        """
        Convert an IDR amount to one currency.

        Args:
            amount: Amount in IDR.
            target_currency: Currency code, e.g. "USD".

        Returns:
            ConversionResult: Converted and formatted amount.

        Raises:
            UnsupportedCurrencyError: If the currency is unsupported or has no rate.
            ValueError: If the amount is not a finite number.
        """
        idr_amount = self._validate_amount(amount)
        rates = self.get_rates()
        return self.convert_using(rates, idr_amount, target_currency)

    def convert_many(
        self,
        amount,
        currencies: Iterable[str] | None = None,
    ) -> list[ConversionResult]:
        """
        Convert an IDR amount to several currencies with a single rate lookup.

        Args:
            amount: Amount in IDR.
            currencies: Target codes; defaults to USD, EUR, GBP, AUD.

        Returns:
            list[ConversionResult]: One result per requested code, same order.
        """
        idr_amount = self._validate_amount(amount)
        targets = list(currencies) if currencies is not None else list(DEFAULT_TARGET_CURRENCIES)
        rates = self.get_rates()
        return [self.convert_using(rates, idr_amount, currency) for currency in targets]

    def convert_using(
        self,
        rates: ExchangeRateTable,
        idr_amount: Decimal,
        currency: str,
    ) -> ConversionResult:
        """Convert with an already-fetched table (one lookup for a batch)."""
        code = self.normalize_currency(currency)

        if code == self.base_currency:
            return ConversionResult(
                amount=idr_amount,
                currency=code,
                idr=idr_amount,
                formatted=format_currency(idr_amount, code),
            )

        converted = idr_amount / rates.rate_for(code)
        return ConversionResult(
            amount=converted,
            currency=code,
            idr=idr_amount,
            formatted=format_currency(converted, code),
        )

    def normalize_currency(self, currency: str) -> str:
        """
        Upper-case and check a currency code.

        Raises:
            UnsupportedCurrencyError: If the code is not in the supported set.
        """
        code = (currency or "").strip().upper()
        if code not in self.supported:
            raise UnsupportedCurrencyError(
                currency,
                f"Unsupported currency: {currency!r}. Supported: {', '.join(self.supported)}",
            )
        return code

    @staticmethod
    def _validate_amount(amount) -> Decimal:
        if isinstance(amount, bool):
            raise ValueError(f"Amount must be a number, got {amount!r}")
        value = to_decimal(amount)
        if not value.is_finite():
            raise ValueError(f"Amount must be finite, got {amount!r}")
        return value

    def get_rate_info(self, rates: ExchangeRateTable | None = None) -> RateInfo:
        """
        Describe how old the current rate table is.

        `is_stale` compares the table's own timestamp with the TTL, so the
        fallback table always reports stale.

        Args:
            rates: Table to describe; looked up via get_rates() when omitted.
        """
        if rates is None:
            rates = self.get_rates()
        age = self.cache.clock() - rates.last_updated
        age_hours = int(age.total_seconds() // 3600)

        return RateInfo(
            last_updated=rates.last_updated,
            source=rates.source,
            age=describe_age(age_hours),
            is_stale=age > self.cache.ttl,
        )

    def force_refresh(self) -> ExchangeRateTable:
        """Drop cached rates and fetch immediately."""
        logger.info("Forcing exchange rate refresh")
        return self.cache.refresh()
