"""
Exchange rate provider module.

Fetches IDR exchange rates from ExchangeRate-API and keeps them in an
in-memory cache with a time-to-live. Rates are stored as "IDR per 1 unit"
of each currency. When the provider cannot be reached the fixed fallback
table is returned, but never cached, so the next read tries again.
"""

import logging
import threading
import time
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Any, Callable

import requests

from wedding_pricing.utils.config_loader import AppConfig
from wedding_pricing.utils.number_format import to_decimal

logger = logging.getLogger(__name__)


BASE_CURRENCY = "IDR"
PROVIDER_SOURCE = "exchangerate-api.com"
FALLBACK_SOURCE = "fallback"

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class CurrencyError(Exception):
    """Base exception for currency conversion errors."""

    pass


class UnsupportedCurrencyError(CurrencyError):
    """Raised when a currency is not supported or has no usable rate."""

    def __init__(self, currency: str, message: str | None = None):
        super().__init__(message or f"Unsupported currency: {currency}")
        self.currency = currency


class RateFetchError(CurrencyError):
    """Raised when the rate provider call fails or returns a bad payload."""

    pass


@dataclass(frozen=True)
class ExchangeRateTable:
    """
    Exchange rates relative to IDR.

    Attributes:
        rates: Currency code -> IDR needed for one unit (IDR itself is 1).
        last_updated: When the rates were fetched (UTC).
        source: Provider identifier or "fallback".
    """

    rates: dict[str, Decimal]
    last_updated: datetime
    source: str

    @property
    def is_fallback(self) -> bool:
        return self.source == FALLBACK_SOURCE

    def rate_for(self, currency: str) -> Decimal:
        """
        Get the IDR-per-unit rate for a currency.

        Raises:
            UnsupportedCurrencyError: If the rate is missing or not positive.
        """
        rate = self.rates.get(currency)
        if rate is None or not rate.is_finite() or rate <= 0:
            raise UnsupportedCurrencyError(currency, f"No usable exchange rate for {currency}")
        return rate

    def to_dict(self) -> dict[str, Any]:
        return {
            "rates": {code: float(rate) for code, rate in self.rates.items()},
            "lastUpdated": self.last_updated.isoformat(),
            "source": self.source,
        }


def build_fallback_table(config: AppConfig | None = None) -> ExchangeRateTable:
    """
    Build the fixed fallback table from configuration.

    Returns:
        ExchangeRateTable: Approximate rates with source "fallback".
    """
    currency_config = (config or AppConfig()).currency
    last_updated = datetime.fromisoformat(currency_config.fallback_updated.replace("Z", "+00:00"))
    if last_updated.tzinfo is None:
        last_updated = last_updated.replace(tzinfo=timezone.utc)

    return ExchangeRateTable(
        rates={code: to_decimal(rate) for code, rate in currency_config.fallback_rates.items()},
        last_updated=last_updated,
        source=FALLBACK_SOURCE,
    )


class ExchangeRateFetcher:
    """
    Client for the external rate provider.

    Requests `{api_url}/{base_currency}` and expects a JSON payload with a
    `rates` object of "units of currency per 1 IDR", which is inverted to
    "IDR per unit".

    Attributes:
        config: Application configuration.
        sleep: Called between retries (replaced in tests).
    """

    def __init__(self, config: AppConfig | None = None, sleep: Callable[[float], None] = time.sleep):
        self.config = config or AppConfig()
        self.sleep = sleep
        self._fallback = build_fallback_table(self.config)

    @property
    def url(self) -> str:
        currency_config = self.config.currency
        return f"{currency_config.api_url.rstrip('/')}/{currency_config.base_currency}"

    def fetch(self, now: datetime | None = None) -> ExchangeRateTable:
        """
        Fetch a fresh rate table.

        Makes one attempt plus `max_retries` retries with linear backoff.

        Args:
            now: Timestamp to stamp on the table (defaults to current UTC time).

        Returns:
            ExchangeRateTable: Live rates.

        Raises:
            RateFetchError: If every attempt fails.
        """
        currency_config = self.config.currency
        attempts = 1 + max(0, currency_config.max_retries)
        last_error: Exception | None = None

        for attempt in range(1, attempts + 1):
            try:
                return self._fetch_once(now or utc_now())
            except RateFetchError as e:
                last_error = e
                logger.warning(f"Exchange rate fetch attempt {attempt}/{attempts} failed: {e}")
                if attempt < attempts:
                    self.sleep(currency_config.retry_delay * attempt)

        raise RateFetchError(f"Exchange rate provider unavailable: {last_error}")

    def _fetch_once(self, now: datetime) -> ExchangeRateTable:
        timeout = self.config.currency.timeout_seconds
        url = self.url
        logger.info(f"Fetching exchange rates from: {url}")

        try:
            response = requests.get(url, timeout=timeout)
            response.raise_for_status()
            data = response.json()
        except requests.exceptions.Timeout as e:
            raise RateFetchError(f"Request timed out after {timeout}s") from e
        except requests.exceptions.ConnectionError as e:
            raise RateFetchError(f"Connection error: {e}") from e
        except requests.exceptions.HTTPError as e:
            raise RateFetchError(f"HTTP error: {e}") from e
        except requests.exceptions.RequestException as e:
            raise RateFetchError(f"Request failed: {e}") from e
        except ValueError as e:
            raise RateFetchError(f"Response is not valid JSON: {e}") from e

        table = self.parse_payload(data, now)
        logger.info(f"Fetched fresh exchange rates: {table.to_dict()['rates']}")
        return table

    def parse_payload(self, data: Any, now: datetime) -> ExchangeRateTable:
        """
        Convert a provider payload into a rate table.

        A currency missing from an otherwise valid payload keeps its
        fallback rate.

        Raises:
            RateFetchError: If the payload has no `rates` object or a
                rate is not a positive number.
        """
        if not isinstance(data, dict) or not isinstance(data.get("rates"), dict):
            raise RateFetchError("Malformed payload: missing 'rates' object")

        provider_rates = data["rates"]
        base = self.config.currency.base_currency
        rates: dict[str, Decimal] = {base: Decimal("1")}

        for code in self.config.currency.supported:
            if code == base:
                continue
            raw = provider_rates.get(code)
            if raw is None:
                if code not in self._fallback.rates:
                    raise RateFetchError(f"Malformed payload: no rate for {code}")
                logger.warning(f"Provider returned no rate for {code}, using fallback rate")
                rates[code] = self._fallback.rates[code]
                continue
            if isinstance(raw, bool) or not isinstance(raw, (int, float, str)):
                raise RateFetchError(f"Malformed rate for {code}: {raw!r}")
            try:
                units_per_base = to_decimal(raw)
            except ValueError as e:
                raise RateFetchError(f"Malformed rate for {code}: {raw!r}") from e
            if not units_per_base.is_finite() or units_per_base <= 0:
                raise RateFetchError(f"Malformed rate for {code}: {raw!r}")
            rates[code] = Decimal("1") / units_per_base

        return ExchangeRateTable(rates=rates, last_updated=now, source=PROVIDER_SOURCE)


class RateCache:
    """
    Time-based cache around an ExchangeRateFetcher.

    One instance owns the cached table and its fetch time. A lock makes the
    check-fetch-store sequence single-flight: concurrent callers on a cold
    or expired cache wait for one fetch instead of each calling the provider.

    Attributes:
        fetcher: Rate provider client.
        ttl: How long a fetched table stays fresh.
        clock: Returns the current UTC time.
        fallback: Table returned when a fetch fails.
    """

    DEFAULT_TTL = timedelta(hours=4)

    def __init__(
        self,
        fetcher: ExchangeRateFetcher,
        ttl: timedelta | None = None,
        clock: Clock | None = None,
        fallback: ExchangeRateTable | None = None,
    ) -> None:
        self.fetcher = fetcher
        self.ttl = ttl if ttl is not None else self.DEFAULT_TTL
        self.clock = clock or utc_now
        self.fallback = fallback or build_fallback_table(fetcher.config)
        self._table: ExchangeRateTable | None = None
        self._last_fetch: datetime | None = None
        self._lock = threading.Lock()

    @classmethod
    def from_config(cls, config: AppConfig, clock: Clock | None = None) -> "RateCache":
        return cls(
            fetcher=ExchangeRateFetcher(config),
            ttl=timedelta(hours=config.currency.cache_ttl_hours),
            clock=clock,
        )

    @property
    def cached_table(self) -> ExchangeRateTable | None:
        return self._table

    @property
    def last_fetch(self) -> datetime | None:
        return self._last_fetch

    def _is_fresh(self, now: datetime) -> bool:
        return (
            self._table is not None
            and self._last_fetch is not None
            and (now - self._last_fetch) < self.ttl
        )

    def get_rates(self) -> ExchangeRateTable:
        """
        Return cached rates if fresh, otherwise fetch new ones.

        Never raises for provider problems: a failed fetch returns the
        fallback table and leaves the cache untouched.
        """
        with self._lock:
            now = self.clock()
            if self._is_fresh(now):
                logger.debug("Using cached exchange rates")
                return self._table

            try:
                table = self.fetcher.fetch(now)
            except RateFetchError as e:
                logger.warning(f"Exchange rate API failed, using fallback rates: {e}")
                return self.fallback

            self._table = table
            self._last_fetch = now
            return table

    def clear(self) -> None:
        """Drop the cached table so the next read fetches."""
        with self._lock:
            self._table = None
            self._last_fetch = None

    def refresh(self) -> ExchangeRateTable:
        """Clear the cache and fetch again."""
        self.clear()
        return self.get_rates()
