"""
Tests for the exchange rate fetcher and TTL cache.
"""

import threading
import time
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from unittest.mock import Mock, patch

import pytest
import requests
import responses

from conftest import PROVIDER_PAYLOAD, START_TIME, FakeClock, FakeFetcher
from wedding_pricing.currency.exchange_rates import (
    FALLBACK_SOURCE,
    PROVIDER_SOURCE,
    ExchangeRateFetcher,
    ExchangeRateTable,
    RateCache,
    RateFetchError,
    UnsupportedCurrencyError,
    build_fallback_table,
)
from wedding_pricing.utils.config_loader import AppConfig, CurrencyConfig

PROVIDER_URL = "https://api.exchangerate-api.com/v4/latest/IDR"

FALLBACK_RATES = {
    "IDR": Decimal("1"),
    "USD": Decimal("16388"),
    "EUR": Decimal("17800"),
    "GBP": Decimal("20850"),
    "AUD": Decimal("11200"),
}


class TestExchangeRateTable:
    """Tests for ExchangeRateTable."""

    @pytest.fixture
    def table(self) -> ExchangeRateTable:
        return ExchangeRateTable(
            rates={"IDR": Decimal("1"), "USD": Decimal("16000"), "EUR": Decimal("0")},
            last_updated=START_TIME,
            source=PROVIDER_SOURCE,
        )

    def test_rate_for(self, table: ExchangeRateTable) -> None:
        assert table.rate_for("USD") == Decimal("16000")

    def test_rate_for_missing(self, table: ExchangeRateTable) -> None:
        with pytest.raises(UnsupportedCurrencyError) as exc_info:
            table.rate_for("GBP")
        assert exc_info.value.currency == "GBP"

    def test_rate_for_zero(self, table: ExchangeRateTable) -> None:
        with pytest.raises(UnsupportedCurrencyError):
            table.rate_for("EUR")

    def test_to_dict(self, table: ExchangeRateTable) -> None:
        data = table.to_dict()

        assert data["rates"]["USD"] == 16000.0
        assert data["lastUpdated"] == "2025-09-10T12:00:00+00:00"
        assert data["source"] == PROVIDER_SOURCE

    def test_is_fallback(self, table: ExchangeRateTable) -> None:
        assert table.is_fallback is False
        assert build_fallback_table().is_fallback is True


class TestFallbackTable:
    def test_documented_constants(self) -> None:
        table = build_fallback_table()

        assert table.source == FALLBACK_SOURCE
        assert table.rates == FALLBACK_RATES
        assert table.last_updated == datetime(2025, 9, 2, tzinfo=timezone.utc)

    def test_from_config(self) -> None:
        config = AppConfig(currency=CurrencyConfig(fallback_rates={"IDR": 1, "USD": 15000}))
        assert build_fallback_table(config).rates == {"IDR": Decimal("1"), "USD": Decimal("15000")}


class TestExchangeRateFetcher:
    """Tests for the HTTP rate provider client."""

    @pytest.fixture
    def fetcher(self) -> ExchangeRateFetcher:
        return ExchangeRateFetcher(AppConfig(), sleep=lambda seconds: None)

    def test_url(self, fetcher: ExchangeRateFetcher) -> None:
        assert fetcher.url == PROVIDER_URL

    @responses.activate
    def test_fetch_inverts_rates(self, fetcher: ExchangeRateFetcher) -> None:
        """Test provider "units per IDR" become "IDR per unit"."""
        responses.add(responses.GET, PROVIDER_URL, json=PROVIDER_PAYLOAD, status=200)

        table = fetcher.fetch(START_TIME)

        assert table.source == PROVIDER_SOURCE
        assert table.last_updated == START_TIME
        assert table.rates["IDR"] == 1
        assert table.rates["USD"] == Decimal("1") / Decimal("0.00006")
        assert table.rates["EUR"] == Decimal("20000")
        assert table.rates["GBP"] == Decimal("25000")
        assert table.rates["AUD"] == Decimal("10000")
        assert len(responses.calls) == 1

    @responses.activate
    def test_missing_currency_uses_fallback_rate(self, fetcher: ExchangeRateFetcher) -> None:
        responses.add(responses.GET, PROVIDER_URL, json={"rates": {"USD": 0.00006, "EUR": 0.00005}})

        table = fetcher.fetch(START_TIME)

        assert table.rates["EUR"] == Decimal("20000")
        assert table.rates["GBP"] == Decimal("20850")
        assert table.rates["AUD"] == Decimal("11200")

    @responses.activate
    def test_http_error(self, fetcher: ExchangeRateFetcher) -> None:
        responses.add(responses.GET, PROVIDER_URL, json={"error": "down"}, status=503)
        with pytest.raises(RateFetchError):
            fetcher.fetch(START_TIME)

    @responses.activate
    def test_timeout(self, fetcher: ExchangeRateFetcher) -> None:
        responses.add(responses.GET, PROVIDER_URL, body=requests.exceptions.Timeout("slow"))
        with pytest.raises(RateFetchError, match="timed out"):
            fetcher.fetch(START_TIME)

    @responses.activate
    def test_connection_error(self, fetcher: ExchangeRateFetcher) -> None:
        responses.add(responses.GET, PROVIDER_URL, body=requests.exceptions.ConnectionError("dns"))
        with pytest.raises(RateFetchError):
            fetcher.fetch(START_TIME)

    @responses.activate
    def test_invalid_json(self, fetcher: ExchangeRateFetcher) -> None:
        responses.add(responses.GET, PROVIDER_URL, body="<html>oops</html>", status=200)
        with pytest.raises(RateFetchError):
            fetcher.fetch(START_TIME)

    @pytest.mark.parametrize("payload", [
        [],
        {"result": "success"},
        {"rates": "none"},
        {"rates": {"USD": 0, "EUR": 0.00005, "GBP": 0.00004, "AUD": 0.0001}},
        {"rates": {"USD": -0.1, "EUR": 0.00005, "GBP": 0.00004, "AUD": 0.0001}},
        {"rates": {"USD": "abc", "EUR": 0.00005, "GBP": 0.00004, "AUD": 0.0001}},
        {"rates": {"USD": True, "EUR": 0.00005, "GBP": 0.00004, "AUD": 0.0001}},
        {"rates": {"USD": None, "EUR": 0.00005, "GBP": 0.00004, "AUD": 0.0001, "XYZ": 1}},
    ])
    def test_malformed_payloads(self, payload) -> None:
        config = AppConfig(currency=CurrencyConfig(supported=["IDR", "USD", "EUR", "GBP", "AUD"],
                                                   fallback_rates={"IDR": 1}))
        fetcher = ExchangeRateFetcher(config)
        with pytest.raises(RateFetchError):
            fetcher.parse_payload(payload, START_TIME)

    @responses.activate
    def test_retries_then_succeeds(self) -> None:
        sleeps = []
        config = AppConfig(currency=CurrencyConfig(max_retries=2, retry_delay=0.5))
        fetcher = ExchangeRateFetcher(config, sleep=sleeps.append)
        responses.add(responses.GET, PROVIDER_URL, status=500)
        responses.add(responses.GET, PROVIDER_URL, json=PROVIDER_PAYLOAD, status=200)

        table = fetcher.fetch(START_TIME)

        assert table.source == PROVIDER_SOURCE
        assert len(responses.calls) == 2
        assert sleeps == [0.5]

    @responses.activate
    def test_retries_exhausted(self) -> None:
        sleeps = []
        config = AppConfig(currency=CurrencyConfig(max_retries=2, retry_delay=1.0))
        fetcher = ExchangeRateFetcher(config, sleep=sleeps.append)
        responses.add(responses.GET, PROVIDER_URL, status=500)

        with pytest.raises(RateFetchError, match="unavailable"):
            fetcher.fetch(START_TIME)
        assert len(responses.calls) == 3
        assert sleeps == [1.0, 2.0]

    def test_timeout_passed_to_requests(self, fetcher: ExchangeRateFetcher) -> None:
        response = Mock()
        response.json.return_value = PROVIDER_PAYLOAD
        with patch("wedding_pricing.currency.exchange_rates.requests.get", return_value=response) as mock_get:
            fetcher.fetch(START_TIME)
        mock_get.assert_called_once_with(PROVIDER_URL, timeout=10)


class TestRateCache:
    """Tests for TTL caching and fallback behavior."""

    def test_fresh_cache_returns_same_object(
        self, rate_cache: RateCache, fetcher: FakeFetcher, clock: FakeClock
    ) -> None:
        first = rate_cache.get_rates()
        clock.advance(hours=3)
        second = rate_cache.get_rates()

        assert second is first
        assert fetcher.calls == 1

    def test_expired_cache_refetches(
        self, rate_cache: RateCache, fetcher: FakeFetcher, clock: FakeClock
    ) -> None:
        first = rate_cache.get_rates()
        clock.advance(hours=5)
        second = rate_cache.get_rates()

        assert second is not first
        assert fetcher.calls == 2
        assert rate_cache.last_fetch == START_TIME + timedelta(hours=5)

    def test_exactly_ttl_is_expired(
        self, rate_cache: RateCache, fetcher: FakeFetcher, clock: FakeClock
    ) -> None:
        rate_cache.get_rates()
        clock.advance(hours=4)
        rate_cache.get_rates()
        assert fetcher.calls == 2

    def test_zero_ttl_always_refetches(self, fetcher: FakeFetcher, clock: FakeClock) -> None:
        config = AppConfig(currency=CurrencyConfig(cache_ttl_hours=0))
        cache = RateCache.from_config(config, clock=clock)
        cache.fetcher = fetcher

        assert cache.ttl == timedelta(0)
        cache.get_rates()
        cache.get_rates()
        assert fetcher.calls == 2

    def test_default_ttl(self, fetcher: FakeFetcher) -> None:
        assert RateCache(fetcher).ttl == timedelta(hours=4)

    def test_failure_returns_fallback(self, clock: FakeClock) -> None:
        cache = RateCache(FakeFetcher(fail=True), clock=clock)
        table = cache.get_rates()

        assert table.source == FALLBACK_SOURCE
        assert table.rates == FALLBACK_RATES

    def test_fallback_is_not_cached(self, clock: FakeClock) -> None:
        """Test the next read after a failure retries the provider."""
        fetcher = FakeFetcher(fail=True)
        cache = RateCache(fetcher, clock=clock)

        assert cache.get_rates().is_fallback
        assert cache.cached_table is None
        assert cache.last_fetch is None

        fetcher.fail = False
        table = cache.get_rates()

        assert table.source == PROVIDER_SOURCE
        assert fetcher.calls == 2

    def test_failure_after_expiry_keeps_old_table_out(self, clock: FakeClock) -> None:
        fetcher = FakeFetcher()
        cache = RateCache(fetcher, clock=clock)
        cache.get_rates()

        clock.advance(hours=5)
        fetcher.fail = True

        assert cache.get_rates().is_fallback

    def test_clear(self, rate_cache: RateCache, fetcher: FakeFetcher) -> None:
        rate_cache.get_rates()
        rate_cache.clear()

        assert rate_cache.cached_table is None
        rate_cache.get_rates()
        assert fetcher.calls == 2

    def test_refresh_ignores_fresh_cache(
        self, rate_cache: RateCache, fetcher: FakeFetcher, clock: FakeClock
    ) -> None:
        rate_cache.get_rates()
        clock.advance(minutes=10)
        table = rate_cache.refresh()

        assert fetcher.calls == 2
        assert table.last_updated == START_TIME + timedelta(minutes=10)

    def test_default_ttl(self) -> None:
        assert RateCache(FakeFetcher()).ttl == timedelta(hours=4)

    def test_from_config(self, clock: FakeClock) -> None:
        config = AppConfig(currency=CurrencyConfig(cache_ttl_hours=1.5))
        cache = RateCache.from_config(config, clock=clock)

        assert cache.ttl == timedelta(hours=1, minutes=30)
        assert isinstance(cache.fetcher, ExchangeRateFetcher)
        assert cache.clock is clock

    def test_concurrent_cold_reads_fetch_once(self, clock: FakeClock) -> None:
        """Test simultaneous cache misses share one provider call."""

        class SlowFetcher(FakeFetcher):
            def fetch(self, now=None):
                time.sleep(0.05)
                return super().fetch(now)

        fetcher = SlowFetcher()
        cache = RateCache(fetcher, clock=clock)
        results = []
        barrier = threading.Barrier(8)

        def read() -> None:
            barrier.wait()
            results.append(cache.get_rates())

        threads = [threading.Thread(target=read) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert fetcher.calls == 1
        assert len(results) == 8
        assert all(result is results[0] for result in results)
