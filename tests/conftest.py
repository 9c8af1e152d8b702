"""
Shared fixtures for the wedding pricing tests.
"""

import logging
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from wedding_pricing.currency.converter import CurrencyConverter
from wedding_pricing.currency.exchange_rates import (
    PROVIDER_SOURCE,
    ExchangeRateTable,
    RateCache,
    RateFetchError,
)
from wedding_pricing.utils.config_loader import AppConfig

START_TIME = datetime(2025, 9, 10, 12, 0, tzinfo=timezone.utc)

# Provider payload shape: units of each currency per 1 IDR
PROVIDER_PAYLOAD = {
    "base": "IDR",
    "rates": {
        "IDR": 1,
        "USD": 0.00006,
        "EUR": 0.00005,
        "GBP": 0.00004,
        "AUD": 0.0001,
    },
}


class FakeClock:
    """Controllable UTC clock."""

    def __init__(self, start: datetime = START_TIME):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class FakeFetcher:
    """Stands in for ExchangeRateFetcher; counts calls and can be told to fail."""

    def __init__(self, config: AppConfig | None = None, fail: bool = False):
        self.config = config or AppConfig()
        self.fail = fail
        self.calls = 0
        self.rates = {
            "IDR": Decimal("1"),
            "USD": Decimal("16000"),
            "EUR": Decimal("17500"),
            "GBP": Decimal("20000"),
            "AUD": Decimal("10000"),
        }

    def fetch(self, now: datetime | None = None) -> ExchangeRateTable:
        self.calls += 1
        if self.fail:
            raise RateFetchError("provider down")
        return ExchangeRateTable(rates=dict(self.rates), last_updated=now, source=PROVIDER_SOURCE)


@pytest.fixture(autouse=True)
def restore_root_logger():
    """setup_logging() replaces root handlers; put pytest's back afterwards."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def config() -> AppConfig:
    return AppConfig()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def fetcher(config: AppConfig) -> FakeFetcher:
    return FakeFetcher(config)


@pytest.fixture
def rate_cache(fetcher: FakeFetcher, clock: FakeClock) -> RateCache:
    return RateCache(fetcher, ttl=timedelta(hours=4), clock=clock)


@pytest.fixture
def converter(config: AppConfig, rate_cache: RateCache) -> CurrencyConverter:
    return CurrencyConverter(config, cache=rate_cache)


def product_doc(name: str, pricing: dict | None, vendor: str = "", categories=None, doc_id="p1") -> dict:
    """Build a content store product document."""
    return {
        "_id": doc_id,
        "name": name,
        "vendorTradingName": vendor,
        "categories": categories or [],
        "pricing": pricing,
    }


def constant(sell_price) -> dict:
    return {"model": "constant", "constantPricing": {"sellPrice": sell_price}}


def variable(base, unit_type="per-night", event_fee=None, banjar_fee=None, **extra) -> dict:
    return {
        "model": "variable",
        "variablePricing": {
            "baseSellPrice": base,
            "unitType": unit_type,
            "eventFees": {"eventFeeSell": event_fee, "banjarFee": banjar_fee},
            **extra,
        },
    }


@pytest.fixture
def template_docs() -> list[dict]:
    """A small package template in content store shape."""
    return [
        {
            "product": product_doc(
                "Villa Uluwatu", variable(10_000_000, event_fee=5_000_000, banjar_fee=1_000_000),
                categories=["venue"], doc_id="villa",
            ),
            "quantity": 1,
        },
        {
            "product": product_doc(
                "Balinese Buffet Menu", constant(100_000),
                vendor="Ubud Catering Co", categories=["catering"], doc_id="buffet",
            ),
            "quantity": 1,
        },
        {
            "product": product_doc(
                "Wine Package", constant(200_000), categories=["catering"], doc_id="wine",
            ),
            "quantity": 1,
            "isOptional": True,
        },
        {
            "product": product_doc(
                "Wedding Planner", constant(25_000_000), categories=["planner"], doc_id="planner",
            ),
            "quantity": 1,
        },
        {
            "product": product_doc(
                "Welcome Drinks Setup", {"isVenueInclusion": True, "model": "constant",
                                         "constantPricing": {"sellPrice": 900_000}},
                categories=["venue"], doc_id="drinks",
            ),
            "quantity": 1,
        },
    ]
