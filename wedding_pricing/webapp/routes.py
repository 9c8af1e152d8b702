"""
FastAPI routes for the wedding pricing API.

Handles:
- Package quotes (pricing + currency conversion)
- Single and batch currency conversion
- Exchange rate info and forced refresh
"""

import logging
from functools import lru_cache
from typing import Any, Dict

from fastapi import APIRouter, Depends, Query

from wedding_pricing.catalog.models import CatalogError, parse_line_items
from wedding_pricing.currency.converter import CurrencyConverter
from wedding_pricing.currency.exchange_rates import UnsupportedCurrencyError
from wedding_pricing.pricing.models import PricingInputError, PricingInputs
from wedding_pricing.services.quote_service import QuoteService
from wedding_pricing.utils.config_loader import AppConfig, load_config, load_env
from wedding_pricing.webapp.exceptions import (
    CatalogValidationError,
    CurrencyNotSupportedError,
    ValidationError,
)
from wedding_pricing.webapp.schemas import ConvertRequest, QuoteRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


# ============================================================================
# Dependency Injection
# ============================================================================

@lru_cache()
def get_app_config() -> AppConfig:
    """
    Get application config (cached).

    Clear cache with get_app_config.cache_clear() if config changes.
    """
    load_env()
    return load_config()


@lru_cache()
def get_currency_converter() -> CurrencyConverter:
    """Process-wide converter; its rate cache is shared by all requests."""
    return CurrencyConverter(get_app_config())


def get_quote_service(
    config: AppConfig = Depends(get_app_config),
    converter: CurrencyConverter = Depends(get_currency_converter),
) -> QuoteService:
    return QuoteService(config, converter=converter)


# ============================================================================
# Routes
# ============================================================================
# Plain `def` handlers: rate fetches use blocking requests calls and run in
# the threadpool.

@router.post("/quote")
def create_quote(
    request: QuoteRequest,
    service: QuoteService = Depends(get_quote_service),
) -> Dict[str, Any]:
    """Price a package template and convert the total."""
    try:
        line_items = parse_line_items(request.products)
    except CatalogError as e:
        raise CatalogValidationError(str(e)) from e

    try:
        inputs = PricingInputs(
            adults=request.adults,
            children=request.children,
            nights=request.nights,
            selected_date=request.selected_date,
        )
    except PricingInputError as e:
        raise ValidationError(str(e)) from e

    try:
        quote = service.build_quote(line_items, inputs, request.currencies)
    except UnsupportedCurrencyError as e:
        raise CurrencyNotSupportedError(str(e), e.currency) from e

    return quote.to_dict()


@router.get("/convert")
def convert_amount(
    amount: float = Query(..., description="Amount in IDR"),
    currency: str = Query("USD", description="Target currency"),
    converter: CurrencyConverter = Depends(get_currency_converter),
) -> Dict[str, Any]:
    """Convert one IDR amount to one currency."""
    try:
        result = converter.convert(amount, currency)
    except UnsupportedCurrencyError as e:
        raise CurrencyNotSupportedError(str(e), e.currency) from e
    except ValueError as e:
        raise ValidationError(str(e)) from e
    return result.to_dict()


@router.post("/convert")
def convert_amount_many(
    request: ConvertRequest,
    converter: CurrencyConverter = Depends(get_currency_converter),
) -> Dict[str, Any]:
    """Convert one IDR amount to several currencies."""
    try:
        results = converter.convert_many(request.amount, request.currencies)
    except UnsupportedCurrencyError as e:
        raise CurrencyNotSupportedError(str(e), e.currency) from e
    return {"conversions": [result.to_dict() for result in results]}


@router.get("/rates")
def get_rates(
    converter: CurrencyConverter = Depends(get_currency_converter),
) -> Dict[str, Any]:
    """Current exchange rates with freshness info."""
    rates = converter.get_rates()
    info = converter.get_rate_info(rates)
    return {**rates.to_dict(), "info": info.to_dict()}


@router.post("/rates/refresh")
def refresh_rates(
    converter: CurrencyConverter = Depends(get_currency_converter),
) -> Dict[str, Any]:
    """Drop cached rates and fetch from the provider."""
    rates = converter.force_refresh()
    info = converter.get_rate_info(rates)
    logger.info(f"Exchange rates refreshed from {rates.source}")
    return {**rates.to_dict(), "info": info.to_dict()}
