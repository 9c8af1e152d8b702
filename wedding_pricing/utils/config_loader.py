"""
Configuration loader module.

Loads application configuration from YAML files and environment variables.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

logger = logging.getLogger(__name__)


DEFAULT_FALLBACK_RATES: dict[str, float] = {
    "IDR": 1,
    "USD": 16388,
    "EUR": 17800,
    "GBP": 20850,
    "AUD": 11200,
}


@dataclass
class CurrencyConfig:
    """Exchange rate provider and cache configuration."""

    api_url: str = "https://api.exchangerate-api.com/v4/latest"
    base_currency: str = "IDR"
    supported: list[str] = field(default_factory=lambda: ["IDR", "USD", "EUR", "GBP", "AUD"])
    cache_ttl_hours: float = 4.0
    timeout_seconds: int = 10
    max_retries: int = 0
    retry_delay: float = 1.0
    fallback_rates: dict[str, float] = field(default_factory=lambda: dict(DEFAULT_FALLBACK_RATES))
    fallback_updated: str = "2025-09-02T00:00:00Z"


@dataclass
class PricingConfig:
    """Calculator defaults."""

    default_nights: int = 3
    default_adults: int = 50
    default_children: int = 0


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "INFO"
    format: str = "text"
    file: str | None = None


@dataclass
class AppConfig:
    """
    Main application configuration.

    Aggregates all configuration sections into a single object.
    """

    currency: CurrencyConfig = field(default_factory=CurrencyConfig)
    pricing: PricingConfig = field(default_factory=PricingConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def load_env(env_file: Path = Path(".env")) -> None:
    """
    Load environment variables from .env file.

    Args:
        env_file: Path to .env file.
    """
    if env_file.exists():
        load_dotenv(env_file)
        logger.debug(f"Loaded environment from: {env_file}")
    else:
        logger.debug(f"No .env file found at: {env_file}")


def load_config(config_file: Path = Path("config/config.yaml")) -> AppConfig:
    """
    Load application configuration from YAML file.

    Environment overrides (EXCHANGE_RATE_API_URL, LOG_LEVEL) are applied
    on top of the file values.

    Args:
        config_file: Path to configuration YAML file.

    Returns:
        AppConfig: Loaded configuration object.

    Raises:
        yaml.YAMLError: If config file is invalid.
    """
    config_file = Path(config_file)
    if not config_file.exists():
        logger.warning(f"Config file not found: {config_file}. Using defaults.")
        config = AppConfig()
    else:
        with open(config_file, encoding="utf-8") as f:
            raw_config = yaml.safe_load(f)

        config = _parse_config(raw_config or {})
        logger.info(f"Loaded configuration from: {config_file}")

    _apply_env_overrides(config)
    return config


def _parse_config(raw: dict[str, Any]) -> AppConfig:
    """
    Parse raw YAML dict into AppConfig dataclass.

    Args:
        raw: Raw dictionary from YAML file.

    Returns:
        AppConfig: Parsed configuration object.
    """
    defaults = CurrencyConfig()

    currency_raw = raw.get("currency") or {}
    fallback_rates = dict(DEFAULT_FALLBACK_RATES)
    fallback_rates.update(currency_raw.get("fallback_rates") or {})
    currency = CurrencyConfig(
        api_url=currency_raw.get("api_url", defaults.api_url),
        base_currency=str(currency_raw.get("base_currency", defaults.base_currency)).upper(),
        supported=[str(code).upper() for code in currency_raw.get("supported", defaults.supported)],
        cache_ttl_hours=float(currency_raw.get("cache_ttl_hours", defaults.cache_ttl_hours)),
        timeout_seconds=int(currency_raw.get("timeout_seconds", defaults.timeout_seconds)),
        max_retries=int(currency_raw.get("max_retries", defaults.max_retries)),
        retry_delay=float(currency_raw.get("retry_delay", defaults.retry_delay)),
        fallback_rates=fallback_rates,
        fallback_updated=currency_raw.get("fallback_updated", defaults.fallback_updated),
    )

    pricing_raw = raw.get("pricing") or {}
    pricing = PricingConfig(
        default_nights=int(pricing_raw.get("default_nights", 3)),
        default_adults=int(pricing_raw.get("default_adults", 50)),
        default_children=int(pricing_raw.get("default_children", 0)),
    )

    logging_raw = raw.get("logging") or {}
    logging_config = LoggingConfig(
        level=logging_raw.get("level", "INFO"),
        format=logging_raw.get("format", "text"),
        file=logging_raw.get("file"),
    )

    return AppConfig(currency=currency, pricing=pricing, logging=logging_config)


def _apply_env_overrides(config: AppConfig) -> None:
    api_url = get_env_var("EXCHANGE_RATE_API_URL")
    if api_url:
        config.currency.api_url = api_url
    log_level = get_env_var("LOG_LEVEL")
    if log_level:
        config.logging.level = log_level


def get_env_var(key: str, default: str | None = None) -> str | None:
    """
    Get an environment variable with optional default.

    Args:
        key: Environment variable name.
        default: Default value if not set.

    Returns:
        Environment variable value or default.
    """
    return os.environ.get(key, default)
