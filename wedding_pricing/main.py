"""
CLI entry point for the wedding package pricing tool.

Commands:
    quote   Price a package template JSON file and print the breakdown
    rates   Show the current exchange rates and their age
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from wedding_pricing.catalog.models import CatalogError, parse_line_items
from wedding_pricing.currency.converter import CurrencyConverter
from wedding_pricing.currency.exchange_rates import UnsupportedCurrencyError
from wedding_pricing.currency.formatting import format_currency
from wedding_pricing.pricing.models import PricingInputError, PricingInputs
from wedding_pricing.services.quote_service import QuoteService
from wedding_pricing.utils.config_loader import AppConfig, load_config, load_env
from wedding_pricing.utils.logging_config import setup_logging

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """
    Parse command line arguments.

    Returns:
        argparse.Namespace: Parsed command line arguments.
    """
    parser = argparse.ArgumentParser(
        description="Wedding Package Pricing Tool",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    python -m wedding_pricing.main quote --template package.json --adults 45 --children 5
    python -m wedding_pricing.main quote --template package.json --currency USD --currency AUD
    python -m wedding_pricing.main rates --refresh
        """,
    )

    parser.add_argument(
        "--config", "-c",
        type=Path,
        default=Path("config/config.yaml"),
        help="Path to configuration file",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    quote = subparsers.add_parser("quote", help="Price a package template")
    quote.add_argument(
        "--template", "-t",
        type=Path,
        required=True,
        help='JSON file: a list of template products or {"products": [...]}',
    )
    quote.add_argument("--adults", "-a", type=int, help="Adult guests (default: from config)")
    quote.add_argument("--children", type=int, help="Child guests (default: from config)")
    quote.add_argument("--nights", "-n", type=int, help="Nights (default: from config)")
    quote.add_argument("--date", help="Wedding date (YYYY-MM-DD)")
    quote.add_argument(
        "--currency",
        action="append",
        dest="currencies",
        help="Display currency; repeat for several (default: all supported)",
    )

    rates = subparsers.add_parser("rates", help="Show exchange rates")
    rates.add_argument(
        "--refresh",
        action="store_true",
        help="Ignore cached rates and fetch from the provider",
    )

    return parser.parse_args(argv)


def load_template(path: Path) -> list[dict]:
    """
    Read template products from a JSON file.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the JSON has no product list.
    """
    if not path.exists():
        raise FileNotFoundError(f"Template file not found: {path}")

    with open(path, encoding="utf-8") as f:
        data = json.load(f)

    if isinstance(data, dict):
        data = data.get("products")
    if not isinstance(data, list):
        raise ValueError(f"Template file must contain a list of products: {path}")
    return data


def run_quote(args: argparse.Namespace, config: AppConfig) -> int:
    """Price a template and print the grouped breakdown."""
    try:
        line_items = parse_line_items(load_template(args.template))
        inputs = PricingInputs(
            adults=args.adults if args.adults is not None else config.pricing.default_adults,
            children=args.children if args.children is not None else config.pricing.default_children,
            nights=args.nights if args.nights is not None else config.pricing.default_nights,
            selected_date=args.date,
        )
    except FileNotFoundError as e:
        print(f"\n✗ Error: {e}")
        return 1
    except (ValueError, CatalogError, PricingInputError) as e:
        logger.error(f"Invalid template: {e}")
        print(f"\n✗ Error: {e}")
        return 1

    service = QuoteService(config)
    try:
        quote = service.build_quote(line_items, inputs, args.currencies)
    except UnsupportedCurrencyError as e:
        print(f"\n✗ Error: {e}")
        return 1

    print("\n" + "=" * 60)
    print(f"PACKAGE ESTIMATE: {quote.total_guests} guests × {quote.nights} nights")
    print("=" * 60)

    for category in quote.categories:
        print(f"\n{category.label.upper()}  ({format_currency(category.subtotal, 'IDR')})")
        for entry in category.entries:
            optional = " [optional]" if entry.is_optional else ""
            print(f"  {entry.item}{optional}")
            print(f"      {entry.calculation} = {format_currency(entry.price, 'IDR')}")

    print("\n" + "-" * 60)
    print(f"  TOTAL: {format_currency(quote.total_price, 'IDR')}")
    for conversion in quote.conversions:
        if conversion.currency != "IDR":
            print(f"         {conversion.formatted} {conversion.currency}")
    print(f"  Rates: {quote.rates_source}")
    print("=" * 60 + "\n")
    return 0


def run_rates(args: argparse.Namespace, config: AppConfig) -> int:
    """Print the current exchange rate table."""
    converter = CurrencyConverter(config)
    rates = converter.force_refresh() if args.refresh else converter.get_rates()
    info = converter.get_rate_info(rates)

    print("\n" + "=" * 60)
    print(f"EXCHANGE RATES (IDR per unit) - {info.source}, updated {info.age}")
    print("=" * 60)
    for code, rate in rates.rates.items():
        if code != converter.base_currency:
            print(f"  1 {code} = {format_currency(rate, 'IDR')}")
    if info.is_stale:
        print("\n⚠ Warning: rates are older than the cache lifetime")
    print("=" * 60 + "\n")
    return 0


def main(argv: list[str] | None = None) -> int:
    """
    Main entry point.

    Returns:
        int: Exit code.
    """
    load_env()
    args = parse_args(argv)

    setup_logging(level="DEBUG" if args.verbose else "INFO")
    config = load_config(args.config)

    try:
        if args.command == "quote":
            return run_quote(args, config)
        return run_rates(args, config)
    except KeyboardInterrupt:
        print("\n\nOperation cancelled by user.")
        return 130


if __name__ == "__main__":
    sys.exit(main())
