"""
Data models for wedding products and package templates.

Products arrive as camelCase documents from the content store. This module
parses them into typed, immutable records so the pricing engine can assume
well-formed input. A product's pricing block is parsed into exactly one
descriptor variant:

- VenueInclusion: bundled free with the venue (wins over any declared model)
- ConstantPricing: a single sell price
- VariablePricing: base price with unit type and optional flat fees
- Unpriced: no recognized model, quoted as "Contact for pricing"
"""

import logging
import math
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Union

from wedding_pricing.utils.number_format import to_decimal

logger = logging.getLogger(__name__)


UNIT_TYPES = ("per-person", "per-adult", "per-child", "per-night")


class CatalogError(ValueError):
    """Raised when a product or template document is malformed."""

    pass


@dataclass(frozen=True)
class VenueInclusion:
    """Included with the venue booking at no cost."""


@dataclass(frozen=True)
class ConstantPricing:
    """Fixed sell price in IDR."""

    sell_price: Decimal


@dataclass(frozen=True)
class VariablePricing:
    """
    Base sell price with a unit type and optional flat surcharges.

    Attributes:
        base_sell_price: Price per unit in IDR.
        unit_type: One of UNIT_TYPES (unknown values are kept as-is).
        minimum_units: Informational lower bound.
        maximum_units: Informational upper bound.
        event_fee_sell: Flat event fee added once.
        banjar_fee: Flat community fee added once.
    """

    base_sell_price: Decimal
    unit_type: str = "per-night"
    minimum_units: int | None = None
    maximum_units: int | None = None
    event_fee_sell: Decimal | None = None
    banjar_fee: Decimal | None = None


@dataclass(frozen=True)
class Unpriced:
    """No recognized pricing model; `model` keeps the declared value for logs."""

    model: str | None = None


PricingDescriptor = Union[VenueInclusion, ConstantPricing, VariablePricing, Unpriced]


@dataclass(frozen=True)
class Product:
    """
    A sellable wedding product or service.

    Attributes:
        product_id: Content store document ID.
        name: Display name.
        vendor_trading_name: Supplier name.
        categories: Category tags (first one drives quote grouping).
        pricing: Parsed pricing descriptor.
    """

    product_id: str
    name: str
    vendor_trading_name: str = ""
    categories: tuple[str, ...] = ()
    pricing: PricingDescriptor = field(default_factory=Unpriced)

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> "Product":
        """
        Create a Product from a content store document.

        Args:
            doc: Raw product document (camelCase keys).

        Returns:
            Product: Parsed product.

        Raises:
            CatalogError: If the document is not a mapping or has no name.
        """
        if not isinstance(doc, dict):
            raise CatalogError(f"Product document must be an object, got {type(doc).__name__}")

        name = doc.get("name")
        if not name or not isinstance(name, str):
            raise CatalogError(f"Product {doc.get('_id', '?')} has no name")

        categories = doc.get("categories") or []
        if isinstance(categories, str):
            categories = [categories]
        if not isinstance(categories, (list, tuple)):
            raise CatalogError(
                f"Categories for '{name}' must be a list, got {type(categories).__name__}"
            )

        return cls(
            product_id=str(doc.get("_id") or doc.get("id") or ""),
            name=name,
            vendor_trading_name=str(doc.get("vendorTradingName") or ""),
            categories=tuple(str(c) for c in categories),
            pricing=parse_pricing(doc.get("pricing"), product_name=name),
        )


@dataclass(frozen=True)
class LineItem:
    """
    A product within a package template.

    Attributes:
        product: The product being quoted.
        quantity: Positive multiplier.
        is_optional: Informational flag; optional items are still priced.
        category: Optional display category overriding the product's first tag.
    """

    product: Product
    quantity: int = 1
    is_optional: bool = False
    category: str | None = None

    def __post_init__(self) -> None:
        if isinstance(self.quantity, bool) or not isinstance(self.quantity, int) or self.quantity < 1:
            raise CatalogError(
                f"Quantity for '{self.product.name}' must be a positive integer, got {self.quantity!r}"
            )

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> "LineItem":
        """
        Create a LineItem from a template product document.

        Expects {"product": {...}, "quantity": 2, "isOptional": false}.
        """
        if not isinstance(doc, dict):
            raise CatalogError(f"Template product must be an object, got {type(doc).__name__}")
        if "product" not in doc:
            raise CatalogError("Template product has no 'product' reference")

        product = Product.from_document(doc["product"])
        quantity = doc.get("quantity", 1)
        if quantity is None:
            quantity = 1
        if isinstance(quantity, float) and quantity.is_integer():
            quantity = int(quantity)

        return cls(
            product=product,
            quantity=quantity,
            is_optional=bool(doc.get("isOptional", False)),
            category=doc.get("category") or None,
        )


def parse_line_items(docs: list[dict[str, Any]] | None) -> list[LineItem]:
    """Parse a template's product list, preserving order."""
    return [LineItem.from_document(doc) for doc in docs or []]


def parse_pricing(raw: dict[str, Any] | None, product_name: str = "") -> PricingDescriptor:
    """
    Parse a pricing block into a descriptor variant.

    Args:
        raw: The product's "pricing" object (may be None).
        product_name: Used for log messages only.

    Returns:
        PricingDescriptor: Exactly one effective pricing model.

    Raises:
        CatalogError: If a present numeric field is not a finite number, or a
            present nested block is not an object.
    """
    if not isinstance(raw, dict):
        return Unpriced()

    if raw.get("isVenueInclusion"):
        return VenueInclusion()

    model = raw.get("model")

    if model == "constant":
        constant = _optional_block(raw.get("constantPricing"), "constantPricing")
        sell_price = _optional_amount(constant.get("sellPrice"), "constantPricing.sellPrice")
        if not sell_price:
            logger.debug(f"'{product_name}' has constant model without a sell price")
            return Unpriced(model)
        return ConstantPricing(sell_price=sell_price)

    if model == "variable" and raw.get("variablePricing") is not None:
        variable = _optional_block(raw["variablePricing"], "variablePricing")
        base = _optional_amount(variable.get("baseSellPrice"), "variablePricing.baseSellPrice")
        if base is None:
            logger.warning(f"'{product_name}' has variable model without a base sell price")
            return Unpriced(model)

        unit_type = variable.get("unitType") or "per-night"
        if unit_type not in UNIT_TYPES:
            logger.warning(f"'{product_name}' has unknown unit type '{unit_type}'")

        fees = _optional_block(variable.get("eventFees"), "variablePricing.eventFees")
        return VariablePricing(
            base_sell_price=base,
            unit_type=unit_type,
            minimum_units=_optional_int(
                variable.get("minimumUnits", variable.get("minNights")), "minimumUnits"
            ),
            maximum_units=_optional_int(
                variable.get("maximumUnits", variable.get("maxNights")), "maximumUnits"
            ),
            event_fee_sell=_optional_amount(fees.get("eventFeeSell"), "eventFees.eventFeeSell"),
            banjar_fee=_optional_amount(fees.get("banjarFee"), "eventFees.banjarFee"),
        )

    return Unpriced(model)


def _optional_block(value: Any, field_name: str) -> dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise CatalogError(f"{field_name} must be an object, got {type(value).__name__}")
    return value


def _optional_amount(value: Any, field_name: str) -> Decimal | None:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise CatalogError(f"{field_name} must be a number, got {value!r}")
    try:
        amount = to_decimal(value)
    except ValueError as e:
        raise CatalogError(f"{field_name} must be a number, got {value!r}") from e
    if not amount.is_finite():
        raise CatalogError(f"{field_name} must be finite, got {value!r}")
    return amount


def _optional_int(value: Any, field_name: str) -> int | None:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise CatalogError(f"{field_name} must be an integer, got {value!r}")
    try:
        number = float(value)
    except (TypeError, ValueError) as e:
        raise CatalogError(f"{field_name} must be an integer, got {value!r}") from e
    if not math.isfinite(number) or not number.is_integer():
        raise CatalogError(f"{field_name} must be an integer, got {value!r}")
    return int(number)
