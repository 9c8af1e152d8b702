"""
Product catalog importer module.

Loads wedding products from spreadsheet exports (CSV or Excel) of the
previous booking platform and turns each row into a Product record.
Handles column name variations and validates rows at the boundary so the
pricing engine only ever sees well-formed products.
"""

import logging
from pathlib import Path
from typing import Any

import pandas as pd

from wedding_pricing.catalog.models import CatalogError, Product
from wedding_pricing.utils.config_loader import AppConfig

logger = logging.getLogger(__name__)


# Common column name variations in product exports
COLUMN_VARIANTS = {
    "id": ["_id", "id", "ID", "Product ID", "product_id", "Bubble ID", "bubble_id"],
    "name": ["Product Name", "Name", "name", "product_name", "Product name", "Title"],
    "vendor": ["Vendor Trading Name", "Vendor", "vendor", "vendorTradingName", "Supplier"],
    "categories": ["Categories", "Category", "categories", "category"],
    "model": ["Pricing Model", "Model", "model", "pricing_model"],
    "sell_price": ["Sell Price", "sell_price", "sellPrice", "Price"],
    "base_sell_price": ["Base Sell Price", "base_sell_price", "baseSellPrice"],
    "unit_type": ["Unit Type", "unit_type", "unitType"],
    "minimum_units": ["Minimum Units", "minimum_units", "minimumUnits", "Min Nights"],
    "maximum_units": ["Maximum Units", "maximum_units", "maximumUnits", "Max Nights"],
    "event_fee_sell": ["Event Fee", "Event Fee Sell", "event_fee_sell", "eventFeeSell"],
    "banjar_fee": ["Banjar Fee", "banjar_fee", "banjarFee"],
    "venue_inclusion": ["Venue Inclusion", "venue_inclusion", "isVenueInclusion", "Included"],
}

REQUIRED_COLUMNS = ["name"]

TRUTHY = {"y", "yes", "true", "1", "x"}


def find_column(df: pd.DataFrame, candidates: list[str]) -> str | None:
    """Find a column in the DataFrame from a list of candidate names."""
    for candidate in candidates:
        if candidate in df.columns:
            return candidate
    return None


class CatalogImporter:
    """
    Importer for product catalog spreadsheets.

    Responsible for:
    - Loading CSV/Excel exports
    - Mapping columns to internal field names
    - Building content-store shaped documents from rows
    - Skipping (and reporting) rows that fail validation

    Attributes:
        config: Application configuration object.
        column_mapping: Dict mapping internal names to export column names.
        errors: Row-level validation errors from the last import.
    """

    def __init__(self, config: AppConfig | None = None) -> None:
        self.config = config or AppConfig()
        self.column_mapping: dict[str, str] = {}
        self.errors: list[str] = []

    def load_file(self, file_path: Path) -> pd.DataFrame:
        """
        Load a product export file.

        Args:
            file_path: Path to a .csv, .xlsx or .xls file.

        Returns:
            pd.DataFrame: Raw rows from the export.

        Raises:
            FileNotFoundError: If the file does not exist.
            ValueError: If the file format is unsupported.
        """
        file_path = Path(file_path)

        if not file_path.exists():
            raise FileNotFoundError(f"Catalog export file not found: {file_path}")

        logger.info(f"Loading product catalog from: {file_path}")

        suffix = file_path.suffix.lower()
        if suffix == ".csv":
            df = pd.read_csv(file_path)
        elif suffix == ".xlsx":
            df = pd.read_excel(file_path, engine="openpyxl")
        elif suffix == ".xls":
            df = pd.read_excel(file_path, engine="xlrd")
        else:
            raise ValueError(f"Unsupported file format: {suffix}. Expected .csv, .xlsx or .xls")

        logger.info(f"Loaded {len(df)} rows from catalog export")
        logger.debug(f"Columns found: {list(df.columns)}")
        return df

    def validate_columns(self, df: pd.DataFrame) -> list[str]:
        """Return the required internal column names missing from the export."""
        missing = [
            name for name in REQUIRED_COLUMNS if find_column(df, COLUMN_VARIANTS[name]) is None
        ]
        if missing:
            logger.error(f"Missing required columns: {missing}")
            logger.debug(f"Available columns: {list(df.columns)}")
        return missing

    def normalize_columns(self, df: pd.DataFrame) -> pd.DataFrame:
        """
        Rename export columns to internal names.

        Args:
            df: DataFrame with original column names.

        Returns:
            pd.DataFrame: Copy with normalized column names.
        """
        df = df.copy()
        rename_map = {}

        for internal, candidates in COLUMN_VARIANTS.items():
            column = find_column(df, candidates)
            if column is not None:
                self.column_mapping[internal] = column
                if column != internal:
                    rename_map[column] = internal

        if rename_map:
            df = df.rename(columns=rename_map)
            logger.debug(f"Renamed columns: {rename_map}")

        return df

    def row_to_document(self, row: dict[str, Any]) -> dict[str, Any]:
        """
        Build a content-store shaped product document from a normalized row.

        The pricing model defaults to "variable" when only a base sell price
        is present and to "constant" when only a sell price is present.
        """
        value = {key: _clean(val) for key, val in row.items()}

        model = value.get("model")
        if model is None:
            if value.get("base_sell_price") is not None:
                model = "variable"
            elif value.get("sell_price") is not None:
                model = "constant"

        categories = value.get("categories")
        if isinstance(categories, str):
            categories = [c.strip() for c in categories.split(",") if c.strip()]

        pricing: dict[str, Any] = {
            "model": model,
            "isVenueInclusion": _is_truthy(value.get("venue_inclusion")),
        }
        if model == "constant":
            pricing["constantPricing"] = {"sellPrice": value.get("sell_price")}
        elif model == "variable":
            pricing["variablePricing"] = {
                "baseSellPrice": value.get("base_sell_price"),
                "unitType": value.get("unit_type"),
                "minimumUnits": value.get("minimum_units"),
                "maximumUnits": value.get("maximum_units"),
                "eventFees": {
                    "eventFeeSell": value.get("event_fee_sell"),
                    "banjarFee": value.get("banjar_fee"),
                },
            }

        return {
            "_id": value.get("id"),
            "name": value.get("name"),
            "vendorTradingName": value.get("vendor"),
            "categories": categories or [],
            "pricing": pricing,
        }

    def import_products(self, file_path: Path) -> list[Product]:
        """
        Full import pipeline: load, validate, normalize and parse rows.

        Rows that fail validation are skipped and recorded in `errors`.

        Args:
            file_path: Path to the export file.

        Returns:
            list[Product]: Parsed products in file order.

        Raises:
            FileNotFoundError: If the file does not exist.
            ValueError: If required columns are missing.
        """
        df = self.load_file(file_path)

        missing = self.validate_columns(df)
        if missing:
            raise ValueError(
                f"Missing required columns in catalog export: {missing}. "
                f"Available columns: {list(df.columns)}"
            )

        df = self.normalize_columns(df)
        return self.parse_dataframe(df)

    def parse_dataframe(self, df: pd.DataFrame) -> list[Product]:
        """Parse normalized rows into products, collecting row errors."""
        self.errors = []
        products: list[Product] = []

        for index, row in enumerate(df.to_dict(orient="records")):
            try:
                products.append(Product.from_document(self.row_to_document(row)))
            except CatalogError as e:
                # +2: header row and 1-based numbering
                message = f"Row {index + 2}: {e}"
                self.errors.append(message)
                logger.warning(f"Skipping catalog row. {message}")

        logger.info(
            f"Imported {len(products)} products from catalog export ({len(self.errors)} skipped)"
        )
        return products


def load_catalog(file_path: Path, config: AppConfig | None = None) -> list[Product]:
    """
    Convenience function to load a product catalog export.

    Args:
        file_path: Path to the export file.
        config: Optional configuration (uses defaults if not provided).

    Returns:
        list[Product]: Parsed products.
    """
    importer = CatalogImporter(config)
    return importer.import_products(file_path)


def _clean(value: Any) -> Any:
    """Map pandas NaN/empty cells to None and strip strings."""
    if isinstance(value, str):
        value = value.strip()
        return value or None
    if value is None:
        return None
    try:
        if pd.isna(value):
            return None
    except (TypeError, ValueError):
        pass
    return value


def _is_truthy(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in TRUTHY
    return bool(value)
