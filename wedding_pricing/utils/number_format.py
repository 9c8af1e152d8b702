"""
Number formatting helpers shared by calculation strings and currency display.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

_SWAP_SEPARATORS = str.maketrans(",.", ".,")


def to_decimal(value) -> Decimal:
    """Convert an int/float/str/Decimal to Decimal without binary float noise."""
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except InvalidOperation as e:
        raise ValueError(f"Not a number: {value!r}") from e


def format_fixed(value, decimal_places: int = 2, european: bool = False) -> str:
    """
    Format a number with thousands grouping and a fixed number of decimals.

    Args:
        value: Number to format.
        decimal_places: Digits after the decimal point.
        european: Use "." for grouping and "," for decimals (id-ID, de-DE).

    Returns:
        str: Grouped number, e.g. "1,234.50" or "1.234,50".
    """
    amount = to_decimal(value)
    exponent = Decimal(1).scaleb(-decimal_places)
    quantized = amount.quantize(exponent, rounding=ROUND_HALF_UP)
    text = f"{quantized:,.{decimal_places}f}"
    if text.startswith("-") and quantized == 0:
        text = text[1:]
    return text.translate(_SWAP_SEPARATORS) if european else text


def format_grouped(value, max_decimals: int = 3) -> str:
    """
    Format a number with comma grouping, dropping insignificant decimals.

    format_grouped(100000) -> "100,000"; format_grouped(1234.5) -> "1,234.5"
    """
    text = format_fixed(value, max_decimals)
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text
