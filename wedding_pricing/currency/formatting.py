"""
Currency display formatting.

One display convention per supported currency, matching how each is shown
to visitors in its home locale:

    IDR  Rp 1.000.000      (id-ID, no decimals)
    USD  $1,234.56         (en-US)
    EUR  1.234,56 €        (de-DE)
    GBP  £1,234.56         (en-GB)
    AUD  $1,234.56         (en-AU)

Other codes fall back to "1,234.567 XYZ".
"""

from dataclasses import dataclass

from wedding_pricing.utils.number_format import format_fixed, format_grouped, to_decimal


@dataclass(frozen=True)
class CurrencyFormat:
    """Display convention for one currency."""

    symbol: str
    decimal_places: int = 2
    european: bool = False
    symbol_after: bool = False
    separator: str = ""


CURRENCY_FORMATS: dict[str, CurrencyFormat] = {
    "IDR": CurrencyFormat(symbol="Rp", decimal_places=0, european=True, separator=" "),
    "USD": CurrencyFormat(symbol="$"),
    "EUR": CurrencyFormat(symbol="€", european=True, symbol_after=True, separator=" "),
    "GBP": CurrencyFormat(symbol="£"),
    "AUD": CurrencyFormat(symbol="$"),
}


def format_currency(amount, currency: str) -> str:
    """
    Format an amount for display in the given currency.

    Args:
        amount: Number to format (int, float, str or Decimal).
        currency: ISO currency code.

    Returns:
        str: Display string, e.g. "Rp 16.388.000" or "$1,000.00".
    """
    value = to_decimal(amount)
    code = (currency or "").upper()
    fmt = CURRENCY_FORMATS.get(code)

    if fmt is None:
        return f"{format_grouped(value)} {currency}"

    number = format_fixed(abs(value), fmt.decimal_places, european=fmt.european)
    sign = "-" if value < 0 and number.strip("0.,") else ""

    if fmt.symbol_after:
        return f"{sign}{number}{fmt.separator}{fmt.symbol}"
    return f"{sign}{fmt.symbol}{fmt.separator}{number}"
