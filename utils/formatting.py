"""
Display helpers for price book values.
"""

from typing import Optional, Union

# Prices are numbers when the source text is a currency literal,
# otherwise the trimmed source text.
PriceValue = Union[float, str]


def format_price(price: Optional[PriceValue]) -> str:
    """
    Render a price for display.

    24.99  -> "$24.99"
    "N/A"  -> "N/A"
    None   -> ""
    """
    if price is None:
        return ""
    if isinstance(price, (int, float)) and not isinstance(price, bool):
        return f"${price:.2f}"
    return str(price)


def price_to_cents(price: Optional[PriceValue]) -> int:
    """Whole cents for a numeric price; 0 when the price is not a number."""
    if isinstance(price, (int, float)) and not isinstance(price, bool):
        return int(round(price * 100))
    return 0


def strip_leading_zeros(code: Optional[str]) -> str:
    """Liquor code without padding: "08234" -> "8234", "000" -> "0"."""
    if not code:
        return "0"
    return code.lstrip("0") or "0"
