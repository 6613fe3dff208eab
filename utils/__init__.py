"""
Shared helpers.
"""

from utils.formatting import PriceValue, format_price, price_to_cents, strip_leading_zeros
from utils.upc import find_by_upc, normalize_upc

__all__ = [
    "PriceValue",
    "format_price",
    "price_to_cents",
    "strip_leading_zeros",
    "find_by_upc",
    "normalize_upc",
]
