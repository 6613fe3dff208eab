"""
Price book and upload file parsers.
"""

from parsers.price_book_parser import (
    parse_line,
    parse_price_book,
    PriceBookRecord,
    PriceBookParseResult,
)
from parsers.custom_name_parser import (
    parse_custom_names,
    CustomNameParseResult,
)

__all__ = [
    "parse_line",
    "parse_price_book",
    "PriceBookRecord",
    "PriceBookParseResult",
    "parse_custom_names",
    "CustomNameParseResult",
]
