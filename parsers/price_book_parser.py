"""
Michigan liquor price book parser.

The price book is newline-delimited fixed-width text, one product per line,
no header row. Each field occupies a fixed character range; characters 90-110
are not mapped.

Parsing is lenient: short or malformed lines yield whatever is present, prices
that are not currency literals stay as text, and dates that are not MMDDYYYY
stay as text. Nothing in this module raises on bad input.
"""

import re
from dataclasses import asdict, dataclass, field
from typing import Optional, Union

import structlog

from exceptions import EmptyInputError

logger = structlog.get_logger(__name__)

# Digits with an optional decimal point, after "$" and "," are removed
CURRENCY_PATTERN = re.compile(r"^-?(\d+\.?\d*|\.\d+)$")

# (name, start inclusive, end exclusive)
FIELD_SPECS: tuple[tuple[str, int, int], ...] = (
    ("LIQUOR CODE", 0, 5),
    ("BRAND NAME", 5, 37),
    ("ADA NUMBER", 37, 40),
    ("ADA NAME", 40, 65),
    ("VENDOR NAME", 65, 90),
    ("PROOF", 110, 115),
    ("BOTTLE SIZE", 115, 122),
    ("PACK SIZE", 122, 125),
    ("ON PREMISE PRICE", 125, 136),
    ("OFF PREMISE PRICE", 136, 147),
    ("SHELF PRICE", 147, 158),
    ("UPC CODE 1", 158, 172),
    ("UPC CODE 2", 172, 186),
    ("EFFECTIVE DATE", 186, 194),
)

# Source field name -> PriceBookRecord attribute
FIELD_ATTRIBUTES = {
    "LIQUOR CODE": "liquor_code",
    "BRAND NAME": "brand_name",
    "ADA NUMBER": "ada_number",
    "ADA NAME": "ada_name",
    "VENDOR NAME": "vendor_name",
    "PROOF": "proof",
    "BOTTLE SIZE": "bottle_size",
    "PACK SIZE": "pack_size",
    "ON PREMISE PRICE": "on_premise_price",
    "OFF PREMISE PRICE": "off_premise_price",
    "SHELF PRICE": "shelf_price",
    "UPC CODE 1": "upc_code_1",
    "UPC CODE 2": "upc_code_2",
    "EFFECTIVE DATE": "effective_date",
}


@dataclass
class PriceBookRecord:
    """One parsed price book line, before it is given an id."""
    liquor_code: str = ""
    brand_name: str = ""
    ada_number: str = ""
    ada_name: str = ""
    vendor_name: str = ""
    proof: str = ""
    bottle_size: str = ""
    pack_size: str = ""
    on_premise_price: Union[float, str] = ""
    off_premise_price: Union[float, str] = ""
    shelf_price: Union[float, str] = ""
    upc_code_1: str = ""
    upc_code_2: str = ""
    effective_date: str = ""

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class PriceBookParseResult:
    """Result of parsing a whole price book."""
    records: list[PriceBookRecord] = field(default_factory=list)
    unique_brands: int = 0
    unique_vendors: int = 0
    avg_shelf_price: float = 0.0
    blank_lines: int = 0

    @property
    def total_records(self) -> int:
        return len(self.records)

    @property
    def has_data(self) -> bool:
        """True if any record was parsed."""
        return len(self.records) > 0

    def to_dict(self) -> dict:
        """Convert to dictionary for API response."""
        return {
            "total_records": self.total_records,
            "unique_brands": self.unique_brands,
            "unique_vendors": self.unique_vendors,
            "avg_price": self.avg_shelf_price,
            "records": [r.to_dict() for r in self.records],
        }


def parse_price(value: str) -> Union[float, str]:
    """
    Parse a currency literal.

    "$1,234.56" -> 1234.56
    "N/A"       -> "N/A"
    ""          -> ""
    """
    cleaned = value.replace("$", "").replace(",", "").strip()
    if not CURRENCY_PATTERN.match(cleaned):
        return value
    return float(cleaned)


def format_effective_date(value: str) -> str:
    """MMDDYYYY -> YYYY-MM-DD. Values of any other length are returned as-is."""
    if len(value) != 8:
        return value
    return f"{value[4:8]}-{value[0:2]}-{value[2:4]}"


def parse_line(line: str) -> PriceBookRecord:
    """
    Parse one fixed-width line.

    Never raises: slices past the end of a short line are empty, so every
    field is present (possibly as an empty string).
    """
    record = PriceBookRecord()

    for name, start, end in FIELD_SPECS:
        value: Union[float, str] = line[start:end].strip()

        if "PRICE" in name:
            value = parse_price(value)
        elif name == "EFFECTIVE DATE":
            value = format_effective_date(value)

        setattr(record, FIELD_ATTRIBUTES[name], value)

    return record


def parse_price_book(
    content: str,
    raise_on_empty: bool = False,
    source: Optional[str] = None,
) -> PriceBookParseResult:
    """
    Parse price book text into records and summary statistics.

    Blank lines are skipped; remaining lines are parsed in order. The average
    shelf price covers numeric shelf prices only and is rounded to cents.

    Args:
        content: Whole file as text
        raise_on_empty: Raise EmptyInputError when no record is found
        source: Description of the input, used for logging

    Returns:
        PriceBookParseResult

    Raises:
        EmptyInputError: Only when raise_on_empty is set and nothing parsed
    """
    result = PriceBookParseResult()
    brands: set[str] = set()
    vendors: set[str] = set()
    prices: list[float] = []

    for line in content.splitlines():
        if not line.strip():
            result.blank_lines += 1
            continue

        record = parse_line(line)
        result.records.append(record)

        if record.brand_name:
            brands.add(record.brand_name)
        if record.vendor_name:
            vendors.add(record.vendor_name)
        if isinstance(record.shelf_price, float):
            prices.append(record.shelf_price)

    result.unique_brands = len(brands)
    result.unique_vendors = len(vendors)
    result.avg_shelf_price = round(sum(prices) / len(prices), 2) if prices else 0.0

    logger.info(
        "price_book_parsed",
        source=source,
        total_records=result.total_records,
        unique_brands=result.unique_brands,
        unique_vendors=result.unique_vendors,
        avg_shelf_price=result.avg_shelf_price,
        blank_lines=result.blank_lines,
    )

    if raise_on_empty and not result.has_data:
        raise EmptyInputError(source)

    return result
