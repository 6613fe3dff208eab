"""
UPC helpers shared by the catalog and the custom name registry.

Price book UPCs are zero-padded to a fixed width while scanners and keyboards
usually emit them unpadded, so codes are compared exactly first and only then
with leading zeros removed.
"""

from typing import Callable, Iterable, Optional, TypeVar

T = TypeVar("T")


def normalize_upc(upc: Optional[str]) -> str:
    """
    Strip leading zeros from a UPC.

    "00012345" -> "12345"
    "0000"     -> "0"
    None / ""  -> ""
    """
    if not upc:
        return ""
    return upc.lstrip("0") or "0"


def find_by_upc(
    items: Iterable[T],
    code: str,
    upcs_of: Callable[[T], Iterable[Optional[str]]],
) -> Optional[T]:
    """
    Return the first item whose UPCs match the code.

    First pass: exact string equality with any UPC of the item.
    Second pass: equality after normalize_upc() on both sides.

    When several items match in the same pass the earliest one wins; UPCs are
    not unique in the price book.
    """
    items = list(items)

    for item in items:
        if any(upc and upc == code for upc in upcs_of(item)):
            return item

    normalized = normalize_upc(code)
    if not normalized:
        return None

    for item in items:
        if any(upc and normalize_upc(upc) == normalized for upc in upcs_of(item)):
            return item

    return None
