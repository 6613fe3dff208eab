"""
Barcode scan request and result schemas.
"""

from typing import Optional

from pydantic import ConfigDict, Field

from models.base import BaseSchema
from models.liquor import LiquorRecord
from models.session import ScannedItem


class ScanRequest(BaseSchema):
    """
    Barcode scanned by camera or typed by hand.

    The barcode is not trimmed: it is recorded exactly as received.
    """

    model_config = ConfigDict(str_strip_whitespace=False)

    barcode: str = Field(..., description="Scanned barcode")
    session_id: Optional[str] = Field(
        None,
        description="Session to record the scan in (not recorded when omitted)"
    )


class ScanResult(BaseSchema):
    """
    Outcome of a scan.

    "Not found" is a normal result: matched is False and matched_product None.
    """

    model_config = ConfigDict(str_strip_whitespace=False)

    matched: bool
    barcode: str
    matched_product: Optional[LiquorRecord] = None
    scanned_item: Optional[ScannedItem] = None
    message: Optional[str] = None


class AddItemRequest(BaseSchema):
    """Add a catalog record picked from search results."""

    liquor_record_id: str = Field(..., min_length=1)
    session_id: str = Field(..., min_length=1)
    scanned_barcode: Optional[str] = Field(
        None,
        description="Defaults to the record's UPC 1, then 'manual-search'"
    )


class AddItemResult(BaseSchema):
    """Item added through search."""

    success: bool = True
    message: str
    liquor_record: LiquorRecord
    scanned_item: ScannedItem
