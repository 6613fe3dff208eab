"""
Scan session and scanned item schemas.
"""

import math
from datetime import datetime
from typing import Optional

from pydantic import ConfigDict, Field, computed_field, field_validator

from models.base import BaseSchema, TimestampMixin
from models.liquor import LiquorRecord
from utils.formatting import format_price

PRODUCT_NOT_FOUND = "Product Not Found"


# ===================
# SESSIONS
# ===================

class ScanSessionCreate(BaseSchema):
    """
    Create a new scan session.

    Optional: name (defaults to "Scan Session <today>")
    """

    name: Optional[str] = Field(
        None,
        max_length=200,
        description="Session name"
    )


class ScanSessionUpdate(BaseSchema):
    """Rename a session."""

    name: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="New session name"
    )


class ScanSession(BaseSchema, TimestampMixin):
    """
    Scan session response.

    item_count is the number of scanned items currently in the session.
    """

    id: str = Field(..., description="Session UUID")
    name: str = Field(..., description="Session name")
    item_count: int = Field(0, ge=0, description="Live scanned items")
    is_active: bool = Field(False, description="Receives new scans by default")


class ScanSessionListResponse(BaseSchema):
    """Sessions, most recently updated first."""

    data: list[ScanSession]
    total: int
    active_session_id: Optional[str] = None


# ===================
# SCANNED ITEMS
# ===================

class ScannedItem(BaseSchema):
    """
    One barcode resolution recorded against a session.

    scanned_barcode is kept exactly as scanned; it is the value re-emitted on
    export, not the padded catalog UPC.
    """

    model_config = ConfigDict(
        from_attributes=True,
        str_strip_whitespace=False,
        validate_assignment=True
    )

    id: str = Field(..., description="Scanned item UUID")
    session_id: str = Field(..., description="Owning session UUID")
    liquor_record_id: Optional[str] = Field(None, description="Linked catalog record")
    scanned_barcode: str = Field(..., description="Barcode as scanned")
    scanned_at: datetime = Field(..., description="When the item was scanned")
    quantity: int = Field(1, ge=1, description="Quantity")


class ScannedItemWithProduct(ScannedItem):
    """Scanned item joined with the catalog at read time."""

    product: Optional[LiquorRecord] = Field(
        None,
        description="Current catalog record, or None when it no longer exists"
    )

    @computed_field
    @property
    def display_name(self) -> str:
        if self.product is None:
            return PRODUCT_NOT_FOUND
        return f"{self.product.brand_name} {self.product.bottle_size}".strip()

    @computed_field
    @property
    def display_price(self) -> str:
        if self.product is None:
            return ""
        return format_price(self.product.shelf_price)

    @computed_field
    @property
    def was_price(self) -> Optional[str]:
        """Shelf price before a per-session override, e.g. "$24.99"."""
        if self.product is None or not self.product.is_shadow:
            return None
        return format_price(self.product.original_shelf_price)


class ScannedItemListResponse(BaseSchema):
    """Scanned items of one session."""

    success: bool = True
    session_id: str
    items: list[ScannedItemWithProduct]
    total_count: int


class ScannedItemPriceUpdate(BaseSchema):
    """Price override for one scanned item."""

    price: float = Field(..., description="New shelf price")

    @field_validator("price")
    @classmethod
    def price_finite(cls, v: float) -> float:
        """Reject NaN and infinity."""
        if not math.isfinite(v):
            raise ValueError("price must be a finite number")
        return v
