"""
Liquor catalog schemas for validation and serialization.
"""

from datetime import datetime
from typing import Optional

from pydantic import ConfigDict, Field

from models.base import BaseSchema
from utils.formatting import PriceValue


class LiquorRecordBase(BaseSchema):
    """Fields extracted from one price book line."""

    liquor_code: str = Field("", description="MLCC liquor code (5 chars)")
    brand_name: str = Field("", description="Brand name")
    ada_number: str = Field("", description="Authorized distribution agent number")
    ada_name: str = Field("", description="Authorized distribution agent name")
    vendor_name: str = Field("", description="Vendor name")
    proof: str = Field("", description="Proof")
    bottle_size: str = Field("", description="Bottle size, e.g. 750ML")
    pack_size: str = Field("", description="Bottles per case")
    on_premise_price: PriceValue = Field("", description="On-premise price")
    off_premise_price: PriceValue = Field("", description="Off-premise price")
    shelf_price: PriceValue = Field("", description="Minimum shelf price")
    upc_code_1: str = Field("", description="Primary UPC (zero padded)")
    upc_code_2: str = Field("", description="Secondary UPC (zero padded)")
    effective_date: str = Field("", description="YYYY-MM-DD, or raw text")


class LiquorRecord(LiquorRecordBase):
    """
    Catalog entry with identity.

    Shadow records (per-session price overrides) point back at the record
    they were copied from and keep its shelf price.
    """

    id: str = Field(..., description="Record UUID, assigned on ingestion")
    original_record_id: Optional[str] = Field(
        None,
        description="Record this one overrides (shadow records only)"
    )
    original_shelf_price: Optional[PriceValue] = Field(
        None,
        description="Shelf price before the override (shadow records only)"
    )

    @property
    def is_shadow(self) -> bool:
        return self.original_record_id is not None


class LiquorRecordListResponse(BaseSchema):
    """Page of catalog records."""

    data: list[LiquorRecord]
    total: int
    page: int
    page_size: int
    total_pages: int


class LiquorSearchResponse(BaseSchema):
    """Catalog search results."""

    success: bool = True
    results: list[LiquorRecord]
    total_found: int
    message: Optional[str] = None


class CatalogStatus(BaseSchema):
    """What is currently loaded."""

    total_records: int
    loaded_at: Optional[datetime] = None
    source: Optional[str] = None


# ===================
# PRICE BOOK LOADS
# ===================

class PriceBookContentRequest(BaseSchema):
    """Raw price book text posted by the client."""

    # Leading spaces are part of the first fixed-width field
    model_config = ConfigDict(str_strip_whitespace=False)

    content: str = Field(..., min_length=1, description="Fixed-width price book text")
    filename: Optional[str] = Field(None, max_length=255)


class PriceBookLoadResponse(BaseSchema):
    """Summary of a price book load."""

    success: bool = True
    total_records: int
    unique_brands: int
    unique_vendors: int
    avg_price: float
    records: list[LiquorRecord] = Field(
        default_factory=list,
        description="Preview of the first records"
    )
    source: Optional[str] = None
    url: Optional[str] = None
    fetched_at: Optional[datetime] = None
