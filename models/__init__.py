"""
Pydantic models for validation and serialization.
"""

from models.base import BaseSchema, TimestampMixin
from models.liquor import (
    LiquorRecordBase,
    LiquorRecord,
    LiquorRecordListResponse,
    LiquorSearchResponse,
    CatalogStatus,
    PriceBookContentRequest,
    PriceBookLoadResponse,
)
from models.session import (
    PRODUCT_NOT_FOUND,
    ScanSessionCreate,
    ScanSessionUpdate,
    ScanSession,
    ScanSessionListResponse,
    ScannedItem,
    ScannedItemWithProduct,
    ScannedItemListResponse,
    ScannedItemPriceUpdate,
)
from models.scan import (
    ScanRequest,
    ScanResult,
    AddItemRequest,
    AddItemResult,
)
from models.custom_name import (
    CustomNameMappingCreate,
    CustomNameMapping,
    CustomNameListResponse,
    SkippedMappingRow,
    CustomNameUploadResponse,
)
from models.export import LabelMode, ExcelExportRequest

__all__ = [
    # Base
    "BaseSchema",
    "TimestampMixin",

    # Catalog
    "LiquorRecordBase",
    "LiquorRecord",
    "LiquorRecordListResponse",
    "LiquorSearchResponse",
    "CatalogStatus",
    "PriceBookContentRequest",
    "PriceBookLoadResponse",

    # Sessions
    "PRODUCT_NOT_FOUND",
    "ScanSessionCreate",
    "ScanSessionUpdate",
    "ScanSession",
    "ScanSessionListResponse",
    "ScannedItem",
    "ScannedItemWithProduct",
    "ScannedItemListResponse",
    "ScannedItemPriceUpdate",

    # Scan
    "ScanRequest",
    "ScanResult",
    "AddItemRequest",
    "AddItemResult",

    # Custom names
    "CustomNameMappingCreate",
    "CustomNameMapping",
    "CustomNameListResponse",
    "SkippedMappingRow",
    "CustomNameUploadResponse",

    # Export
    "LabelMode",
    "ExcelExportRequest",
]
