"""
Custom name mapping schemas (UPC -> label display name).
"""

from datetime import datetime
from typing import Optional

from pydantic import Field

from models.base import BaseSchema

MAX_UPC_LENGTH = 32
MAX_CUSTOM_NAME_LENGTH = 200


class CustomNameMappingCreate(BaseSchema):
    """One mapping row from an upload."""

    upc_code: str = Field(..., min_length=1, max_length=MAX_UPC_LENGTH)
    custom_name: str = Field(..., min_length=1, max_length=MAX_CUSTOM_NAME_LENGTH)


class CustomNameMapping(CustomNameMappingCreate):
    """Stored mapping."""

    id: str
    uploaded_at: datetime


class CustomNameListResponse(BaseSchema):
    """All stored mappings."""

    data: list[CustomNameMapping]
    total: int


class SkippedMappingRow(BaseSchema):
    """Upload row that was not imported."""

    row: int
    reason: str


class CustomNameUploadResponse(BaseSchema):
    """Result of a mapping upload."""

    success: bool = True
    imported: int
    total: int = Field(..., description="Mappings stored after the upload")
    replaced: bool = Field(..., description="True when previous mappings were discarded")
    skipped_rows: list[SkippedMappingRow] = Field(default_factory=list)
    filename: Optional[str] = None
