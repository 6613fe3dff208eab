"""
Export request schemas.
"""

from enum import Enum
from typing import Any, Optional

from pydantic import Field

from models.base import BaseSchema


class LabelMode(str, Enum):
    """Label document variants."""
    PREVIEW = "preview"  # on-screen preview with printing instructions
    PRINT = "print"      # labels only, opens the print dialog


class ExcelExportRequest(BaseSchema):
    """
    Rows to export as a spreadsheet.

    Rows are either catalog records (liquor_code, brand_name, ...) or
    scanned-item export rows ("Liquor Code", "ADA Number", ...).
    """

    records: list[dict[str, Any]] = Field(..., description="Rows to export")
    filename: Optional[str] = Field(None, max_length=255)
