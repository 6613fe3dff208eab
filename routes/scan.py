"""
Barcode scan API routes.
"""

import structlog
from fastapi import APIRouter
from fastapi.responses import JSONResponse

from exceptions import AppError
from models.scan import AddItemRequest, AddItemResult, ScanRequest, ScanResult
from services.scan_service import get_scan_service

logger = structlog.get_logger(__name__)

router = APIRouter()


# ===================
# EXCEPTION HANDLER
# ===================

def handle_error(e: Exception) -> JSONResponse:
    """Convert exception to JSON response."""
    if isinstance(e, AppError):
        return JSONResponse(
            status_code=e.status_code,
            content=e.to_dict()
        )
    # Unexpected error
    logger.error("unexpected_error", error=str(e), type=type(e).__name__)
    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred"
            }
        }
    )


# ===================
# ROUTES
# ===================

@router.post("", response_model=ScanResult)
async def scan_barcode(data: ScanRequest):
    """
    Resolve a scanned barcode.

    An unknown barcode is not an error: the response has matched=false and
    nothing is recorded. A match is recorded in session_id when given.
    """
    try:
        service = get_scan_service()
        return service.scan(data.barcode, session_id=data.session_id)

    except Exception as e:
        return handle_error(e)


@router.post("/add-item", response_model=AddItemResult, status_code=201)
async def add_item(data: AddItemRequest):
    """Record a product picked from search results."""
    try:
        service = get_scan_service()
        return service.add_item(
            liquor_record_id=data.liquor_record_id,
            session_id=data.session_id,
            scanned_barcode=data.scanned_barcode,
        )

    except Exception as e:
        return handle_error(e)
