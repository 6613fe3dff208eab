"""
Custom name API routes.

UPC -> label name mappings used by the POS label export.
"""

import structlog
from fastapi import APIRouter, File, Query, UploadFile
from fastapi.responses import JSONResponse

from exceptions import AppError
from models.custom_name import CustomNameListResponse, CustomNameUploadResponse
from services.custom_name_service import get_custom_name_service

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

@router.post("/upload", response_model=CustomNameUploadResponse)
def upload_custom_names(
    file: UploadFile = File(...),
    replace: bool = Query(True, description="Discard existing mappings first"),
):
    """
    Import mappings from a CSV or Excel file.

    Uses the columns named like "UPC" and "Name" when present, otherwise the
    first two columns. Rows missing either value are skipped and reported.
    """
    try:
        content = file.file.read()

        service = get_custom_name_service()
        return service.upload_file(content, filename=file.filename, replace=replace)

    except Exception as e:
        return handle_error(e)


@router.get("", response_model=CustomNameListResponse)
async def list_custom_names():
    """All stored mappings."""
    try:
        mappings = get_custom_name_service().all()
        return CustomNameListResponse(data=mappings, total=len(mappings))

    except Exception as e:
        return handle_error(e)


@router.delete("")
async def clear_custom_names():
    """Remove all mappings."""
    try:
        removed = get_custom_name_service().clear()
        return {"success": True, "removed": removed}

    except Exception as e:
        return handle_error(e)
