"""
Price book API routes.

Loading the catalog (upload, posted text, state website), catalog status,
browsing and search.
"""

from typing import Optional

import structlog
from fastapi import APIRouter, File, Query, UploadFile
from fastapi.responses import JSONResponse

from config import settings
from exceptions import AppError
from models.liquor import (
    CatalogStatus,
    LiquorRecordListResponse,
    LiquorSearchResponse,
    PriceBookContentRequest,
    PriceBookLoadResponse,
)
from services.catalog_service import get_catalog_service
from services.price_book_service import get_price_book_service

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
# LOADING
# ===================

@router.post("/upload", response_model=PriceBookLoadResponse)
def upload_price_book(file: UploadFile = File(...)):
    """
    Load the price book from an uploaded fixed-width text file.

    Replaces the whole catalog. A file with no records is rejected with 422
    EMPTY_INPUT instead of being loaded as an empty catalog, so a blank or
    truncated upload never wipes the records already being scanned against.

    Declared sync: parsing a large file runs in the threadpool, not on the
    event loop.
    """
    try:
        content = file.file.read()

        service = get_price_book_service()
        return service.load_bytes(content, filename=file.filename)

    except Exception as e:
        return handle_error(e)


@router.post("/content", response_model=PriceBookLoadResponse)
def load_price_book_content(data: PriceBookContentRequest):
    """
    Load the price book from text posted in the request body.

    Same rules as /upload: text with no records is rejected with 422 and the
    current catalog is kept.
    """
    try:
        service = get_price_book_service()
        return service.load_content(data.content, source=data.filename)

    except Exception as e:
        return handle_error(e)


@router.post("/fetch", response_model=PriceBookLoadResponse)
def fetch_price_book(
    url: Optional[str] = Query(None, description="Override the configured price book URL"),
):
    """
    Download the current price book from the state website and load it.

    Returns 503 when the website cannot be reached or answers with an error;
    the current catalog is kept.

    Declared sync: the download blocks for up to fetch_timeout_seconds and
    must not hold up other requests.
    """
    try:
        service = get_price_book_service()
        return service.fetch_and_load(url=url)

    except Exception as e:
        return handle_error(e)


# ===================
# CATALOG
# ===================

@router.get("/status", response_model=CatalogStatus)
async def get_catalog_status():
    """Number of loaded records, when and from where."""
    try:
        return get_catalog_service().status()

    except Exception as e:
        return handle_error(e)


@router.get("/records", response_model=LiquorRecordListResponse)
async def list_records(
    page: int = Query(1, ge=1, description="Page number"),
    page_size: int = Query(50, ge=1, le=500, description="Items per page"),
):
    """Browse catalog records in price book order."""
    try:
        records = get_catalog_service().all()
        total = len(records)
        start = (page - 1) * page_size

        return LiquorRecordListResponse(
            data=records[start:start + page_size],
            total=total,
            page=page,
            page_size=page_size,
            total_pages=(total + page_size - 1) // page_size,
        )

    except Exception as e:
        return handle_error(e)


@router.get("/search", response_model=LiquorSearchResponse)
async def search_records(
    q: str = Query("", description="Liquor code, brand, vendor or UPC"),
    limit: Optional[int] = Query(None, ge=1, le=100, description="Maximum results"),
):
    """
    Search the catalog.

    Queries shorter than the minimum length return no results.
    """
    try:
        query = q.strip()
        if len(query) < settings.search_min_query_length:
            return LiquorSearchResponse(
                results=[],
                total_found=0,
                message=f"Enter at least {settings.search_min_query_length} characters",
            )

        results, total = get_catalog_service().search(
            query,
            limit=limit or settings.search_result_limit,
        )

        return LiquorSearchResponse(
            results=results,
            total_found=total,
            message=None if total else "No products found",
        )

    except Exception as e:
        return handle_error(e)
