"""
Scan session API routes.

Sessions and the items scanned into them.
"""

import structlog
from fastapi import APIRouter
from fastapi.responses import JSONResponse

from exceptions import AppError, ScannedItemNotFoundError, SessionNotFoundError
from models.session import (
    ScanSession,
    ScanSessionCreate,
    ScanSessionListResponse,
    ScanSessionUpdate,
    ScannedItemListResponse,
    ScannedItemPriceUpdate,
)
from services.session_service import get_session_service, validate_price

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
# SESSIONS
# ===================

@router.get("", response_model=ScanSessionListResponse)
async def list_sessions():
    """All sessions, most recently updated first."""
    try:
        service = get_session_service()
        active = service.get_active_session()
        sessions = service.list_sessions()

        return ScanSessionListResponse(
            data=sessions,
            total=len(sessions),
            active_session_id=active.id,
        )

    except Exception as e:
        return handle_error(e)


@router.post("", response_model=ScanSession, status_code=201)
async def create_session(data: ScanSessionCreate):
    """Create a session. The new session becomes the active one."""
    try:
        return get_session_service().create_session(data.name)

    except Exception as e:
        return handle_error(e)


@router.get("/active", response_model=ScanSession)
async def get_active_session():
    """The active session (created on first use)."""
    try:
        return get_session_service().get_active_session()

    except Exception as e:
        return handle_error(e)


@router.get("/{session_id}", response_model=ScanSession)
async def get_session(session_id: str):
    """Get a session by ID."""
    try:
        return get_session_service().get_session(session_id)

    except Exception as e:
        return handle_error(e)


@router.post("/{session_id}/activate", response_model=ScanSession)
async def activate_session(session_id: str):
    """Make a session the active one."""
    try:
        return get_session_service().activate_session(session_id)

    except Exception as e:
        return handle_error(e)


@router.patch("/{session_id}", response_model=ScanSession)
async def rename_session(session_id: str, data: ScanSessionUpdate):
    """Rename a session."""
    try:
        return get_session_service().rename_session(session_id, data.name)

    except Exception as e:
        return handle_error(e)


@router.delete("/{session_id}", status_code=204)
async def delete_session(session_id: str):
    """
    Delete a session and its items.

    Deleting the active session activates another one (or a new one).
    """
    try:
        if not get_session_service().delete_session(session_id):
            raise SessionNotFoundError(session_id)
        return None

    except Exception as e:
        return handle_error(e)


# ===================
# SCANNED ITEMS
# ===================

@router.get("/{session_id}/items", response_model=ScannedItemListResponse)
async def list_session_items(session_id: str):
    """
    Items of a session, joined with the current catalog.

    Items whose product is no longer in the catalog have product null.
    """
    try:
        service = get_session_service()
        if not service.session_exists(session_id):
            raise SessionNotFoundError(session_id)

        items = service.list_scanned_items_with_products(session_id)

        return ScannedItemListResponse(
            session_id=session_id,
            items=items,
            total_count=len(items),
        )

    except Exception as e:
        return handle_error(e)


@router.delete("/{session_id}/items")
async def clear_session_items(session_id: str):
    """Remove all items from a session."""
    try:
        service = get_session_service()
        if not service.session_exists(session_id):
            raise SessionNotFoundError(session_id)

        removed = service.clear_scanned_items(session_id)

        return {"success": True, "session_id": session_id, "removed": removed}

    except Exception as e:
        return handle_error(e)


@router.delete("/items/{item_id}", status_code=204)
async def delete_scanned_item(item_id: str):
    """Delete one scanned item."""
    try:
        if not get_session_service().delete_scanned_item(item_id):
            raise ScannedItemNotFoundError(item_id)
        return None

    except Exception as e:
        return handle_error(e)


@router.patch("/items/{item_id}/price")
async def update_scanned_item_price(item_id: str, data: ScannedItemPriceUpdate):
    """
    Override the shelf price of one scanned item.

    Only this item changes; the catalog record and other items scanned from
    it keep their price.
    """
    try:
        price = validate_price(data.price)

        service = get_session_service()
        if not service.update_scanned_item_price(item_id, price):
            raise ScannedItemNotFoundError(item_id)

        return {"success": True, "item_id": item_id, "price": price}

    except Exception as e:
        return handle_error(e)
