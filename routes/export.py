"""
Export API routes.

Spreadsheet, POS label CSV and printable shelf label downloads.
"""

from datetime import date

import structlog
from fastapi import APIRouter, Query
from fastapi.responses import HTMLResponse, JSONResponse, Response

from exceptions import AppError, SessionNotFoundError
from models.export import ExcelExportRequest, LabelMode
from services.custom_name_service import get_custom_name_service
from services.export_service import build_session_export_rows, get_export_service
from services.session_service import get_session_service

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/export", tags=["Export"])

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


# ===================
# EXCEPTION HANDLER
# ===================

def handle_error(e: Exception) -> JSONResponse:
    """Convert exception to JSON response."""
    if isinstance(e, AppError):
        return JSONResponse(status_code=e.status_code, content=e.to_dict())
    logger.error("unexpected_error", error=str(e), type=type(e).__name__)
    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred",
            }
        },
    )


def _attachment(filename: str) -> dict:
    return {"Content-Disposition": f'attachment; filename="{filename}"'}


def _session_items(session_id: str):
    service = get_session_service()
    if not service.session_exists(session_id):
        raise SessionNotFoundError(session_id)
    return service.list_scanned_items_with_products(session_id)


# ===================
# ROUTES
# ===================

@router.post("/excel")
async def export_excel(request: ExcelExportRequest):
    """
    Download rows as an Excel workbook.

    Accepts catalog records or scanned item export rows; the column set and
    sheet name follow the row shape.
    """
    try:
        export = get_export_service().generate_excel(request.records, filename=request.filename)

        return Response(
            content=export.content.getvalue(),
            media_type=XLSX_MEDIA_TYPE,
            headers=_attachment(export.filename),
        )

    except Exception as e:
        return handle_error(e)


@router.get("/sessions/{session_id}/rows")
async def session_export_rows(session_id: str):
    """Scanned items of a session in export row form."""
    try:
        rows = build_session_export_rows(_session_items(session_id))
        return {"success": True, "session_id": session_id, "records": rows, "total": len(rows)}

    except Exception as e:
        return handle_error(e)


@router.get("/sessions/{session_id}/excel")
async def export_session_excel(session_id: str):
    """Download the scanned items of a session as an Excel workbook."""
    try:
        rows = build_session_export_rows(_session_items(session_id))
        export = get_export_service().generate_excel(rows)

        return Response(
            content=export.content.getvalue(),
            media_type=XLSX_MEDIA_TYPE,
            headers=_attachment(export.filename),
        )

    except Exception as e:
        return handle_error(e)


@router.get("/sessions/{session_id}/pos-csv")
async def export_session_pos_csv(
    session_id: str,
    custom_names: bool = Query(False, description="Use uploaded custom names for descriptions"),
):
    """Download the POS label import CSV for a session."""
    try:
        items = _session_items(session_id)
        resolver = get_custom_name_service().lookup_first if custom_names else None

        content = get_export_service().generate_pos_csv(items, name_resolver=resolver)
        filename = f"pos_labels_{date.today().isoformat()}.csv"

        return Response(
            content=content,
            media_type="text/csv",
            headers=_attachment(filename),
        )

    except Exception as e:
        return handle_error(e)


@router.get("/sessions/{session_id}/labels", response_class=HTMLResponse)
async def export_session_labels(
    session_id: str,
    mode: LabelMode = Query(LabelMode.PREVIEW, description="preview or print"),
):
    """Printable shelf labels for a session, one per scanned item."""
    try:
        content = get_export_service().generate_label_html(_session_items(session_id), mode=mode)
        return HTMLResponse(content=content)

    except Exception as e:
        return handle_error(e)
