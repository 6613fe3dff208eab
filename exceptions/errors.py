"""
Custom exception classes for the application.

Every error carries a machine-readable code, a human-readable message, the
HTTP status it maps to, and optional details.
"""

from typing import Optional, Any
from datetime import datetime


class AppError(Exception):
    """
    Base exception for all application errors.

    All custom exceptions inherit from this.

    Attributes:
        code: Error code (e.g., "SESSION_NOT_FOUND")
        message: Human-readable message
        status_code: HTTP status code
        details: Additional context
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: Optional[dict[str, Any]] = None
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.timestamp = datetime.utcnow().isoformat()
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert to API response format."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
                "timestamp": self.timestamp
            }
        }


class NotFoundError(AppError):
    """Resource not found (404)."""

    def __init__(
        self,
        resource: str,
        identifier: str,
        code: Optional[str] = None
    ):
        super().__init__(
            code=code or f"{resource.upper().replace(' ', '_')}_NOT_FOUND",
            message=f"{resource} not found",
            status_code=404,
            details={"id": identifier}
        )


class ValidationError(AppError):
    """Validation failed (422)."""

    def __init__(
        self,
        message: str,
        code: str = "VALIDATION_ERROR",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=422,
            details=details
        )


class ExternalServiceError(AppError):
    """External service failure (503)."""

    def __init__(
        self,
        service: str,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code=f"{service.upper()}_ERROR",
            message=message,
            status_code=503,
            details={"service": service, **(details or {})}
        )


# ===================
# SESSION ERRORS
# ===================

class SessionNotFoundError(NotFoundError):
    """Scan session not found."""

    def __init__(self, session_id: str):
        super().__init__(
            resource="Session",
            identifier=session_id,
            code="SESSION_NOT_FOUND"
        )


class ScannedItemNotFoundError(NotFoundError):
    """Scanned item not found."""

    def __init__(self, item_id: str):
        super().__init__(
            resource="Scanned item",
            identifier=item_id,
            code="SCANNED_ITEM_NOT_FOUND"
        )


class InvalidPriceError(ValidationError):
    """Price edit rejected."""

    def __init__(self, price: Any):
        super().__init__(
            code="INVALID_PRICE",
            message="Price must be a non-negative number",
            details={"provided": str(price)}
        )


# ===================
# CATALOG ERRORS
# ===================

class LiquorRecordNotFoundError(NotFoundError):
    """Catalog record not found."""

    def __init__(self, record_id: str):
        super().__init__(
            resource="Liquor record",
            identifier=record_id,
            code="LIQUOR_RECORD_NOT_FOUND"
        )


class InvalidBarcodeError(ValidationError):
    """Barcode missing or blank."""

    def __init__(self):
        super().__init__(
            code="INVALID_BARCODE",
            message="No barcode provided"
        )


class EmptyInputError(ValidationError):
    """Price book input produced no records."""

    def __init__(self, source: Optional[str] = None):
        super().__init__(
            code="EMPTY_INPUT",
            message="No records found in price book input",
            details={"source": source} if source else None
        )


class FileTooLargeError(ValidationError):
    """Upload exceeds the configured size limit."""

    def __init__(self, size: int, limit: int):
        super().__init__(
            code="FILE_TOO_LARGE",
            message=f"File is larger than {limit} bytes",
            details={"size": size, "limit": limit}
        )


# ===================
# INGESTION ERRORS
# ===================

class UpstreamFetchError(ExternalServiceError):
    """Price book download failed."""

    def __init__(
        self,
        url: str,
        message: str,
        status: Optional[int] = None
    ):
        super().__init__(
            service="price_book_source",
            message=message,
            details={"url": url, "status": status}
        )


class CustomNameParseError(ValidationError):
    """Custom name mapping file could not be read."""

    def __init__(
        self,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code="CUSTOM_NAME_PARSE_ERROR",
            message=message,
            details=details
        )


# ===================
# EXPORT ERRORS
# ===================

class ExportInputError(AppError):
    """Export requested with nothing (or nothing usable) to export (400)."""

    def __init__(
        self,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code="EXPORT_INPUT_ERROR",
            message=message,
            status_code=400,
            details=details
        )
