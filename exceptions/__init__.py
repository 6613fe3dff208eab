"""
Custom exceptions module.
"""

from exceptions.errors import (
    # Base exceptions
    AppError,
    NotFoundError,
    ValidationError,
    ExternalServiceError,

    # Sessions
    SessionNotFoundError,
    ScannedItemNotFoundError,
    InvalidPriceError,

    # Catalog
    LiquorRecordNotFoundError,
    InvalidBarcodeError,
    EmptyInputError,
    FileTooLargeError,

    # Ingestion
    UpstreamFetchError,
    CustomNameParseError,

    # Export
    ExportInputError,
)

__all__ = [
    # Base
    "AppError",
    "NotFoundError",
    "ValidationError",
    "ExternalServiceError",

    # Sessions
    "SessionNotFoundError",
    "ScannedItemNotFoundError",
    "InvalidPriceError",

    # Catalog
    "LiquorRecordNotFoundError",
    "InvalidBarcodeError",
    "EmptyInputError",
    "FileTooLargeError",

    # Ingestion
    "UpstreamFetchError",
    "CustomNameParseError",

    # Export
    "ExportInputError",
]
