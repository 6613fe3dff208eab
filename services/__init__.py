"""
Business logic services.

Each service handles one domain area.
"""

from services.catalog_service import CatalogService, CatalogSnapshot, get_catalog_service
from services.price_book_service import PriceBookService, get_price_book_service
from services.session_service import SessionService, get_session_service
from services.scan_service import ScanService, get_scan_service
from services.custom_name_service import CustomNameService, get_custom_name_service
from services.export_service import ExportService, get_export_service

__all__ = [
    "CatalogService",
    "CatalogSnapshot",
    "get_catalog_service",
    "PriceBookService",
    "get_price_book_service",
    "SessionService",
    "get_session_service",
    "ScanService",
    "get_scan_service",
    "CustomNameService",
    "get_custom_name_service",
    "ExportService",
    "get_export_service",
]
