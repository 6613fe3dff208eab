"""
API route modules.

Each module defines routes for one domain area.
"""

from routes.price_book import router as price_book_router
from routes.scan import router as scan_router
from routes.sessions import router as sessions_router
from routes.custom_names import router as custom_names_router
from routes.export import router as export_router

__all__ = [
    "price_book_router",
    "scan_router",
    "sessions_router",
    "custom_names_router",
    "export_router",
]
