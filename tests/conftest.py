"""
Shared test fixtures.

Every fixture builds fresh services on a fresh in-memory Database, so tests
never share catalog or session state.
"""

import sys
from pathlib import Path

# Add project directory to Python path
project_dir = Path(__file__).parent.parent
sys.path.insert(0, str(project_dir))

import pytest
from unittest.mock import MagicMock, patch
from typing import Generator

from config.database import Database, reset_database
from services.catalog_service import CatalogService
from services.custom_name_service import CustomNameService
from services.export_service import ExportService
from services.price_book_service import PriceBookService
from services.scan_service import ScanService
from services.session_service import SessionService
from tests.factories import LiquorRecordFactory


# ===================
# SERVICES
# ===================

@pytest.fixture
def database() -> Database:
    """Empty in-memory database."""
    return Database()


@pytest.fixture
def catalog() -> CatalogService:
    """Empty catalog."""
    return CatalogService()


@pytest.fixture
def session_service(database, catalog) -> SessionService:
    return SessionService(db=database, catalog=catalog)


@pytest.fixture
def scan_service(catalog, session_service) -> ScanService:
    return ScanService(catalog=catalog, sessions=session_service)


@pytest.fixture
def custom_name_service(database) -> CustomNameService:
    return CustomNameService(db=database)


@pytest.fixture
def export_service() -> ExportService:
    return ExportService()


@pytest.fixture
def mock_http() -> MagicMock:
    """
    Stand-in for requests.Session.

    Usage:
        def test_fetch(mock_http, price_book_service):
            mock_http.get.return_value = make_response(200, b"...")
    """
    return MagicMock()


@pytest.fixture
def price_book_service(catalog, mock_http) -> PriceBookService:
    return PriceBookService(catalog=catalog, http=mock_http)


# ===================
# SAMPLE DATA
# ===================

@pytest.fixture
def sample_records() -> list:
    """Three catalog records with known UPCs and prices."""
    return [
        LiquorRecordFactory.create(
            liquor_code="00123",
            brand_name="JIM BEAM",
            vendor_name="BEAM SUNTORY",
            bottle_size="750 ML",
            shelf_price=19.99,
            upc_code_1="00080686001409",
            upc_code_2="",
        ),
        LiquorRecordFactory.create(
            liquor_code="04567",
            brand_name="MAKER'S MARK",
            vendor_name="BEAM SUNTORY",
            bottle_size="1.75 L",
            shelf_price=54.99,
            upc_code_1="00085246139431",
            upc_code_2="00085246500019",
        ),
        LiquorRecordFactory.create(
            liquor_code="08901",
            brand_name="TITO'S HANDMADE VODKA",
            vendor_name="FIFTH GENERATION",
            bottle_size="750 ML",
            shelf_price="N/A",
            upc_code_1="00619947000020",
            upc_code_2="",
        ),
    ]


@pytest.fixture
def loaded_catalog(catalog, sample_records) -> CatalogService:
    """Catalog holding sample_records (with fresh ids)."""
    catalog.replace_all(sample_records, source="test")
    return catalog


# ===================
# API TEST CLIENT
# ===================

@pytest.fixture
def test_client(
    loaded_catalog,
    session_service,
    scan_service,
    custom_name_service,
    export_service,
    price_book_service,
) -> Generator:
    """
    FastAPI test client wired to the fixture services.

    Usage:
        def test_endpoint(test_client):
            response = test_client.get("/api/sessions")
            assert response.status_code == 200
    """
    from fastapi.testclient import TestClient
    from main import app

    reset_database()
    with patch("services.catalog_service._catalog_service", loaded_catalog), \
            patch("services.session_service._session_service", session_service), \
            patch("services.scan_service._scan_service", scan_service), \
            patch("services.custom_name_service._custom_name_service", custom_name_service), \
            patch("services.export_service._export_service", export_service), \
            patch("services.price_book_service._price_book_service", price_book_service):
        yield TestClient(app)
