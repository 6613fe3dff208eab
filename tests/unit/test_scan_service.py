"""
Tests for ScanService.
"""

import pytest

from exceptions import InvalidBarcodeError, LiquorRecordNotFoundError, SessionNotFoundError
from services.scan_service import MANUAL_SEARCH_BARCODE
from tests.factories import LiquorRecordFactory


class TestScan:
    """Tests for barcode scans."""

    def test_match_recorded_with_scanned_barcode(self, scan_service, session_service, loaded_catalog):
        session = session_service.create_session()

        result = scan_service.scan("80686001409", session_id=session.id)

        assert result.matched is True
        assert result.matched_product.brand_name == "JIM BEAM"
        assert result.scanned_item.scanned_barcode == "80686001409"
        assert result.scanned_item.liquor_record_id == result.matched_product.id
        assert session_service.get_session(session.id).item_count == 1

    def test_match_without_session_not_recorded(self, scan_service, session_service, loaded_catalog):
        result = scan_service.scan("00080686001409")

        assert result.matched is True
        assert result.scanned_item is None

    def test_unmatched_scans_record_nothing(self, scan_service, session_service, loaded_catalog):
        session = session_service.create_session()

        first = scan_service.scan("999999999", session_id=session.id)
        second = scan_service.scan("999999999", session_id=session.id)

        assert first.matched is False
        assert second.matched is False
        assert first.message == "Product not found in database"
        assert session_service.list_scanned_items(session.id) == []

    def test_blank_barcode(self, scan_service, loaded_catalog):
        with pytest.raises(InvalidBarcodeError):
            scan_service.scan("   ")

    def test_match_into_unknown_session(self, scan_service, loaded_catalog):
        with pytest.raises(SessionNotFoundError):
            scan_service.scan("80686001409", session_id="missing")


class TestAddItem:
    """Tests for adding items picked from search."""

    def test_always_records(self, scan_service, session_service, loaded_catalog):
        session = session_service.create_session()
        record = loaded_catalog.search("maker")[0][0]

        result = scan_service.add_item(record.id, session.id)

        assert result.success is True
        assert result.scanned_item.scanned_barcode == "00085246139431"
        assert session_service.get_session(session.id).item_count == 1

    def test_explicit_barcode(self, scan_service, session_service, loaded_catalog):
        session = session_service.create_session()
        record = loaded_catalog.search("maker")[0][0]

        result = scan_service.add_item(record.id, session.id, scanned_barcode="85246500019")

        assert result.scanned_item.scanned_barcode == "85246500019"

    def test_record_without_upc(self, scan_service, session_service, catalog):
        session = session_service.create_session()
        installed = catalog.replace_all([LiquorRecordFactory.create(upc_code_1="", upc_code_2="")])

        result = scan_service.add_item(installed[0].id, session.id)

        assert result.scanned_item.scanned_barcode == MANUAL_SEARCH_BARCODE

    def test_unknown_record(self, scan_service, session_service, loaded_catalog):
        session = session_service.create_session()

        with pytest.raises(LiquorRecordNotFoundError):
            scan_service.add_item("missing", session.id)
