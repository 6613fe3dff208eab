"""
Barcode scan service.

Resolves scanned barcodes against the catalog and records matches in a
session. Unmatched scans are reported but not recorded. Items picked from
catalog search are always recorded.
"""

from typing import Optional

import structlog

from exceptions import InvalidBarcodeError, LiquorRecordNotFoundError
from models.scan import AddItemResult, ScanResult
from services.catalog_service import CatalogService, get_catalog_service
from services.session_service import SessionService, get_session_service

logger = structlog.get_logger(__name__)

MANUAL_SEARCH_BARCODE = "manual-search"


class ScanService:
    """Scan matching."""

    def __init__(
        self,
        catalog: Optional[CatalogService] = None,
        sessions: Optional[SessionService] = None,
    ):
        self.catalog = catalog or get_catalog_service()
        self.sessions = sessions or get_session_service()

    def scan(self, barcode: str, session_id: Optional[str] = None) -> ScanResult:
        """
        Look up a barcode and record the match.

        The barcode is stored exactly as given; it is what exports print,
        not the zero-padded catalog UPC.

        Args:
            barcode: Scanned or typed barcode
            session_id: Session to record a match in (nothing recorded if None)

        Returns:
            ScanResult (matched False when the barcode is unknown)

        Raises:
            InvalidBarcodeError: If the barcode is blank
            SessionNotFoundError: If a match is to be recorded in an unknown session
        """
        if not barcode or not barcode.strip():
            raise InvalidBarcodeError()

        product = self.catalog.find_by_barcode(barcode)

        if product is None:
            logger.info(
                "barcode_not_found",
                barcode=barcode,
                catalog_records=self.catalog.count(),
            )
            return ScanResult(
                matched=False,
                barcode=barcode,
                message="Product not found in database",
            )

        scanned_item = None
        if session_id:
            scanned_item = self.sessions.add_scanned_item(
                session_id=session_id,
                scanned_barcode=barcode,
                liquor_record_id=product.id,
                quantity=1,
            )

        logger.info(
            "barcode_matched",
            barcode=barcode,
            liquor_code=product.liquor_code,
            brand_name=product.brand_name,
            recorded=scanned_item is not None,
        )

        return ScanResult(
            matched=True,
            barcode=barcode,
            matched_product=product,
            scanned_item=scanned_item,
        )

    def add_item(
        self,
        liquor_record_id: str,
        session_id: str,
        scanned_barcode: Optional[str] = None,
    ) -> AddItemResult:
        """
        Record a catalog record picked from search results.

        The barcode defaults to the record's UPC 1, then "manual-search".

        Raises:
            LiquorRecordNotFoundError: If the record is not in the catalog
            SessionNotFoundError: If the session does not exist
        """
        record = self.catalog.get_by_id(liquor_record_id)
        if record is None:
            raise LiquorRecordNotFoundError(liquor_record_id)

        barcode = scanned_barcode or record.upc_code_1 or MANUAL_SEARCH_BARCODE

        item = self.sessions.add_scanned_item(
            session_id=session_id,
            scanned_barcode=barcode,
            liquor_record_id=record.id,
            quantity=1,
        )

        logger.info(
            "item_added_from_search",
            session_id=session_id,
            liquor_record_id=record.id,
            scanned_barcode=barcode,
        )

        return AddItemResult(
            message="Item added successfully",
            liquor_record=record,
            scanned_item=item,
        )


# Singleton instance
_scan_service: Optional[ScanService] = None


def get_scan_service() -> ScanService:
    """Get or create ScanService instance."""
    global _scan_service
    if _scan_service is None:
        _scan_service = ScanService()
    return _scan_service
