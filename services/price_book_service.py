"""
Price book ingestion service.

Loads the price book from an upload, from posted text, or from the state
website, parses it completely, and only then replaces the catalog. A failed
download or an empty file leaves the current catalog untouched.
"""

from datetime import datetime
from typing import Optional

import requests
import structlog

from config import settings
from exceptions import FileTooLargeError, UpstreamFetchError
from models.liquor import PriceBookLoadResponse
from parsers.price_book_parser import PriceBookParseResult, parse_price_book
from services.catalog_service import CatalogService, get_catalog_service

logger = structlog.get_logger(__name__)

SOURCE_NAME = "Michigan State Website"


class PriceBookService:
    """Price book ingestion."""

    def __init__(
        self,
        catalog: Optional[CatalogService] = None,
        http: Optional[requests.Session] = None,
    ):
        self.catalog = catalog or get_catalog_service()
        self.http = http or requests.Session()

    def load_content(
        self,
        content: str,
        source: Optional[str] = None,
        allow_empty: bool = False,
    ) -> PriceBookLoadResponse:
        """
        Parse price book text and install it as the catalog.

        Args:
            content: Whole price book as text
            source: Filename or URL, kept as the catalog source
            allow_empty: Install an empty catalog instead of raising

        Returns:
            PriceBookLoadResponse with summary and a preview of the records

        Raises:
            EmptyInputError: If no record was parsed and allow_empty is False
        """
        logger.info("loading_price_book", source=source, length=len(content))

        parsed = parse_price_book(content, raise_on_empty=not allow_empty, source=source)
        installed = self.catalog.replace_all(parsed.records, source=source)

        logger.info(
            "price_book_loaded",
            source=source,
            total_records=parsed.total_records,
        )

        return self._build_response(parsed, installed, source=source)

    def load_bytes(
        self,
        data: bytes,
        filename: Optional[str] = None,
    ) -> PriceBookLoadResponse:
        """
        Load an uploaded price book file.

        Bytes are decoded as UTF-8; undecodable bytes are replaced rather than
        rejected.

        Raises:
            FileTooLargeError: If the upload exceeds max_upload_bytes
            EmptyInputError: If the file holds no records
        """
        if len(data) > settings.max_upload_bytes:
            raise FileTooLargeError(len(data), settings.max_upload_bytes)

        logger.info("price_book_upload_received", filename=filename, size=len(data))

        return self.load_content(data.decode("utf-8", errors="replace"), source=filename)

    def fetch_and_load(
        self,
        url: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> PriceBookLoadResponse:
        """
        Download the price book and install it as the catalog.

        Args:
            url: Price book URL (defaults to settings.price_book_url)
            timeout: Seconds to wait (defaults to settings.fetch_timeout_seconds)

        Returns:
            PriceBookLoadResponse including source, url and fetched_at

        Raises:
            UpstreamFetchError: On timeout, connection failure or non-2xx status
            EmptyInputError: If the download holds no records
        """
        url = url or settings.price_book_url
        timeout = timeout or settings.fetch_timeout_seconds

        logger.info("fetching_price_book", url=url, timeout=timeout)

        try:
            response = self.http.get(url, timeout=timeout)
        except requests.exceptions.Timeout:
            logger.error("price_book_fetch_timeout", url=url, timeout=timeout)
            raise UpstreamFetchError(url, f"Price book source did not respond within {timeout:g} seconds")
        except requests.exceptions.RequestException as e:
            logger.error("price_book_fetch_failed", url=url, error=str(e))
            raise UpstreamFetchError(url, f"Failed to fetch price book: {str(e)}")

        if not response.ok:
            logger.error("price_book_fetch_bad_status", url=url, status=response.status_code)
            raise UpstreamFetchError(
                url,
                f"Price book source returned HTTP {response.status_code}",
                status=response.status_code,
            )

        fetched_at = datetime.utcnow()
        content = response.content.decode(response.encoding or "utf-8", errors="replace")

        logger.info("price_book_downloaded", url=url, length=len(content))

        result = self.load_content(content, source=SOURCE_NAME)
        result.url = url
        result.fetched_at = fetched_at
        return result

    @staticmethod
    def _build_response(
        parsed: PriceBookParseResult,
        installed: list,
        source: Optional[str],
    ) -> PriceBookLoadResponse:
        return PriceBookLoadResponse(
            success=True,
            total_records=parsed.total_records,
            unique_brands=parsed.unique_brands,
            unique_vendors=parsed.unique_vendors,
            avg_price=parsed.avg_shelf_price,
            records=installed[:settings.preview_record_limit],
            source=source,
        )


# Singleton instance
_price_book_service: Optional[PriceBookService] = None


def get_price_book_service() -> PriceBookService:
    """Get or create PriceBookService instance."""
    global _price_book_service
    if _price_book_service is None:
        _price_book_service = PriceBookService()
    return _price_book_service
