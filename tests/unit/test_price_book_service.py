"""
Tests for PriceBookService ingestion.
"""

from unittest.mock import MagicMock, patch

import pytest
import requests

from exceptions import EmptyInputError, FileTooLargeError, UpstreamFetchError
from services.price_book_service import SOURCE_NAME
from tests.factories import PriceBookLineFactory


def make_response(status_code: int, content: bytes = b"") -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    response.ok = 200 <= status_code < 300
    response.content = content
    response.encoding = "utf-8"
    return response


class TestLoadContent:
    """Tests for loading text."""

    def test_installs_catalog(self, price_book_service, catalog):
        content = PriceBookLineFactory.create_content(3, shelf_price="$10.00")

        result = price_book_service.load_content(content, source="book.txt")

        assert result.success is True
        assert result.total_records == 3
        assert result.avg_price == 10.0
        assert result.source == "book.txt"
        assert catalog.count() == 3
        assert [r.id for r in result.records] == [r.id for r in catalog.all()]

    def test_preview_is_limited(self, price_book_service):
        content = PriceBookLineFactory.create_content(5)

        with patch("services.price_book_service.settings") as mock_settings:
            mock_settings.preview_record_limit = 2
            result = price_book_service.load_content(content)

        assert result.total_records == 5
        assert len(result.records) == 2

    def test_empty_content_keeps_current_catalog(self, price_book_service, loaded_catalog):
        with pytest.raises(EmptyInputError):
            price_book_service.load_content("\n\n")

        assert loaded_catalog.count() == 3

    def test_empty_content_allowed(self, price_book_service, loaded_catalog):
        result = price_book_service.load_content("", allow_empty=True)

        assert result.total_records == 0
        assert loaded_catalog.count() == 0


class TestLoadBytes:
    """Tests for file uploads."""

    def test_decodes_utf8(self, price_book_service, catalog):
        data = PriceBookLineFactory.create_content(1, brand_name="CAFÉ RON").encode("utf-8")

        price_book_service.load_bytes(data, filename="book.txt")

        assert catalog.all()[0].brand_name == "CAFÉ RON"

    def test_invalid_bytes_replaced(self, price_book_service, catalog):
        data = PriceBookLineFactory.create_content(1).encode("utf-8") + b"\xff\xfe\n"

        result = price_book_service.load_bytes(data)

        assert result.total_records == 2

    def test_too_large(self, price_book_service, loaded_catalog):
        with patch("services.price_book_service.settings") as mock_settings:
            mock_settings.max_upload_bytes = 10

            with pytest.raises(FileTooLargeError):
                price_book_service.load_bytes(b"x" * 11)

        assert loaded_catalog.count() == 3


class TestFetchAndLoad:
    """Tests for downloading from the state website."""

    def test_success(self, price_book_service, mock_http, catalog):
        content = PriceBookLineFactory.create_content(2).encode("utf-8")
        mock_http.get.return_value = make_response(200, content)

        result = price_book_service.fetch_and_load(url="https://example.test/book.txt", timeout=5)

        mock_http.get.assert_called_once_with("https://example.test/book.txt", timeout=5)
        assert result.total_records == 2
        assert result.source == SOURCE_NAME
        assert result.url == "https://example.test/book.txt"
        assert result.fetched_at is not None
        assert catalog.count() == 2

    def test_bad_status_keeps_catalog(self, price_book_service, mock_http, loaded_catalog):
        mock_http.get.return_value = make_response(404)

        with pytest.raises(UpstreamFetchError) as exc_info:
            price_book_service.fetch_and_load(url="https://example.test/missing.txt")

        assert exc_info.value.status_code == 503
        assert exc_info.value.details["status"] == 404
        assert loaded_catalog.count() == 3

    def test_timeout(self, price_book_service, mock_http, loaded_catalog):
        mock_http.get.side_effect = requests.exceptions.Timeout("slow")

        with pytest.raises(UpstreamFetchError) as exc_info:
            price_book_service.fetch_and_load(url="https://example.test/book.txt", timeout=3)

        assert "3 seconds" in exc_info.value.message
        assert loaded_catalog.count() == 3

    def test_connection_error(self, price_book_service, mock_http, loaded_catalog):
        mock_http.get.side_effect = requests.exceptions.ConnectionError("refused")

        with pytest.raises(UpstreamFetchError):
            price_book_service.fetch_and_load(url="https://example.test/book.txt")

        assert loaded_catalog.count() == 3

    def test_empty_download_keeps_catalog(self, price_book_service, mock_http, loaded_catalog):
        mock_http.get.return_value = make_response(200, b"\n")

        with pytest.raises(EmptyInputError):
            price_book_service.fetch_and_load(url="https://example.test/book.txt")

        assert loaded_catalog.count() == 3

    def test_uses_configured_url(self, price_book_service, mock_http):
        mock_http.get.return_value = make_response(200, PriceBookLineFactory.create_content(1).encode())

        with patch("services.price_book_service.settings") as mock_settings:
            mock_settings.price_book_url = "https://configured.test/book.txt"
            mock_settings.fetch_timeout_seconds = 30
            mock_settings.preview_record_limit = 100
            price_book_service.fetch_and_load()

        mock_http.get.assert_called_once_with("https://configured.test/book.txt", timeout=30)
