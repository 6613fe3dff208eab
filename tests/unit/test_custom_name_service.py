"""
Tests for CustomNameService.
"""

from unittest.mock import patch

import pytest

from exceptions import FileTooLargeError, ValidationError
from models.custom_name import CustomNameMappingCreate


class TestUpload:
    """Tests for storing mappings."""

    def test_replace(self, custom_name_service):
        custom_name_service.upload([{"upc_code": "111", "custom_name": "Old"}])

        count = custom_name_service.upload([
            CustomNameMappingCreate(upc_code="222", custom_name="New"),
        ])

        assert count == 1
        assert [m.upc_code for m in custom_name_service.all()] == ["222"]

    def test_add(self, custom_name_service):
        custom_name_service.upload([{"upc_code": "111", "custom_name": "Old"}])

        custom_name_service.upload([{"upc_code": "222", "custom_name": "New"}], replace=False)

        assert custom_name_service.count() == 2

    def test_clear(self, custom_name_service):
        custom_name_service.upload([{"upc_code": "111", "custom_name": "A"}])

        assert custom_name_service.clear() == 1
        assert custom_name_service.count() == 0

    def test_upload_file(self, custom_name_service):
        data = b"UPC,Name\n00080686001409,Beam White\n,\n555,\n"

        result = custom_name_service.upload_file(data, filename="names.csv")

        assert result.imported == 1
        assert result.total == 1
        assert result.replaced is True
        assert result.skipped_rows[0].reason == "Missing custom name"

    def test_upload_file_too_large(self, custom_name_service):
        with patch("services.custom_name_service.settings") as mock_settings:
            mock_settings.max_upload_bytes = 4

            with pytest.raises(FileTooLargeError):
                custom_name_service.upload_file(b"UPC,Name\n", filename="names.csv")

    def test_invalid_mapping_rejected(self, custom_name_service):
        custom_name_service.upload([{"upc_code": "111", "custom_name": "Keep"}])

        with pytest.raises(ValidationError) as exc_info:
            custom_name_service.upload([
                {"upc_code": "222", "custom_name": "Fine"},
                {"upc_code": "9" * 40, "custom_name": "Too long"},
            ])

        assert exc_info.value.status_code == 422
        assert exc_info.value.details["index"] == 1
        assert exc_info.value.details["errors"][0]["field"] == "upc_code"
        # Nothing from the rejected upload is stored
        assert [m.upc_code for m in custom_name_service.all()] == ["111"]

    def test_upload_file_keeps_valid_rows(self, custom_name_service):
        data = b"UPC,Name\n111,One\n222," + b"X" * 250 + b"\n"

        result = custom_name_service.upload_file(data, filename="names.csv")

        assert result.imported == 1
        assert result.skipped_rows[0].row == 3


class TestLookup:
    """Tests for UPC lookups."""

    def test_exact(self, custom_name_service):
        custom_name_service.upload([{"upc_code": "00080686001409", "custom_name": "Beam White"}])

        assert custom_name_service.lookup("00080686001409") == "Beam White"

    def test_unpadded(self, custom_name_service):
        custom_name_service.upload([{"upc_code": "00080686001409", "custom_name": "Beam White"}])

        assert custom_name_service.lookup("80686001409") == "Beam White"

    def test_missing(self, custom_name_service):
        assert custom_name_service.lookup("123") is None
        assert custom_name_service.lookup("") is None

    def test_first_in_order(self, custom_name_service):
        custom_name_service.upload([
            {"upc_code": "222", "custom_name": "By UPC 1"},
            {"upc_code": "333", "custom_name": "By UPC 2"},
        ])

        assert custom_name_service.lookup_first(["111", "222", "333"]) == "By UPC 1"
        assert custom_name_service.lookup_first(["111", "", "333"]) == "By UPC 2"
        assert custom_name_service.lookup_first(["111", None]) is None
