"""
Tests for export_service: spreadsheets, POS label CSV and shelf labels.
"""

import csv
from datetime import date, datetime
from io import BytesIO, StringIO

import pytest
from openpyxl import load_workbook

from exceptions import ExportInputError
from models.export import LabelMode
from models.session import ScannedItemWithProduct
from services.export_service import (
    CATALOG_COLUMNS,
    POS_COLUMNS,
    SESSION_COLUMNS,
    build_session_export_rows,
    is_session_export,
    label_name,
    render_barcode_svg,
)
from tests.factories import LiquorRecordFactory


def make_item(product=None, barcode: str = "80686001409") -> ScannedItemWithProduct:
    return ScannedItemWithProduct(
        id="item-1",
        session_id="session-1",
        liquor_record_id=product.id if product else "gone",
        scanned_barcode=barcode,
        scanned_at=datetime(2024, 6, 1, 12, 0),
        quantity=1,
        product=product,
    )


def read_csv(text: str) -> list[dict]:
    return list(csv.DictReader(StringIO(text)))


class TestHelpers:
    """Tests for module-level helpers."""

    def test_label_name_strips_size_spaces(self):
        assert label_name("Jack Daniel's", "750 ML") == "Jack Daniel's 750ML"

    def test_label_name_without_size(self):
        assert label_name("Jack Daniel's", "") == "Jack Daniel's"

    def test_shape_detection(self):
        assert is_session_export([{"ADA Number": "221"}]) is True
        assert is_session_export([{"ada_number": "221"}]) is False
        assert is_session_export([]) is False

    def test_session_rows_use_scanned_barcode(self):
        product = LiquorRecordFactory.create(upc_code_1="00080686001409", shelf_price=19.99)

        rows = build_session_export_rows([make_item(product, barcode="80686001409"), make_item(None)])

        assert len(rows) == 1
        assert rows[0]["UPC Code 1"] == "80686001409"
        assert rows[0]["Shelf Price"] == 19.99
        assert list(rows[0]) == [key for _, key in SESSION_COLUMNS]

    def test_barcode_svg(self):
        uri = render_barcode_svg("80686001409")

        assert uri.startswith("data:image/svg+xml;base64,")

    def test_barcode_svg_empty(self):
        assert render_barcode_svg("") is None


class TestGenerateExcel:
    """Tests for workbook generation."""

    def test_catalog_shape(self, export_service):
        record = LiquorRecordFactory.create(liquor_code="00123", shelf_price=19.99)

        export = export_service.generate_excel([record.model_dump()])

        wb = load_workbook(BytesIO(export.content.getvalue()))
        ws = wb["Liquor Data"]
        assert export.filename == "liquor_data.xlsx"
        assert [c.value for c in ws[1]] == [header for header, _ in CATALOG_COLUMNS]
        assert ws["A2"].value == "00123"
        assert ws["K2"].value == 19.99

    def test_session_shape(self, export_service):
        product = LiquorRecordFactory.create(liquor_code="00123", shelf_price="N/A")
        rows = build_session_export_rows([make_item(product, barcode="80686001409")])

        export = export_service.generate_excel(rows)

        wb = load_workbook(BytesIO(export.content.getvalue()))
        ws = wb["Scanned Items"]
        assert export.filename == f"scanned_liquor_{date.today().isoformat()}.xlsx"
        assert [c.value for c in ws[1]] == [header for header, _ in SESSION_COLUMNS]
        assert ws["J2"].value == "N/A"
        assert ws["K2"].value == "80686001409"

    def test_custom_filename(self, export_service):
        export = export_service.generate_excel([{"liquor_code": "1"}], filename="mine.xlsx")

        assert export.filename == "mine.xlsx"

    def test_empty(self, export_service):
        with pytest.raises(ExportInputError):
            export_service.generate_excel([])

    @pytest.mark.parametrize("records", [None, "rows", [1, 2], [{"a": 1}, "b"]])
    def test_malformed(self, export_service, records):
        with pytest.raises(ExportInputError):
            export_service.generate_excel(records)


class TestGeneratePosCsv:
    """Tests for the POS label CSV."""

    def test_row_values(self, export_service):
        product = LiquorRecordFactory.create(
            liquor_code="08234",
            brand_name="Jack Daniel's",
            bottle_size="750 ML",
            shelf_price=24.99,
        )

        text = export_service.generate_pos_csv([make_item(product, barcode="082184090466")])

        rows = read_csv(text)
        assert list(rows[0]) == POS_COLUMNS
        assert rows[0]["UPC"] == "082184090466"
        assert rows[0]["Department"] == "Liquor"
        assert rows[0]["Quantity"] == "1"
        assert rows[0]["Price Cents"] == "2499"
        assert rows[0]["Price"] == "$24.99"
        assert rows[0]["Description"] == "Jack Daniel's 750ML"
        assert rows[0]["Item Code"] == "8234"
        assert rows[0]["Age Restricted"] == "Y"
        assert rows[0]["Sale Price"] == ""

    def test_twenty_eight_columns(self, export_service):
        text = export_service.generate_pos_csv([make_item(LiquorRecordFactory.create())])

        header = next(csv.reader(StringIO(text)))
        assert len(header) == 28

    def test_text_quoted_numbers_not(self, export_service):
        product = LiquorRecordFactory.create(shelf_price=24.99)

        text = export_service.generate_pos_csv([make_item(product, barcode="082184090466")])

        data_line = text.splitlines()[1]
        assert data_line.startswith('"082184090466","Liquor",1,2499,"$24.99"')

    def test_text_price(self, export_service):
        product = LiquorRecordFactory.create(shelf_price="N/A")

        rows = read_csv(export_service.generate_pos_csv([make_item(product)]))

        assert rows[0]["Price Cents"] == "0"
        assert rows[0]["Price"] == "N/A"

    def test_unlinked_items_skipped(self, export_service):
        rows = read_csv(export_service.generate_pos_csv([
            make_item(None),
            make_item(LiquorRecordFactory.create()),
        ]))

        assert len(rows) == 1

    def test_nothing_to_export(self, export_service):
        with pytest.raises(ExportInputError):
            export_service.generate_pos_csv([make_item(None)])

    def test_custom_names(self, export_service, custom_name_service):
        custom_name_service.upload([
            {"upc_code": "00080686001409", "custom_name": "Beam White"},
        ])
        named = LiquorRecordFactory.create(
            brand_name="JIM BEAM", bottle_size="750 ML", upc_code_1="00080686001409",
        )
        unnamed = LiquorRecordFactory.create(brand_name="OTHER", bottle_size="1 L")

        rows = read_csv(export_service.generate_pos_csv(
            [make_item(named, barcode="999"), make_item(unnamed, barcode="888")],
            name_resolver=custom_name_service.lookup_first,
        ))

        # Scanned barcode misses, UPC 1 hits
        assert rows[0]["Description"] == "Beam White 750ML"
        assert rows[1]["Description"] == "OTHER 1L"

    def test_custom_name_scanned_barcode_first(self, export_service, custom_name_service):
        custom_name_service.upload([
            {"upc_code": "111", "custom_name": "By Scan"},
            {"upc_code": "222", "custom_name": "By UPC 1"},
        ])
        product = LiquorRecordFactory.create(upc_code_1="222", bottle_size="")

        rows = read_csv(export_service.generate_pos_csv(
            [make_item(product, barcode="111")],
            name_resolver=custom_name_service.lookup_first,
        ))

        assert rows[0]["Description"] == "By Scan"


class TestGenerateLabelHtml:
    """Tests for printable labels."""

    def test_preview(self, export_service):
        product = LiquorRecordFactory.create(
            liquor_code="08234", brand_name="Jack Daniel's", bottle_size="750 ML", shelf_price=24.99,
        )

        html = export_service.generate_label_html([make_item(product), make_item(None)])

        assert html.count('class="label"') == 1
        assert "Jack Daniel&#x27;s 750ML" in html
        assert "$24.99" in html
        assert "08234" in html
        assert "@page { size: 2.4in 1.2in; margin: 0; }" in html
        assert "Total labels to print: 1" in html
        assert "data:image/svg+xml;base64," in html

    def test_print_mode(self, export_service):
        html = export_service.generate_label_html(
            [make_item(LiquorRecordFactory.create())],
            mode=LabelMode.PRINT,
        )

        assert "print-instructions" not in html
        assert "window.print()" in html

    def test_names_escaped(self, export_service):
        product = LiquorRecordFactory.create(brand_name="<b>BOLD</b>")

        html = export_service.generate_label_html([make_item(product)])

        assert "<b>BOLD</b>" not in html
        assert "&lt;b&gt;BOLD&lt;/b&gt;" in html

    def test_nothing_to_print(self, export_service):
        with pytest.raises(ExportInputError):
            export_service.generate_label_html([make_item(None)])
