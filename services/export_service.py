"""
Export service: spreadsheets, POS label CSV and printable shelf labels.

Turns catalog records or a session's scanned items into downloadable files:
- Excel workbook of catalog records or scanned items
- CSV in the 28-column layout the POS label printing tool imports
- HTML document of shelf labels sized for a label printer
"""

import base64
import csv
import html
from dataclasses import dataclass
from datetime import date
from io import BytesIO
from typing import Any, Callable, Iterable, Optional

import barcode
import pandas as pd
import structlog
from barcode.errors import BarcodeError
from barcode.writer import SVGWriter
from openpyxl import Workbook
from openpyxl.styles import Font, Border, Side, PatternFill

from config import settings
from exceptions import ExportInputError
from models.export import LabelMode
from models.session import ScannedItemWithProduct
from utils.formatting import format_price, price_to_cents, strip_leading_zeros

logger = structlog.get_logger(__name__)

# Catalog rows: (header, record key) in price book field order
CATALOG_COLUMNS = [
    ("LIQUOR CODE", "liquor_code"),
    ("BRAND NAME", "brand_name"),
    ("ADA NUMBER", "ada_number"),
    ("ADA NAME", "ada_name"),
    ("VENDOR NAME", "vendor_name"),
    ("PROOF", "proof"),
    ("BOTTLE SIZE", "bottle_size"),
    ("PACK SIZE", "pack_size"),
    ("ON PREMISE PRICE", "on_premise_price"),
    ("OFF PREMISE PRICE", "off_premise_price"),
    ("SHELF PRICE", "shelf_price"),
    ("UPC CODE 1", "upc_code_1"),
    ("UPC CODE 2", "upc_code_2"),
    ("EFFECTIVE DATE", "effective_date"),
]

# Scanned item rows: (header, row key). "UPC Code 1" holds the scanned barcode.
SESSION_COLUMNS = [
    ("LIQUOR CODE", "Liquor Code"),
    ("ADA NUMBER", "ADA Number"),
    ("ADA NAME", "ADA Name"),
    ("VENDOR NAME", "Vendor Name"),
    ("PROOF", "Proof"),
    ("BOTTLE SIZE", "Bottle Size"),
    ("PACK SIZE", "Pack Size"),
    ("ON PREMISE", "On Premise"),
    ("OFF PREMISE", "Off Premise"),
    ("SHELF PRICE", "Shelf Price"),
    ("UPC CODE 1", "UPC Code 1"),
    ("UPC CODE 2", "UPC Code 2"),
    ("EFFECTIVE DATE", "Effective Date"),
]

# Key only present in scanned item rows
SESSION_SHAPE_KEY = "ADA Number"

CATALOG_SHEET = "Liquor Data"
SESSION_SHEET = "Scanned Items"

# Column layout required by the label printing tool
POS_COLUMNS = [
    "UPC",
    "Department",
    "Quantity",
    "Price Cents",
    "Price",
    "Description",
    "Item Code",
    "Category",
    "Sub Category",
    "Vendor",
    "Vendor Part",
    "Cost",
    "Sale Price",
    "Sale Start",
    "Sale End",
    "Tax Code",
    "Age Restricted",
    "Food Stamp",
    "Discountable",
    "Unit Of Measure",
    "Pack",
    "Case Cost",
    "Location",
    "Shelf",
    "Label Type",
    "Label Copies",
    "Notes",
    "Active",
]

POS_DEPARTMENT = "Liquor"
POS_QUANTITY = 1

# Fixed values; every other placeholder column is left empty
POS_FIXED_VALUES = {
    "Age Restricted": "Y",
    "Food Stamp": "N",
    "Discountable": "Y",
    "Unit Of Measure": "EA",
    "Label Type": "Shelf",
    "Label Copies": "1",
    "Active": "Y",
}

BARCODE_OPTIONS = {
    "module_width": 0.2,
    "module_height": 7.0,
    "quiet_zone": 1.0,
    "font_size": 6,
    "text_distance": 2.5,
}

NameResolver = Callable[[Iterable[Optional[str]]], Optional[str]]


@dataclass
class ExcelExport:
    """Generated workbook and its download metadata."""
    content: BytesIO
    filename: str
    sheet_name: str
    row_count: int


def is_session_export(records: list[dict]) -> bool:
    """True if the rows are scanned item export rows rather than catalog records."""
    return bool(records) and SESSION_SHAPE_KEY in records[0]


def build_session_export_rows(items: Iterable[ScannedItemWithProduct]) -> list[dict]:
    """
    Scanned items -> export rows.

    Items whose product no longer resolves are left out. "UPC Code 1" is the
    barcode that was scanned.
    """
    rows = []
    for item in items:
        product = item.product
        if product is None:
            continue
        rows.append({
            "Liquor Code": product.liquor_code,
            "ADA Number": product.ada_number,
            "ADA Name": product.ada_name,
            "Vendor Name": product.vendor_name,
            "Proof": product.proof,
            "Bottle Size": product.bottle_size,
            "Pack Size": product.pack_size,
            "On Premise": product.on_premise_price,
            "Off Premise": product.off_premise_price,
            "Shelf Price": product.shelf_price,
            "UPC Code 1": item.scanned_barcode,
            "UPC Code 2": product.upc_code_2,
            "Effective Date": product.effective_date,
        })
    return rows


def label_name(brand_name: str, bottle_size: str) -> str:
    """ "Jack Daniel's" + "750 ML" -> "Jack Daniel's 750ML" """
    size = (bottle_size or "").replace(" ", "")
    return f"{brand_name} {size}".strip()


def render_barcode_svg(code: str) -> Optional[str]:
    """
    Code 128 rendering of a barcode as an SVG data URI.

    Returns None when the code cannot be encoded (the label then shows the
    code as text).
    """
    if not code:
        return None
    try:
        code128 = barcode.get_barcode_class("code128")
        buffer = BytesIO()
        code128(code, writer=SVGWriter()).write(buffer, options=BARCODE_OPTIONS)
    except (BarcodeError, KeyError, ValueError) as e:
        logger.warning("barcode_render_failed", code=code, error=str(e))
        return None
    encoded = base64.b64encode(buffer.getvalue()).decode("ascii")
    return f"data:image/svg+xml;base64,{encoded}"


class ExportService:
    """Service for generating export files."""

    # ===================
    # EXCEL
    # ===================

    def generate_excel(
        self,
        records: Any,
        filename: Optional[str] = None,
    ) -> ExcelExport:
        """
        Generate an Excel workbook from catalog records or scanned item rows.

        The row shape is detected from the first row. Catalog records get the
        full price book column set; scanned item rows get the session columns.

        Args:
            records: List of row dicts
            filename: Download filename (defaults by row shape)

        Returns:
            ExcelExport

        Raises:
            ExportInputError: If records is not a non-empty list of dicts
        """
        self._check_rows(records)

        session_shape = is_session_export(records)
        columns = SESSION_COLUMNS if session_shape else CATALOG_COLUMNS
        sheet_name = SESSION_SHEET if session_shape else CATALOG_SHEET

        logger.info(
            "generating_excel",
            rows=len(records),
            shape="scanned_items" if session_shape else "catalog",
        )

        wb = Workbook()
        ws = wb.active
        ws.title = sheet_name

        # Styles
        bold_font = Font(bold=True)
        thin_border = Border(
            bottom=Side(style="thin", color="000000")
        )
        header_fill = PatternFill(start_color="E0E8FF", end_color="E0E8FF", fill_type="solid")

        ws.append([header for header, _ in columns])
        for cell in ws[1]:
            cell.font = bold_font
            cell.border = thin_border
            cell.fill = header_fill

        for record in records:
            ws.append([self._cell_value(record.get(key)) for _, key in columns])

        # Column widths
        for idx, (header, _) in enumerate(columns, start=1):
            letter = ws.cell(row=1, column=idx).column_letter
            ws.column_dimensions[letter].width = max(12, len(header) + 2)
        ws.freeze_panes = "A2"

        if filename is None:
            filename = (
                f"scanned_liquor_{date.today().isoformat()}.xlsx"
                if session_shape
                else "liquor_data.xlsx"
            )

        # Save to BytesIO
        output = BytesIO()
        wb.save(output)
        output.seek(0)

        logger.info(
            "excel_generated",
            rows=len(records),
            sheet=sheet_name,
            size=output.getbuffer().nbytes,
        )

        return ExcelExport(
            content=output,
            filename=filename,
            sheet_name=sheet_name,
            row_count=len(records),
        )

    # ===================
    # POS LABEL CSV
    # ===================

    def generate_pos_csv(
        self,
        items: Iterable[ScannedItemWithProduct],
        name_resolver: Optional[NameResolver] = None,
    ) -> str:
        """
        Generate the POS label CSV for scanned items.

        One row per item with a resolvable product. Text cells are quoted,
        numeric cells are not.

        Args:
            items: Scanned items joined with the catalog
            name_resolver: Custom name lookup; called with (scanned barcode,
                UPC 1, UPC 2) and falls back to the brand name when it
                returns None

        Returns:
            CSV text including the header row

        Raises:
            ExportInputError: If no item has a product
        """
        rows = []
        custom_names_used = 0

        for item in items:
            product = item.product
            if product is None:
                continue

            brand = product.brand_name
            if name_resolver is not None:
                custom = name_resolver((item.scanned_barcode, product.upc_code_1, product.upc_code_2))
                if custom:
                    brand = custom
                    custom_names_used += 1

            row = {column: "" for column in POS_COLUMNS}
            row.update(POS_FIXED_VALUES)
            row.update({
                "UPC": item.scanned_barcode,
                "Department": POS_DEPARTMENT,
                "Quantity": POS_QUANTITY,
                "Price Cents": price_to_cents(product.shelf_price),
                "Price": format_price(product.shelf_price),
                "Description": label_name(brand, product.bottle_size),
                "Item Code": strip_leading_zeros(product.liquor_code),
                "Vendor": product.vendor_name,
                "Pack": product.pack_size,
            })
            rows.append(row)

        if not rows:
            raise ExportInputError("No items to export")

        df = pd.DataFrame(rows, columns=POS_COLUMNS)
        df["Price Cents"] = df["Price Cents"].astype(int)

        logger.info(
            "pos_csv_generated",
            rows=len(rows),
            custom_names=custom_names_used,
        )

        return df.to_csv(index=False, quoting=csv.QUOTE_NONNUMERIC, lineterminator="\r\n")

    # ===================
    # SHELF LABELS
    # ===================

    def generate_label_html(
        self,
        items: Iterable[ScannedItemWithProduct],
        mode: LabelMode = LabelMode.PREVIEW,
    ) -> str:
        """
        Generate a printable HTML document with one shelf label per item.

        Each label shows brand and size, a Code 128 barcode of the scanned
        code, the shelf price, and the liquor code.

        Raises:
            ExportInputError: If no item has a product
        """
        printable = [item for item in items if item.product is not None]
        if not printable:
            raise ExportInputError("No items to print")

        labels = "".join(self._label_block(item) for item in printable)

        if mode == LabelMode.PREVIEW:
            styles = _print_css() + _screen_css()
            header = _instructions(len(printable))
            footer = ""
        else:
            styles = _print_css(apply_on_screen=True)
            header = ""
            footer = '<script>window.addEventListener("load", function () { window.print(); });</script>'

        logger.info("labels_generated", labels=len(printable), mode=mode.value)

        return (
            "<!DOCTYPE html>\n"
            "<html>\n<head>\n"
            '<meta charset="utf-8">\n'
            "<title>Liquor Shelf Labels</title>\n"
            f"<style>{styles}</style>\n"
            "</head>\n<body>\n"
            f"{header}{labels}{footer}\n"
            "</body>\n</html>\n"
        )

    def _label_block(self, item: ScannedItemWithProduct) -> str:
        product = item.product
        code = item.scanned_barcode or product.upc_code_1 or ""
        svg = render_barcode_svg(code)

        if svg:
            barcode_html = f'<img class="barcode" src="{svg}" alt="{html.escape(code)}">'
        else:
            barcode_html = f'<div class="barcode-text">{html.escape(code)}</div>'

        return (
            '<div class="label">'
            f'<div class="label-header">{html.escape(label_name(product.brand_name, product.bottle_size))}</div>'
            '<div class="label-body">'
            f'<div class="barcode-section">{barcode_html}</div>'
            f'<div class="price-section">{html.escape(format_price(product.shelf_price))}</div>'
            "</div>"
            f'<div class="label-footer">{html.escape(product.liquor_code)}</div>'
            "</div>\n"
        )

    # ===================
    # HELPERS
    # ===================

    @staticmethod
    def _check_rows(records: Any) -> None:
        if not isinstance(records, list):
            raise ExportInputError("Invalid records data", details={"type": type(records).__name__})
        if not records:
            raise ExportInputError("No data to export")
        bad = [i for i, r in enumerate(records) if not isinstance(r, dict)]
        if bad:
            raise ExportInputError("Invalid records data", details={"invalid_rows": bad[:10]})

    @staticmethod
    def _cell_value(value: Any) -> Any:
        if value is None:
            return ""
        if isinstance(value, (str, int, float)):
            return value
        return str(value)


def _print_css(apply_on_screen: bool = False) -> str:
    width = settings.label_width_in
    height = settings.label_height_in
    rules = f"""
  .label {{ width: {width}in; height: {height}in; padding: 0.05in; border: 1px solid #000;
    box-sizing: border-box; page-break-after: always; display: flex; flex-direction: column;
    position: relative; background: #fff; }}
  .label:last-child {{ page-break-after: avoid; }}
  .label-header {{ font-weight: bold; font-size: 11px; text-align: center; line-height: 1.1;
    margin-bottom: 0.02in; }}
  .label-body {{ flex: 1; display: flex; align-items: center; justify-content: space-between; }}
  .barcode-section {{ flex: 1; display: flex; align-items: center; overflow: hidden; }}
  .barcode {{ max-height: 0.6in; max-width: 100%; }}
  .barcode-text {{ font-family: monospace; font-size: 10px; }}
  .price-section {{ font-weight: bold; font-size: 16px; text-align: right; margin-left: 0.1in; }}
  .label-footer {{ position: absolute; bottom: 0.05in; right: 0.05in; font-size: 8px; font-weight: bold; }}
  .no-print {{ display: none !important; }}
"""
    page = f"@page {{ size: {width}in {height}in; margin: 0; }}\n"
    if apply_on_screen:
        return page + "body { margin: 0; padding: 0; font-family: Arial, sans-serif; }\n" + rules
    return page + "@media print {\n  body { margin: 0; padding: 0; font-family: Arial, sans-serif; }\n" + rules + "}\n"


def _screen_css() -> str:
    width = settings.label_width_in
    height = settings.label_height_in
    return f"""
@media screen {{
  body {{ font-family: Arial, sans-serif; padding: 20px; background: #f0f0f0; }}
  .print-instructions {{ background: #e3f2fd; border: 1px solid #1976d2; border-radius: 4px;
    padding: 15px; margin-bottom: 20px; }}
  .label {{ width: {width * 100:g}px; height: {height * 100:g}px; padding: 5px; border: 2px solid #000;
    box-sizing: border-box; margin: 10px; display: inline-flex; flex-direction: column;
    position: relative; background: #fff; vertical-align: top; }}
  .label-header {{ font-weight: bold; font-size: 11px; text-align: center; line-height: 1.1; margin-bottom: 2px; }}
  .label-body {{ flex: 1; display: flex; align-items: center; justify-content: space-between; }}
  .barcode-section {{ flex: 1; display: flex; align-items: center; overflow: hidden; }}
  .barcode {{ max-height: 60px; max-width: 100%; }}
  .price-section {{ font-weight: bold; font-size: 16px; text-align: right; margin-left: 10px; }}
  .label-footer {{ position: absolute; bottom: 5px; right: 5px; font-size: 8px; font-weight: bold; }}
}}
"""


def _instructions(count: int) -> str:
    width = f"{settings.label_width_in:g}"
    height = f"{settings.label_height_in:g}"
    return (
        '<div class="print-instructions no-print">'
        "<h3>Label Printing Instructions</h3>"
        "<ol>"
        f'<li>Load {width}" x {height}" continuous length labels in the label printer</li>'
        "<li>In your browser, go to <strong>File &rarr; Print</strong> (or Ctrl+P)</li>"
        "<li>Select the label printer</li>"
        f'<li>Choose <strong>More settings &rarr; Paper size &rarr; {width}" x {height}"</strong></li>'
        "<li>Set <strong>Margins to None</strong> and <strong>Scale to 100%</strong></li>"
        "<li>Click Print; labels are cut between items</li>"
        "</ol>"
        f"<p><strong>Total labels to print: {count}</strong></p>"
        "</div>\n"
    )


# Singleton instance
_export_service: Optional[ExportService] = None


def get_export_service() -> ExportService:
    """Get or create ExportService instance."""
    global _export_service
    if _export_service is None:
        _export_service = ExportService()
    return _export_service
