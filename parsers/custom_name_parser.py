"""
Custom name mapping file parser.

Reads a two-column table (UPC code, custom name) from CSV or Excel. Columns
are picked by header name when recognizable ("UPC", "UPC Code", "Name",
"Custom Name", ...), otherwise the first two columns are used. UPC cells are
read as text so leading zeros survive.
"""

from dataclasses import dataclass, field
from io import BytesIO
from pathlib import Path
from typing import Optional, Union

import pandas as pd
import structlog

from exceptions import CustomNameParseError
from models.custom_name import MAX_CUSTOM_NAME_LENGTH, MAX_UPC_LENGTH

logger = structlog.get_logger(__name__)

EXCEL_EXTENSIONS = (".xlsx", ".xls")

UPC_COLUMN_NAMES = {"upc", "upc_code", "upccode", "barcode", "upc_code_1"}
NAME_COLUMN_NAMES = {"name", "custom_name", "customname", "display_name", "label_name"}


@dataclass
class CustomNameRow:
    """Parsed mapping row ready for the registry."""
    upc_code: str
    custom_name: str


@dataclass
class SkippedRow:
    """A row that was skipped during parsing (non-fatal)."""
    row: int
    reason: str


@dataclass
class CustomNameParseResult:
    """Result of parsing a mapping file."""
    mappings: list[CustomNameRow] = field(default_factory=list)
    skipped_rows: list[SkippedRow] = field(default_factory=list)

    @property
    def has_data(self) -> bool:
        return len(self.mappings) > 0


def parse_custom_names(
    file: Union[str, Path, BytesIO],
    filename: Optional[str] = None,
) -> CustomNameParseResult:
    """
    Parse a custom name mapping file.

    Args:
        file: File path or file-like object
        filename: Original filename, used to tell Excel from CSV

    Returns:
        CustomNameParseResult with mappings and skipped rows

    Raises:
        CustomNameParseError: If the file cannot be read or has fewer than two columns
    """
    name = (filename or (str(file) if isinstance(file, (str, Path)) else "")).lower()
    is_excel = name.endswith(EXCEL_EXTENSIONS)

    logger.info("parsing_custom_names", filename=filename, excel=is_excel)

    try:
        if is_excel:
            df = pd.read_excel(file, dtype=str, engine="openpyxl" if name.endswith(".xlsx") else None)
        else:
            df = pd.read_csv(file, dtype=str, skipinitialspace=True)
    except Exception as e:
        logger.error("custom_names_read_failed", error=str(e))
        raise CustomNameParseError(
            message="Failed to read custom name file",
            details={"original_error": str(e), "filename": filename}
        )

    if len(df.columns) < 2:
        raise CustomNameParseError(
            message="Custom name file needs two columns: UPC code and name",
            details={"columns": [str(c) for c in df.columns]}
        )

    upc_col, name_col = _pick_columns(list(df.columns))

    result = CustomNameParseResult()

    for idx, row in df.iterrows():
        row_num = idx + 2  # 1-indexed + header

        upc = _cell_text(row.get(upc_col))
        custom_name = _cell_text(row.get(name_col))

        if not upc and not custom_name:
            continue
        if not upc:
            result.skipped_rows.append(SkippedRow(row=row_num, reason="Missing UPC code"))
            continue
        if not custom_name:
            result.skipped_rows.append(SkippedRow(row=row_num, reason="Missing custom name"))
            continue
        if len(upc) > MAX_UPC_LENGTH:
            result.skipped_rows.append(SkippedRow(
                row=row_num,
                reason=f"UPC code longer than {MAX_UPC_LENGTH} characters",
            ))
            continue
        if len(custom_name) > MAX_CUSTOM_NAME_LENGTH:
            result.skipped_rows.append(SkippedRow(
                row=row_num,
                reason=f"Custom name longer than {MAX_CUSTOM_NAME_LENGTH} characters",
            ))
            continue

        result.mappings.append(CustomNameRow(upc_code=upc, custom_name=custom_name))

    logger.info(
        "custom_names_parsed",
        mappings=len(result.mappings),
        skipped=len(result.skipped_rows),
    )

    return result


def _pick_columns(columns: list) -> tuple:
    """Choose (upc column, name column), by header name or position."""
    normalized = {_normalize_column(col): col for col in columns}

    upc_col = next((normalized[n] for n in normalized if n in UPC_COLUMN_NAMES), columns[0])
    name_col = next(
        (normalized[n] for n in normalized if n in NAME_COLUMN_NAMES and normalized[n] != upc_col),
        None
    )
    if name_col is None:
        name_col = next(col for col in columns if col != upc_col)

    return upc_col, name_col


def _normalize_column(col) -> str:
    """
    Normalize column name for consistent matching.

    "UPC Code" -> "upc_code"
    " Custom Name " -> "custom_name"
    """
    return str(col).lower().strip().replace(" ", "_").replace("-", "_")


def _cell_text(value) -> str:
    """Cell as trimmed text; NaN and None become ""."""
    if value is None or pd.isna(value):
        return ""
    text = str(value).strip()
    # Spreadsheets sometimes turn 012345 into 12345.0 before we see it
    if text.endswith(".0") and text[:-2].isdigit():
        text = text[:-2]
    return text
