"""
Custom name registry.

Maps UPC codes to the name printed on POS labels instead of the price book
brand name. Lookups use the same exact-then-zero-stripped matching as the
catalog.
"""

from datetime import datetime
from io import BytesIO
from typing import Iterable, Optional, Union

import structlog
from pydantic import ValidationError as SchemaValidationError

from config import settings
from config.database import Database, get_database
from exceptions import FileTooLargeError, ValidationError
from models.custom_name import (
    CustomNameMapping,
    CustomNameMappingCreate,
    CustomNameUploadResponse,
    SkippedMappingRow,
)
from parsers.custom_name_parser import CustomNameRow, parse_custom_names
from utils.upc import find_by_upc

logger = structlog.get_logger(__name__)

CUSTOM_NAMES_TABLE = "custom_names"

MappingInput = Union[CustomNameMappingCreate, CustomNameRow, dict]


class CustomNameService:
    """UPC -> custom name mappings."""

    def __init__(self, db: Optional[Database] = None):
        self.db = db or get_database()
        self.table = self.db.table(CUSTOM_NAMES_TABLE)

    def upload(self, mappings: Iterable[MappingInput], replace: bool = True) -> int:
        """
        Store mappings.

        Args:
            mappings: (upc_code, custom_name) pairs
            replace: Discard existing mappings first (otherwise add to them)

        Returns:
            Number of mappings stored by this upload

        Raises:
            ValidationError: If a mapping is blank or too long (nothing is stored)
        """
        uploaded_at = datetime.utcnow()
        rows = []
        for index, mapping in enumerate(mappings):
            try:
                create = self._to_create(mapping)
            except SchemaValidationError as e:
                logger.error("custom_name_mapping_invalid", index=index, errors=e.errors())
                raise ValidationError(
                    message="Invalid custom name mapping",
                    details={
                        "index": index,
                        "errors": [
                            {"field": ".".join(str(p) for p in err["loc"]), "message": err["msg"]}
                            for err in e.errors()
                        ],
                    },
                )
            rows.append({**create.model_dump(), "uploaded_at": uploaded_at})

        if replace:
            self.table.replace_all(rows)
        else:
            for row in rows:
                self.table.insert(row)

        logger.info("custom_names_uploaded", count=len(rows), replace=replace)

        return len(rows)

    def upload_file(
        self,
        data: bytes,
        filename: Optional[str] = None,
        replace: bool = True,
    ) -> CustomNameUploadResponse:
        """
        Parse a CSV / Excel mapping file and store its rows.

        Raises:
            FileTooLargeError: If the upload exceeds max_upload_bytes
            CustomNameParseError: If the file cannot be read
        """
        if len(data) > settings.max_upload_bytes:
            raise FileTooLargeError(len(data), settings.max_upload_bytes)

        parsed = parse_custom_names(BytesIO(data), filename=filename)
        imported = self.upload(parsed.mappings, replace=replace)

        return CustomNameUploadResponse(
            imported=imported,
            total=self.table.count(),
            replaced=replace,
            skipped_rows=[
                SkippedMappingRow(row=s.row, reason=s.reason)
                for s in parsed.skipped_rows
            ],
            filename=filename,
        )

    def all(self) -> list[CustomNameMapping]:
        return [CustomNameMapping(**row) for row in self.table.select()]

    def count(self) -> int:
        return self.table.count()

    def clear(self) -> int:
        """Remove all mappings. Returns the number removed."""
        removed = self.table.clear()
        logger.info("custom_names_cleared", removed=removed)
        return removed

    def lookup(self, upc: Optional[str]) -> Optional[str]:
        """Custom name for a UPC, or None."""
        if not upc:
            return None
        match = find_by_upc(self.table.select(), upc, lambda r: (r["upc_code"],))
        return match["custom_name"] if match else None

    def lookup_first(self, upcs: Iterable[Optional[str]]) -> Optional[str]:
        """Custom name for the first UPC (in the given order) that has one."""
        rows = self.table.select()
        for upc in upcs:
            if not upc:
                continue
            match = find_by_upc(rows, upc, lambda r: (r["upc_code"],))
            if match:
                return match["custom_name"]
        return None

    @staticmethod
    def _to_create(mapping: MappingInput) -> CustomNameMappingCreate:
        if isinstance(mapping, CustomNameMappingCreate):
            return mapping
        if isinstance(mapping, CustomNameRow):
            return CustomNameMappingCreate(upc_code=mapping.upc_code, custom_name=mapping.custom_name)
        return CustomNameMappingCreate(**mapping)


# Singleton instance
_custom_name_service: Optional[CustomNameService] = None


def get_custom_name_service() -> CustomNameService:
    """Get or create CustomNameService instance."""
    global _custom_name_service
    if _custom_name_service is None:
        _custom_name_service = CustomNameService()
    return _custom_name_service
