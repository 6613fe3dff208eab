"""
Product catalog service.

Holds the parsed price book as an immutable snapshot. Loading a new price book
builds a complete snapshot first and then swaps the reference under a lock, so
a concurrent lookup sees either the old catalog or the new one, never a mix.
"""

import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Iterable, Mapping, Optional, Union

import structlog

from models.liquor import CatalogStatus, LiquorRecord
from parsers.price_book_parser import PriceBookRecord
from utils.upc import find_by_upc, normalize_upc

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class CatalogSnapshot:
    """
    One loaded price book.

    records keeps ingestion order. shadows holds per-session price overrides
    created from these records; they are reachable by id only and are dropped
    together with the snapshot.
    """
    records: tuple[LiquorRecord, ...] = ()
    by_id: Mapping[str, LiquorRecord] = field(default_factory=lambda: MappingProxyType({}))
    shadows: Mapping[str, LiquorRecord] = field(default_factory=lambda: MappingProxyType({}))
    loaded_at: Optional[datetime] = None
    source: Optional[str] = None


class CatalogService:
    """
    Product catalog.

    Reads never take the lock: they grab the current snapshot reference and
    work on it. Writers build a new snapshot and publish it under the lock.
    """

    def __init__(self):
        self._snapshot = CatalogSnapshot()
        self._lock = threading.Lock()

    # ===================
    # WRITE OPERATIONS
    # ===================

    def replace_all(
        self,
        records: Iterable[Union[PriceBookRecord, LiquorRecord, dict]],
        source: Optional[str] = None,
    ) -> list[LiquorRecord]:
        """
        Discard the current catalog and install the given records.

        Every record gets a fresh id. Shadow records of the previous catalog
        are discarded with it.

        Args:
            records: Parsed price book records
            source: Where the records came from (filename or URL)

        Returns:
            The installed records, in order
        """
        installed = tuple(self._to_record(r) for r in records)
        snapshot = CatalogSnapshot(
            records=installed,
            by_id=MappingProxyType({r.id: r for r in installed}),
            loaded_at=datetime.utcnow(),
            source=source,
        )

        with self._lock:
            previous = len(self._snapshot.records)
            self._snapshot = snapshot

        logger.info(
            "catalog_replaced",
            previous_records=previous,
            records=len(installed),
            source=source,
        )

        return list(installed)

    def add_shadow(self, original: LiquorRecord, shelf_price: float) -> LiquorRecord:
        """
        Copy a record with an overridden shelf price.

        The original is left untouched. The copy gets a new id and remembers
        the original id and shelf price.
        """
        shadow = original.model_copy(update={
            "id": str(uuid.uuid4()),
            "shelf_price": float(shelf_price),
            "original_record_id": original.original_record_id or original.id,
            "original_shelf_price": (
                original.original_shelf_price
                if original.is_shadow
                else original.shelf_price
            ),
        })

        with self._lock:
            current = self._snapshot
            shadows = dict(current.shadows)
            shadows[shadow.id] = shadow
            self._snapshot = CatalogSnapshot(
                records=current.records,
                by_id=current.by_id,
                shadows=MappingProxyType(shadows),
                loaded_at=current.loaded_at,
                source=current.source,
            )

        logger.info(
            "shadow_record_created",
            shadow_id=shadow.id,
            original_id=shadow.original_record_id,
            shelf_price=shadow.shelf_price,
        )

        return shadow

    def clear(self) -> None:
        with self._lock:
            self._snapshot = CatalogSnapshot()
        logger.info("catalog_cleared")

    # ===================
    # READ OPERATIONS
    # ===================

    def snapshot(self) -> CatalogSnapshot:
        """Current snapshot; stays consistent even if a reload happens meanwhile."""
        return self._snapshot

    def all(self) -> list[LiquorRecord]:
        """All price book records (shadow records excluded)."""
        return list(self._snapshot.records)

    def count(self) -> int:
        return len(self._snapshot.records)

    def get_by_id(self, record_id: Optional[str]) -> Optional[LiquorRecord]:
        """Price book or shadow record by id; None if not in the current catalog."""
        if not record_id:
            return None
        snapshot = self._snapshot
        return snapshot.by_id.get(record_id) or snapshot.shadows.get(record_id)

    def find_by_barcode(self, code: str) -> Optional[LiquorRecord]:
        """
        Find a record by UPC.

        Exact match against UPC 1 or UPC 2 first, then the same comparison with
        leading zeros stripped. First match in ingestion order wins.

        Args:
            code: Barcode as scanned or typed

        Returns:
            LiquorRecord or None if nothing matches
        """
        if not code:
            return None
        return find_by_upc(
            self._snapshot.records,
            code,
            lambda r: (r.upc_code_1, r.upc_code_2),
        )

    def search(self, query: str, limit: int = 10) -> tuple[list[LiquorRecord], int]:
        """
        Case-insensitive search over liquor code, brand, vendor and UPCs.

        UPCs match on raw substring or on substring after zero stripping.

        Returns:
            Tuple of (first `limit` matches, total matches)
        """
        term = query.lower().strip()
        if not term:
            return [], 0

        normalized_term = normalize_upc(term)
        matches = []

        for record in self._snapshot.records:
            if (
                term in record.liquor_code.lower()
                or term in record.brand_name.lower()
                or term in record.vendor_name.lower()
                or self._upc_contains(record, term, normalized_term)
            ):
                matches.append(record)

        logger.debug("catalog_searched", query=query, total=len(matches))

        return matches[:limit], len(matches)

    def status(self) -> CatalogStatus:
        snapshot = self._snapshot
        return CatalogStatus(
            total_records=len(snapshot.records),
            loaded_at=snapshot.loaded_at,
            source=snapshot.source,
        )

    # ===================
    # HELPERS
    # ===================

    @staticmethod
    def _to_record(record: Union[PriceBookRecord, LiquorRecord, dict]) -> LiquorRecord:
        if isinstance(record, PriceBookRecord):
            data = record.to_dict()
        elif isinstance(record, LiquorRecord):
            data = record.model_dump(exclude={"id", "original_record_id", "original_shelf_price"})
        else:
            data = {k: v for k, v in record.items() if k != "id"}
        return LiquorRecord(id=str(uuid.uuid4()), **data)

    @staticmethod
    def _upc_contains(record: LiquorRecord, term: str, normalized_term: str) -> bool:
        for upc in (record.upc_code_1, record.upc_code_2):
            if not upc:
                continue
            if term in upc or normalized_term in normalize_upc(upc):
                return True
        return False


# Singleton instance
_catalog_service: Optional[CatalogService] = None


def get_catalog_service() -> CatalogService:
    """Get or create CatalogService instance."""
    global _catalog_service
    if _catalog_service is None:
        _catalog_service = CatalogService()
    return _catalog_service
