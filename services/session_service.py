"""
Scan session service.

Manages named scan sessions and the items scanned into them. Exactly one
session is active at a time; deleting the active session activates the most
recently updated remaining one, or creates a fresh default session.

Item mutations on the same session are serialized with a per-session lock so
item_count and updated_at never lose an update. Different sessions do not
block each other.
"""

import math
import threading
from datetime import date, datetime
from typing import Any, Optional

import structlog

from config.database import Database, get_database
from exceptions import InvalidPriceError, SessionNotFoundError
from models.session import ScanSession, ScannedItem, ScannedItemWithProduct
from services.catalog_service import CatalogService, get_catalog_service

logger = structlog.get_logger(__name__)

SESSIONS_TABLE = "scan_sessions"
ITEMS_TABLE = "scanned_items"
STATE_TABLE = "app_state"
ACTIVE_SESSION_KEY = "active_session"


def default_session_name(today: Optional[date] = None) -> str:
    """Name for sessions created without one, e.g. "Scan Session 10/18/2026"."""
    today = today or date.today()
    return f"Scan Session {today.strftime('%m/%d/%Y')}"


def validate_price(price: Any) -> float:
    """
    Check a price edit before it reaches the store.

    Raises:
        InvalidPriceError: If the price is not a finite, non-negative number
    """
    if isinstance(price, bool):
        raise InvalidPriceError(price)
    try:
        value = float(price)
    except (TypeError, ValueError):
        raise InvalidPriceError(price)
    if not math.isfinite(value) or value < 0:
        raise InvalidPriceError(price)
    return value


class SessionService:
    """
    Scan sessions and scanned items.

    Products are joined from the catalog when items are read, so an item
    whose record was replaced by a newer price book shows as not found.
    """

    def __init__(
        self,
        db: Optional[Database] = None,
        catalog: Optional[CatalogService] = None,
    ):
        self.db = db or get_database()
        self.catalog = catalog or get_catalog_service()
        self.sessions = self.db.table(SESSIONS_TABLE)
        self.items = self.db.table(ITEMS_TABLE)
        self.state = self.db.table(STATE_TABLE)
        self._registry_lock = threading.RLock()
        self._locks_guard = threading.Lock()
        self._session_locks: dict[str, threading.RLock] = {}

    # ===================
    # SESSIONS
    # ===================

    def create_session(self, name: Optional[str] = None) -> ScanSession:
        """
        Create a session and make it the active one.

        Args:
            name: Session name (defaults to "Scan Session <today>")

        Returns:
            ScanSession
        """
        now = datetime.utcnow()
        with self._registry_lock:
            row = self.sessions.insert({
                "name": (name or "").strip() or default_session_name(),
                "created_at": now,
                "updated_at": now,
                "item_count": 0,
            })
            self._set_active(row["id"])

        logger.info("session_created", session_id=row["id"], name=row["name"])

        return self._to_session(row, active_id=row["id"])

    def list_sessions(self) -> list[ScanSession]:
        """All sessions, most recently updated first."""
        active_id = self._active_id()
        rows = sorted(self.sessions.select(), key=lambda r: r["updated_at"], reverse=True)
        return [self._to_session(row, active_id) for row in rows]

    def get_session(self, session_id: str) -> ScanSession:
        """
        Get a session by id.

        Raises:
            SessionNotFoundError: If the session does not exist
        """
        row = self.sessions.get(session_id)
        if row is None:
            raise SessionNotFoundError(session_id)
        return self._to_session(row, self._active_id())

    def session_exists(self, session_id: Optional[str]) -> bool:
        return bool(session_id) and self.sessions.get(session_id) is not None

    def get_active_session(self) -> ScanSession:
        """The active session, creating a default one when there is none."""
        with self._registry_lock:
            active_id = self._active_id()
            if active_id:
                row = self.sessions.get(active_id)
                if row is not None:
                    return self._to_session(row, active_id)
            return self._activate_fallback()

    def activate_session(self, session_id: str) -> ScanSession:
        """
        Make a session the active one.

        Raises:
            SessionNotFoundError: If the session does not exist
        """
        with self._registry_lock:
            row = self.sessions.get(session_id)
            if row is None:
                raise SessionNotFoundError(session_id)
            self._set_active(session_id)

        logger.info("session_activated", session_id=session_id)

        return self._to_session(row, active_id=session_id)

    def rename_session(self, session_id: str, name: str) -> ScanSession:
        """
        Rename a session.

        Raises:
            SessionNotFoundError: If the session does not exist
        """
        with self._session_lock(session_id):
            row = self.sessions.update(session_id, {
                "name": name.strip(),
                "updated_at": datetime.utcnow(),
            })
        if row is None:
            raise SessionNotFoundError(session_id)

        logger.info("session_renamed", session_id=session_id, name=row["name"])

        return self._to_session(row, self._active_id())

    def delete_session(self, session_id: str) -> bool:
        """
        Delete a session and all of its scanned items.

        If it was the active session, the most recently updated remaining
        session becomes active, or a new default session is created, so an
        active session always exists afterwards.

        Returns:
            True if deleted, False if the session did not exist
        """
        with self._registry_lock:
            with self._session_lock(session_id):
                if not self.sessions.delete(session_id):
                    return False
                removed_items = self.items.delete_where(
                    lambda r: r["session_id"] == session_id
                )

            with self._locks_guard:
                self._session_locks.pop(session_id, None)

            active_id = self._active_id()
            was_active = active_id == session_id
            replacement = None
            if was_active or active_id is None or self.sessions.get(active_id) is None:
                replacement = self._activate_fallback()

        logger.info(
            "session_deleted",
            session_id=session_id,
            removed_items=removed_items,
            was_active=was_active,
            active_session_id=replacement.id if replacement else self._active_id(),
        )

        return True

    # ===================
    # SCANNED ITEMS
    # ===================

    def add_scanned_item(
        self,
        session_id: str,
        scanned_barcode: str,
        liquor_record_id: Optional[str] = None,
        quantity: int = 1,
    ) -> ScannedItem:
        """
        Record a scanned item in a session.

        Args:
            session_id: Owning session
            scanned_barcode: Barcode exactly as scanned
            liquor_record_id: Matched catalog record, if any
            quantity: Quantity (default 1)

        Returns:
            ScannedItem

        Raises:
            SessionNotFoundError: If the session does not exist
        """
        with self._session_lock(session_id):
            if self.sessions.get(session_id) is None:
                raise SessionNotFoundError(session_id)

            row = self.items.insert({
                "session_id": session_id,
                "liquor_record_id": liquor_record_id,
                "scanned_barcode": scanned_barcode,
                "scanned_at": datetime.utcnow(),
                "quantity": quantity,
            })
            self._touch(session_id)

        logger.info(
            "scanned_item_added",
            session_id=session_id,
            item_id=row["id"],
            liquor_record_id=liquor_record_id,
        )

        return ScannedItem(**row)

    def get_scanned_item(self, item_id: str) -> Optional[ScannedItem]:
        row = self.items.get(item_id)
        return ScannedItem(**row) if row else None

    def list_scanned_items(self, session_id: str) -> list[ScannedItem]:
        """Items of a session in scan order; empty for unknown sessions."""
        rows = self.items.select(lambda r: r["session_id"] == session_id)
        return [ScannedItem(**row) for row in rows]

    def list_scanned_items_with_products(self, session_id: str) -> list[ScannedItemWithProduct]:
        """
        Items of a session joined with the current catalog.

        The join happens now, against whatever catalog is loaded now. Items
        whose record is gone come back with product None.
        """
        snapshot = self.catalog.snapshot()
        joined = []
        for item in self.list_scanned_items(session_id):
            product = None
            if item.liquor_record_id:
                product = (
                    snapshot.by_id.get(item.liquor_record_id)
                    or snapshot.shadows.get(item.liquor_record_id)
                )
            joined.append(ScannedItemWithProduct(**item.model_dump(), product=product))
        return joined

    def delete_scanned_item(self, item_id: str) -> bool:
        """
        Delete one scanned item.

        Returns:
            True if deleted, False if the item did not exist
        """
        item = self.items.get(item_id)
        if item is None:
            return False

        session_id = item["session_id"]
        with self._session_lock(session_id):
            if not self.items.delete(item_id):
                return False
            if self.sessions.get(session_id) is not None:
                self._touch(session_id)

        logger.info("scanned_item_deleted", item_id=item_id, session_id=session_id)

        return True

    def clear_scanned_items(self, session_id: str) -> int:
        """
        Remove every item from a session.

        Returns:
            Number of items removed
        """
        with self._session_lock(session_id):
            removed = self.items.delete_where(lambda r: r["session_id"] == session_id)
            if self.sessions.get(session_id) is not None:
                self._touch(session_id)

        logger.info("scanned_items_cleared", session_id=session_id, removed=removed)

        return removed

    def update_scanned_item_price(self, item_id: str, new_price: float) -> bool:
        """
        Override the shelf price of one scanned item.

        The linked catalog record is not modified, because other sessions may
        point at it. A copy with the new price is created and the item is
        repointed to the copy. The copy keeps the original shelf price.

        Callers validate the price first (see validate_price).

        Returns:
            True if updated, False if the item or its catalog record is missing
        """
        item = self.items.get(item_id)
        if item is None:
            logger.info("price_update_item_missing", item_id=item_id)
            return False

        session_id = item["session_id"]
        with self._session_lock(session_id):
            item = self.items.get(item_id)
            if item is None:
                return False

            product = self.catalog.get_by_id(item["liquor_record_id"])
            if product is None:
                logger.info(
                    "price_update_product_missing",
                    item_id=item_id,
                    liquor_record_id=item["liquor_record_id"],
                )
                return False

            shadow = self.catalog.add_shadow(product, new_price)
            self.items.update(item_id, {"liquor_record_id": shadow.id})
            self._touch(session_id)

        logger.info(
            "scanned_item_price_updated",
            item_id=item_id,
            session_id=session_id,
            previous_record_id=product.id,
            shadow_record_id=shadow.id,
            price=new_price,
        )

        return True

    # ===================
    # HELPERS
    # ===================

    def _session_lock(self, session_id: str) -> threading.RLock:
        """Per-session lock. Ids of unknown sessions get an untracked lock."""
        with self._locks_guard:
            lock = self._session_locks.get(session_id)
            if lock is None:
                lock = threading.RLock()
                if self.sessions.get(session_id) is not None:
                    self._session_locks[session_id] = lock
            return lock

    def _touch(self, session_id: str) -> None:
        """Refresh item_count and updated_at. Caller holds the session lock."""
        self.sessions.update(session_id, {
            "item_count": self.items.count(lambda r: r["session_id"] == session_id),
            "updated_at": datetime.utcnow(),
        })

    def _active_id(self) -> Optional[str]:
        row = self.state.get(ACTIVE_SESSION_KEY)
        return row["session_id"] if row else None

    def _set_active(self, session_id: str) -> None:
        if self.state.update(ACTIVE_SESSION_KEY, {"session_id": session_id}) is None:
            self.state.insert({"id": ACTIVE_SESSION_KEY, "session_id": session_id})

    def _activate_fallback(self) -> ScanSession:
        """Activate the most recently updated session, or create one."""
        remaining = sorted(self.sessions.select(), key=lambda r: r["updated_at"], reverse=True)
        if remaining:
            return self.activate_session(remaining[0]["id"])
        return self.create_session()

    @staticmethod
    def _to_session(row: dict, active_id: Optional[str]) -> ScanSession:
        return ScanSession(**row, is_active=row["id"] == active_id)


# Singleton instance
_session_service: Optional[SessionService] = None


def get_session_service() -> SessionService:
    """Get or create SessionService instance."""
    global _session_service
    if _session_service is None:
        _session_service = SessionService()
    return _session_service
