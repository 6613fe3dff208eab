"""
In-memory data store.

Provides named tables with create/read/update/delete operations. The store
lives for the lifetime of the server process; a durable backend only needs to
offer the same Table interface.
"""

import copy
import threading
import uuid
from collections import OrderedDict
from functools import lru_cache
from typing import Any, Callable, Iterable, Optional

import structlog

logger = structlog.get_logger(__name__)

Row = dict[str, Any]
Predicate = Callable[[Row], bool]


class DatabaseError(Exception):
    """Base exception for storage errors."""
    pass


class Table:
    """
    A named collection of rows keyed by their "id" column.

    Every operation runs under the table lock. Rows are copied on the way in
    and on the way out, so a caller can never mutate stored state without
    going through update().
    """

    def __init__(self, name: str):
        self.name = name
        self._rows: "OrderedDict[str, Row]" = OrderedDict()
        self._lock = threading.RLock()

    def insert(self, row: Row) -> Row:
        """Insert a row, generating an id when none is given."""
        stored = copy.deepcopy(row)
        stored.setdefault("id", str(uuid.uuid4()))
        with self._lock:
            if stored["id"] in self._rows:
                raise DatabaseError(f"Duplicate id in {self.name}: {stored['id']}")
            self._rows[stored["id"]] = stored
        return copy.deepcopy(stored)

    def get(self, row_id: str) -> Optional[Row]:
        with self._lock:
            row = self._rows.get(row_id)
            return copy.deepcopy(row) if row is not None else None

    def update(self, row_id: str, changes: Row) -> Optional[Row]:
        """Merge changes into a row. Returns the updated row or None."""
        with self._lock:
            row = self._rows.get(row_id)
            if row is None:
                return None
            row.update(copy.deepcopy(changes))
            row["id"] = row_id
            return copy.deepcopy(row)

    def delete(self, row_id: str) -> bool:
        with self._lock:
            return self._rows.pop(row_id, None) is not None

    def delete_where(self, where: Predicate) -> int:
        """Delete every row matching the predicate. Returns the count removed."""
        with self._lock:
            doomed = [row_id for row_id, row in self._rows.items() if where(row)]
            for row_id in doomed:
                del self._rows[row_id]
            return len(doomed)

    def select(self, where: Optional[Predicate] = None) -> list[Row]:
        """Rows in insertion order, optionally filtered."""
        with self._lock:
            return [
                copy.deepcopy(row)
                for row in self._rows.values()
                if where is None or where(row)
            ]

    def count(self, where: Optional[Predicate] = None) -> int:
        with self._lock:
            if where is None:
                return len(self._rows)
            return sum(1 for row in self._rows.values() if where(row))

    def replace_all(self, rows: Iterable[Row]) -> list[Row]:
        """Swap the table contents for the given rows in one step."""
        fresh: "OrderedDict[str, Row]" = OrderedDict()
        for row in rows:
            stored = copy.deepcopy(row)
            stored.setdefault("id", str(uuid.uuid4()))
            fresh[stored["id"]] = stored
        with self._lock:
            self._rows = fresh
        return [copy.deepcopy(row) for row in fresh.values()]

    def clear(self) -> int:
        with self._lock:
            removed = len(self._rows)
            self._rows = OrderedDict()
            return removed


class Database:
    """
    Collection of named tables.

    Usage:
        db = Database()
        db.table("scan_sessions").insert({"name": "Aisle 4"})
    """

    def __init__(self):
        self._tables: dict[str, Table] = {}
        self._lock = threading.Lock()

    def table(self, name: str) -> Table:
        with self._lock:
            if name not in self._tables:
                self._tables[name] = Table(name)
            return self._tables[name]

    def table_names(self) -> list[str]:
        with self._lock:
            return list(self._tables)


@lru_cache()
def get_database() -> Database:
    """
    Get the process-wide database instance.

    Call reset_database() to start over with empty tables.
    """
    logger.info("database_initialized", backend="memory")
    return Database()


# Convenience alias
db = get_database


def check_connection() -> dict:
    """
    Report store health and row counts per table.

    Returns:
        dict: Status with details
    """
    try:
        database = get_database()
        return {
            "status": "healthy",
            "backend": "memory",
            "tables": {
                name: database.table(name).count()
                for name in database.table_names()
            }
        }
    except Exception as e:
        return {
            "status": "unhealthy",
            "error": str(e)
        }


def reset_database():
    """Drop the cached database so the next call starts empty."""
    get_database.cache_clear()
    logger.info("database_reset")
