"""
Storage port for the single persistence slot.

The store only ever needs two operations against the slot: read the whole
blob and replace the whole blob. Implementations:

- SQLiteSlotStorage: durable, backed by the ``slots`` table
- InMemorySlotStorage: dict-backed, for tests and ephemeral sessions
"""

from abc import ABC, abstractmethod
from typing import Dict, Optional, Union

from .config import get_db_path, get_storage_backend
from .db import get_db, init_db


class SlotStorage(ABC):
    """Abstract key-value slot interface."""

    @abstractmethod
    def get(self, key: str) -> Optional[Union[str, bytes]]:
        """Return the raw value stored under key, or None if the slot is empty."""

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Replace the value stored under key."""


class SQLiteSlotStorage(SlotStorage):
    """Slot storage backed by a local SQLite file."""

    def __init__(self, db_path: Optional[str] = None):
        self.db_path = db_path or get_db_path()
        init_db(self.db_path)

    def get(self, key: str) -> Optional[Union[str, bytes]]:
        """Read the slot; a value that is not valid UTF-8 comes back as raw bytes."""
        with get_db(self.db_path) as conn:
            cursor = conn.cursor()
            # Read as BLOB so sqlite3 never decodes the text itself
            cursor.execute("SELECT CAST(value AS BLOB) FROM slots WHERE key = ?", (key,))
            row = cursor.fetchone()

        if not row or row[0] is None:
            return None
        raw = bytes(row[0])
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError:
            return raw

    def set(self, key: str, value: str) -> None:
        with get_db(self.db_path) as conn:
            cursor = conn.cursor()
            cursor.execute(
                "INSERT INTO slots (key, value, updated_at) VALUES (?, ?, CURRENT_TIMESTAMP) "
                "ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = CURRENT_TIMESTAMP",
                (key, value)
            )
            conn.commit()

    def __repr__(self) -> str:
        return f"SQLiteSlotStorage(db_path={self.db_path!r})"


class InMemorySlotStorage(SlotStorage):
    """In-memory slot storage."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._slots: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._slots.get(key)

    def set(self, key: str, value: str) -> None:
        self._slots[key] = value

    def __repr__(self) -> str:
        return f"InMemorySlotStorage(keys={sorted(self._slots)})"


def get_storage() -> SlotStorage:
    """Get configured slot storage implementation."""
    if get_storage_backend() == "memory":
        return InMemorySlotStorage()
    # Default to SQLite for unknown backends
    return SQLiteSlotStorage()
