"""
Use-case store: create, list and delete over a single persistence slot.

Every mutating call is a full read-modify-write of the slot blob. There is
no locking or revision check, so two interleaved writers resolve as
last-write-wins.
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Callable, List, Mapping, Optional

from util.logging import logger

from .config import get_storage_key
from .schema import InspectionUseCase
from .serialization import SlotReadError, decode_use_cases, encode_use_cases
from .storage import SlotStorage, get_storage
from .validation import UseCaseValidationError, validate_draft

Listener = Callable[[str, str], None]


def generate_id() -> str:
    """Generate a new use-case id."""
    return str(uuid.uuid4())


def utc_now() -> datetime:
    return datetime.now(tz=timezone.utc)


class UseCaseStore:
    """
    Durable collection of inspection use cases.

    Usage::

        store = UseCaseStore(storage=InMemorySlotStorage())
        created = store.create({"name": "Blade Scan", "inspectionType": "visual",
                                "anomalies": ["cracks", "delamination"]})
        store.list()            # [InspectionUseCase(...)]
        store.delete(created.id)  # True
    """

    def __init__(self, storage: Optional[SlotStorage] = None, key: Optional[str] = None,
                 id_factory: Callable[[], str] = generate_id,
                 clock: Callable[[], datetime] = utc_now):
        self.storage = storage if storage is not None else get_storage()
        self.key = key or get_storage_key()
        self._id_factory = id_factory
        self._clock = clock
        self._listeners: List[Listener] = []

    # Observers

    def subscribe(self, listener: Listener) -> None:
        """Register a callback invoked as listener(operation, use_case_id) after each mutation."""
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self, operation: str, use_case_id: str) -> None:
        for listener in list(self._listeners):
            try:
                listener(operation, use_case_id)
            except Exception as e:
                # Listener failures never undo a completed write
                logger.warning(f"Use case listener {listener!r} failed on {operation}: {e}")

    # Slot access

    def _read(self) -> List[InspectionUseCase]:
        blob = self.storage.get(self.key)
        if not blob:
            return []
        return decode_use_cases(blob)

    def _write(self, use_cases: List[InspectionUseCase]) -> None:
        self.storage.set(self.key, encode_use_cases(use_cases))

    def _new_id(self, existing: List[InspectionUseCase]) -> str:
        taken = {u.id for u in existing}
        new_id = self._id_factory()
        while new_id in taken:
            new_id = self._id_factory()
        return new_id

    # Public API

    def create(self, draft: Mapping[str, Any]) -> InspectionUseCase:
        """
        Validate a draft and persist it as a new use case.

        Raises:
            UseCaseValidationError: the draft failed validation; nothing is written.
        """
        result = validate_draft(draft)
        if not result.valid:
            logger.log_validation_error("create", result.errors, draft if isinstance(draft, dict) else None)
            raise UseCaseValidationError(result.errors)

        name, inspection_type, anomalies = result.cleaned
        existing = self.list()
        use_case = InspectionUseCase(
            id=self._new_id(existing),
            name=name,
            inspection_type=inspection_type,
            anomalies=anomalies,
            created_at=self._clock(),
        )

        try:
            self._write(existing + [use_case])
        except Exception as e:
            logger.log_use_case_operation("create", use_case.id, "failed", {"error": str(e)[:100]})
            raise

        logger.log_use_case_operation("create", use_case.id, "success", {
            "inspection_type": use_case.inspection_type.value,
            "anomaly_count": len(use_case.anomalies),
            "total": len(existing) + 1
        })
        self._notify("create", use_case.id)
        return use_case

    def list(self) -> List[InspectionUseCase]:
        """Return all use cases in insertion order; a corrupt slot reads as empty."""
        try:
            return self._read()
        except SlotReadError as e:
            logger.log_slot_read_error(self.key, e)
            return []

    def delete(self, use_case_id: str) -> bool:
        """Delete a use case by id. Returns False (and writes nothing) when no record matches."""
        use_cases = self.list()
        remaining = [u for u in use_cases if u.id != use_case_id]

        if len(remaining) < len(use_cases):
            self._write(remaining)
            logger.log_use_case_operation("delete", use_case_id, "success", {"total": len(remaining)})
            self._notify("delete", use_case_id)
            return True

        logger.log_use_case_operation("delete", use_case_id, "not_found")
        return False

    def count(self) -> int:
        return len(self.list())


# Default store used by the module-level helpers
_default_store: Optional[UseCaseStore] = None


def get_store() -> UseCaseStore:
    """Get the lazily built default store."""
    global _default_store
    if _default_store is None:
        _default_store = UseCaseStore()
    return _default_store


def reset_store(store: Optional[UseCaseStore] = None) -> None:
    """Replace (or discard) the default store, e.g. after configuration changes."""
    global _default_store
    _default_store = store


def save_use_case(draft: Mapping[str, Any]) -> InspectionUseCase:
    """Validate and persist a draft in the default store."""
    return get_store().create(draft)


def list_use_cases() -> List[InspectionUseCase]:
    """List use cases from the default store."""
    return get_store().list()


def delete_use_case(use_case_id: str) -> bool:
    """Delete a use case from the default store."""
    return get_store().delete(use_case_id)

