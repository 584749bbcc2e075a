"""
Use-case store tests - create, list, delete, ids, observers and degraded reads.
"""

import json
from datetime import datetime, timezone
from unittest.mock import patch, MagicMock

import pytest

from src.core.dao import UseCaseStore
from src.core.schema import Anomaly, InspectionType
from src.core.storage import InMemorySlotStorage
from src.core.validation import ANOMALIES_EMPTY, NAME_TOO_SHORT, TYPE_REQUIRED, UseCaseValidationError

KEY = "inspectionUseCases"
FIXED_TIME = datetime(2026, 10, 19, 10, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def storage():
    return InMemorySlotStorage()


@pytest.fixture
def store(storage):
    """Return a store over a fresh in-memory slot with a fixed clock."""
    return UseCaseStore(storage=storage, key=KEY, clock=lambda: FIXED_TIME)


def _blade_scan():
    return {"name": "Blade Scan", "inspectionType": "visual", "anomalies": ["cracks", "delamination"]}


class TestCreate:
    """UseCaseStore.create"""

    def test_create_returns_record_with_generated_fields(self, store):
        created = store.create(_blade_scan())
        assert created.id
        assert created.name == "Blade Scan"
        assert created.inspection_type is InspectionType.VISUAL
        assert created.anomalies == [Anomaly.CRACKS, Anomaly.DELAMINATION]
        assert created.created_at == FIXED_TIME

    def test_create_adds_exactly_one_record(self, store):
        store.create(_blade_scan())
        before = len(store.list())
        created = store.create({"name": "Tank Wall", "inspectionType": "thermal", "anomalies": ["corrosion"]})
        records = store.list()
        assert len(records) == before + 1
        assert records[-1] == created

    def test_create_persists_slot_layout(self, store, storage):
        created = store.create(_blade_scan())
        data = json.loads(storage.get(KEY))
        assert data[0]["id"] == created.id
        assert data[0]["inspectionType"] == "visual"
        assert data[0]["anomalies"] == ["cracks", "delamination"]

    def test_duplicate_names_allowed(self, store):
        first = store.create(_blade_scan())
        second = store.create(_blade_scan())
        assert first.id != second.id
        assert len(store.list()) == 2

    def test_ids_unique_across_many_creates(self, store):
        ids = {store.create(_blade_scan()).id for _ in range(25)}
        assert len(ids) == 25

    def test_colliding_id_is_regenerated(self, storage):
        """Test that an id already in the collection is never reused."""
        ids = iter(["dup", "dup", "fresh"])
        store = UseCaseStore(storage=storage, key=KEY, id_factory=lambda: next(ids))
        assert store.create(_blade_scan()).id == "dup"
        assert store.create(_blade_scan()).id == "fresh"

    @pytest.mark.parametrize("draft,field_name,message", [
        ({"name": "A", "inspectionType": "visual", "anomalies": ["cracks"]}, "name", NAME_TOO_SHORT),
        ({"name": "Blade Scan", "anomalies": ["cracks"]}, "inspectionType", TYPE_REQUIRED),
        ({"name": "Blade Scan", "inspectionType": "visual", "anomalies": []}, "anomalies", ANOMALIES_EMPTY),
    ])
    def test_invalid_draft_rejected_without_write(self, store, storage, draft, field_name, message):
        """Test that validation failures are field-specific and write nothing."""
        with pytest.raises(UseCaseValidationError) as exc_info:
            store.create(draft)
        assert exc_info.value.errors[field_name] == message
        assert storage.get(KEY) is None
        assert store.list() == []

    def test_validation_happens_before_storage_access(self):
        storage = MagicMock()
        store = UseCaseStore(storage=storage, key=KEY)
        with pytest.raises(UseCaseValidationError):
            store.create({"name": "A"})
        storage.get.assert_not_called()
        storage.set.assert_not_called()

    def test_write_failure_propagates(self):
        storage = MagicMock()
        storage.get.return_value = None
        storage.set.side_effect = OSError("disk full")
        store = UseCaseStore(storage=storage, key=KEY)
        with pytest.raises(OSError):
            store.create(_blade_scan())

    def test_create_over_corrupt_slot_replaces_it(self, store, storage):
        storage.set(KEY, "garbage")
        created = store.create(_blade_scan())
        assert store.list() == [created]

    def test_create_keeps_valid_records_beside_a_bad_one(self, store, storage):
        """A record that fails to decode must not take the valid ones with it."""
        good = {
            "id": "a1",
            "name": "Legacy",
            "inspectionType": "thermal",
            "anomalies": ["hotspots"],
            "createdAt": "2026-10-19T10:00:00.000Z",
        }
        storage.set(KEY, json.dumps([good, dict(good, id="a2", createdAt=None)]))

        created = store.create(_blade_scan())

        assert [u.id for u in store.list()] == ["a1", created.id]


class TestList:
    """UseCaseStore.list"""

    def test_empty_slot_lists_empty(self, store):
        assert store.list() == []

    def test_list_preserves_insertion_order(self, store):
        names = ["First", "Second", "Third"]
        for name in names:
            store.create({"name": name, "inspectionType": "acoustic", "anomalies": ["leaks"]})
        assert [u.name for u in store.list()] == names

    def test_list_returns_fresh_copies(self, store):
        store.create(_blade_scan())
        first = store.list()
        first[0].anomalies.append(Anomaly.WEAR)
        assert store.list()[0].anomalies == [Anomaly.CRACKS, Anomaly.DELAMINATION]

    @pytest.mark.parametrize("blob", ["not json", '{"a": 1}', '"text"'])
    def test_corrupt_slot_lists_empty_and_logs(self, store, storage, blob):
        """Test graceful degradation on a malformed blob."""
        storage.set(KEY, blob)
        with patch("src.core.dao.logger") as mock_logger:
            assert store.list() == []
        mock_logger.log_slot_read_error.assert_called_once()
        assert storage.get(KEY) == blob, "Corrupt blob should not be rewritten by list()"

    def test_reads_blob_written_by_browser(self, store, storage):
        storage.set(KEY, json.dumps([{
            "id": "k3j9x2a",
            "name": "Legacy",
            "inspectionType": "thermal",
            "anomalies": ["hotspots"],
            "createdAt": "2026-10-19T10:00:00.000Z",
        }]))
        [use_case] = store.list()
        assert use_case.id == "k3j9x2a"
        assert use_case.created_at == FIXED_TIME

    def test_count(self, store):
        store.create(_blade_scan())
        assert store.count() == 1


class TestDelete:
    """UseCaseStore.delete"""

    def test_blade_scan_scenario(self, store):
        """Create, delete, then delete again."""
        created = store.create(_blade_scan())
        [listed] = store.list()
        assert listed.name == "Blade Scan"

        assert store.delete(created.id) is True
        assert store.list() == []
        assert store.delete(created.id) is False

    def test_delete_removes_only_matching_record(self, store):
        keep = store.create({"name": "Keep", "inspectionType": "visual", "anomalies": ["wear"]})
        drop = store.create({"name": "Drop", "inspectionType": "visual", "anomalies": ["wear"]})
        assert store.delete(drop.id)
        assert store.list() == [keep]

    def test_delete_unknown_id_does_not_write(self):
        storage = MagicMock()
        storage.get.return_value = "[]"
        store = UseCaseStore(storage=storage, key=KEY)
        assert store.delete("missing") is False
        storage.set.assert_not_called()

    def test_delete_uses_exact_string_match(self, store):
        created = store.create(_blade_scan())
        assert store.delete(created.id.upper() + " ") is False
        assert len(store.list()) == 1


class TestConcurrentWriters:
    """Two stores sharing one slot."""

    def test_interleaved_read_modify_write_is_last_write_wins(self, storage):
        """A stale writer overwrites the other writer's change."""
        store_a = UseCaseStore(storage=storage, key=KEY)
        store_b = UseCaseStore(storage=storage, key=KEY)
        stale = store_b.list()

        created = store_a.create(_blade_scan())
        # store_b writes back the collection it read before store_a's create
        store_b._write(stale)

        assert created not in store_a.list()


class TestObservers:
    """subscribe / unsubscribe"""

    def test_listener_notified_on_create_and_delete(self, store):
        events = []
        store.subscribe(lambda op, use_case_id: events.append((op, use_case_id)))
        created = store.create(_blade_scan())
        store.delete(created.id)
        assert events == [("create", created.id), ("delete", created.id)]

    def test_no_notification_on_failed_operations(self, store):
        listener = MagicMock()
        store.subscribe(listener)
        with pytest.raises(UseCaseValidationError):
            store.create({"name": "A"})
        store.delete("missing")
        listener.assert_not_called()

    def test_unsubscribe_stops_notifications(self, store):
        listener = MagicMock()
        store.subscribe(listener)
        store.subscribe(listener)
        store.unsubscribe(listener)
        store.create(_blade_scan())
        listener.assert_not_called()

    def test_failing_listener_does_not_break_create(self, store):
        store.subscribe(MagicMock(side_effect=RuntimeError("view gone")))
        created = store.create(_blade_scan())
        assert store.list() == [created]
