# =============================================================================
# tests/unit/test_local_store.py
# Unit Tests for the Local State Store and Reminder Markers
# =============================================================================

from datetime import date

import pytest

from skysense_core.storage import (
    InMemoryStateStore,
    ReminderMarkerStore,
    ReminderOccurrence,
    SQLiteStateStore,
    StorageKeys,
)


@pytest.fixture(params=["memory", "sqlite"])
def store(request, tmp_path):
    if request.param == "memory":
        yield InMemoryStateStore()
    else:
        sqlite_store = SQLiteStateStore(tmp_path / "state.db")
        yield sqlite_store
        sqlite_store.close()


class TestLocalStateStore:
    """Behaviour shared by every store backend"""

    def test_get_missing_returns_none(self, store):
        assert store.get(StorageKeys.PROFILE_ID) is None

    def test_set_replaces_value(self, store):
        store.set(StorageKeys.PROFILE_ID, "a")
        store.set(StorageKeys.PROFILE_ID, "b")
        assert store.get(StorageKeys.PROFILE_ID) == "b"

    def test_flags_are_string_encoded(self, store):
        assert store.get_flag(StorageKeys.DARK_MODE) is None
        store.set_flag(StorageKeys.DARK_MODE, True)
        assert store.get(StorageKeys.DARK_MODE) == "true"
        assert store.get_flag(StorageKeys.DARK_MODE) is True

    def test_remove(self, store):
        store.set("k", "v")
        store.remove("k")
        store.remove("k")
        assert store.get("k") is None

    def test_keys_by_prefix_treats_wildcards_literally(self, store):
        store.set("medication_reminder|x", "sent")
        store.set("medicationXreminder|y", "sent")
        assert store.keys("medication_reminder|") == ["medication_reminder|x"]


class TestSQLitePersistence:
    """Values survive a new store instance on the same file"""

    def test_reopen(self, tmp_path):
        path = tmp_path / "state.db"
        first = SQLiteStateStore(path)
        first.set(StorageKeys.ONBOARDING_COMPLETE, "true")
        first.close()

        second = SQLiteStateStore(path)
        assert second.get(StorageKeys.ONBOARDING_COMPLETE) == "true"
        second.close()


class TestReminderMarkers:
    """Test idempotency markers"""

    def test_occurrence_key_round_trip(self):
        occurrence = ReminderOccurrence("med|with|pipes", date(2024, 5, 1), "08:00")
        assert ReminderOccurrence.parse(occurrence.key) == occurrence

    def test_dispatch_marker(self, store):
        markers = ReminderMarkerStore(store)
        occurrence = ReminderOccurrence("med-inhaler", date(2024, 5, 1), "08:00")

        assert not markers.has_dispatched(occurrence)
        markers.record_dispatch(occurrence)
        assert markers.has_dispatched(occurrence)
        assert not markers.is_taken(occurrence)

    def test_taken_marker_is_separate(self, store):
        markers = ReminderMarkerStore(store)
        occurrence = ReminderOccurrence("med-inhaler", date(2024, 5, 1), "08:00")

        markers.record_taken(occurrence)

        assert markers.is_taken(occurrence)
        assert not markers.has_dispatched(occurrence)

    def test_markers_are_per_day_and_minute(self, store):
        markers = ReminderMarkerStore(store)
        markers.record_dispatch(ReminderOccurrence("m", date(2024, 5, 1), "08:00"))

        assert not markers.has_dispatched(ReminderOccurrence("m", date(2024, 5, 2), "08:00"))
        assert not markers.has_dispatched(ReminderOccurrence("m", date(2024, 5, 1), "08:01"))

    def test_prune_removes_markers_outside_retention(self, store):
        markers = ReminderMarkerStore(store, retention_days=7)
        old = ReminderOccurrence("m", date(2024, 4, 20), "08:00")
        recent = ReminderOccurrence("m", date(2024, 4, 28), "08:00")
        markers.record_dispatch(old)
        markers.record_taken(old)
        markers.record_dispatch(recent)
        store.set("medication_reminder|garbage", "sent")

        removed = markers.prune(date(2024, 5, 1))

        assert removed == 3
        assert markers.has_dispatched(recent)
        assert not markers.has_dispatched(old)
