# =============================================================================
# skysense_core/storage/markers.py
# Idempotency Markers for Medication Reminders
# =============================================================================
"""
ReminderMarkerStore - persisted sentinels proving a reminder occurrence was
already dispatched (and, separately, acknowledged as taken).

An occurrence is identified by (medication id, calendar date, "HH:MM").
Markers older than the retention window are pruned by date so the key
space does not grow without bound.
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Optional

from skysense_core.logging import get_logger
from skysense_core.storage.local_store import LocalStateStore

logger = get_logger(__name__)

DISPATCH_PREFIX = "medication_reminder|"
TAKEN_PREFIX = "medication_taken|"


@dataclass(frozen=True)
class ReminderOccurrence:
    """One scheduled firing of one medication."""
    medication_id: str
    day: date
    time: str

    @property
    def key(self) -> str:
        # medication id last: ids may contain the separator
        return f"{self.day.isoformat()}|{self.time}|{self.medication_id}"

    @classmethod
    def parse(cls, key: str) -> Optional[ReminderOccurrence]:
        parts = key.split("|", 2)
        if len(parts) != 3:
            return None
        try:
            day = date.fromisoformat(parts[0])
        except ValueError:
            return None
        return cls(medication_id=parts[2], day=day, time=parts[1])


class ReminderMarkerStore:
    """Dispatch and taken markers kept in the local state store."""

    def __init__(self, store: LocalStateStore, retention_days: int = 7):
        self.store = store
        self.retention_days = retention_days

    def has_dispatched(self, occurrence: ReminderOccurrence) -> bool:
        return self.store.get(DISPATCH_PREFIX + occurrence.key) is not None

    def record_dispatch(self, occurrence: ReminderOccurrence) -> None:
        self.store.set(DISPATCH_PREFIX + occurrence.key, "sent")

    def is_taken(self, occurrence: ReminderOccurrence) -> bool:
        return self.store.get(TAKEN_PREFIX + occurrence.key) is not None

    def record_taken(self, occurrence: ReminderOccurrence, when: Optional[datetime] = None) -> None:
        self.store.stamp(TAKEN_PREFIX + occurrence.key, when)

    def prune(self, today: date) -> int:
        """
        Delete markers dated before the retention window.

        Args:
            today: Current local date

        Returns:
            Number of markers removed
        """
        cutoff = today - timedelta(days=self.retention_days)
        removed = 0

        for prefix in (DISPATCH_PREFIX, TAKEN_PREFIX):
            for key in self.store.keys(prefix):
                occurrence = ReminderOccurrence.parse(key[len(prefix):])
                if occurrence is None or occurrence.day < cutoff:
                    self.store.remove(key)
                    removed += 1

        if removed:
            logger.info(f"Pruned {removed} reminder markers older than {cutoff.isoformat()}")
        return removed
