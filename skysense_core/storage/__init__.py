# =============================================================================
# skysense_core/storage/__init__.py
# Local Persistence
# =============================================================================

from .local_store import (
    LocalStateStore,
    InMemoryStateStore,
    SQLiteStateStore,
    StorageKeys,
)
from .markers import ReminderMarkerStore, ReminderOccurrence

__all__ = [
    "LocalStateStore",
    "InMemoryStateStore",
    "SQLiteStateStore",
    "StorageKeys",
    "ReminderMarkerStore",
    "ReminderOccurrence",
]
