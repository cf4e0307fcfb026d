# =============================================================================
# skysense_core/storage/local_store.py
# Durable Key/Value Store for Local App State
# =============================================================================
"""
LocalStateStore - string-keyed, string-valued persistence surviving restarts.

Holds the profile identifier, dark-mode flag, onboarding-complete flag,
last-sync timestamp, cached profile/settings and reminder markers.

Writes to distinct keys are independent; there are no multi-key
transactions.
"""

from __future__ import annotations
import sqlite3
import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

from skysense_core.errors import StorageError
from skysense_core.logging import get_logger

logger = get_logger(__name__)


class StorageKeys:
    """Well-known local keys."""
    DARK_MODE = "skysense_dark_mode"
    PROFILE_ID = "skysense_profile_id"
    ONBOARDING_COMPLETE = "skysense_onboarding_complete"
    LAST_SYNC = "skysense_last_sync"
    PROFILE_CACHE = "skysense_profile_cache"
    SETTINGS_CACHE = "skysense_settings_cache"


class LocalStateStore(ABC):
    """Abstract key/value surface."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the stored value or None."""

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store a value, replacing any previous one."""

    @abstractmethod
    def remove(self, key: str) -> None:
        """Delete a key if present."""

    @abstractmethod
    def keys(self, prefix: str = "") -> List[str]:
        """List keys starting with prefix."""

    def set_flag(self, key: str, value: bool) -> None:
        self.set(key, "true" if value else "false")

    def get_flag(self, key: str) -> Optional[bool]:
        """Read a boolean flag; None when the key was never written."""
        raw = self.get(key)
        if raw is None:
            return None
        return raw == "true"

    def stamp(self, key: str, when: Optional[datetime] = None) -> str:
        value = (when or datetime.now()).isoformat()
        self.set(key, value)
        return value


class InMemoryStateStore(LocalStateStore):
    """Process-local store (tests, demos, headless runs)."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self, prefix: str = "") -> List[str]:
        return [k for k in self._data if k.startswith(prefix)]

    def snapshot(self) -> Dict[str, str]:
        return dict(self._data)


class SQLiteStateStore(LocalStateStore):
    """
    SQLite-backed store in a single ``local_state`` table.

    Connections are thread-local so the UI thread and the runtime's event
    loop thread can both read and write.
    """

    SCHEMA = """
        CREATE TABLE IF NOT EXISTS local_state (
            key TEXT PRIMARY KEY,
            value TEXT NOT NULL,
            updated_at TEXT DEFAULT CURRENT_TIMESTAMP
        )
    """

    def __init__(self, db_path: Path):
        """
        Initialize local store.

        Args:
            db_path: Path to SQLite database file
        """
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._local = threading.local()
        self._initialized = False

    def _get_connection(self) -> sqlite3.Connection:
        """Get thread-local database connection."""
        if getattr(self._local, "connection", None) is None:
            self._local.connection = sqlite3.connect(str(self.db_path), check_same_thread=False)
            self._local.connection.row_factory = sqlite3.Row
        return self._local.connection

    @contextmanager
    def transaction(self):
        """Context manager for a single-statement write."""
        conn = self._get_connection()
        try:
            yield conn
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            raise StorageError(f"Local store write failed: {e}") from e

    def initialize(self) -> None:
        """Create the schema."""
        if self._initialized:
            return

        with self.transaction() as conn:
            conn.execute(self.SCHEMA)

        self._initialized = True
        logger.info(f"Local state store initialized at: {self.db_path}")

    def get(self, key: str) -> Optional[str]:
        self.initialize()
        try:
            row = self._get_connection().execute(
                "SELECT value FROM local_state WHERE key = ?", [key]
            ).fetchone()
        except sqlite3.Error as e:
            raise StorageError(f"Local store read failed: {e}", key=key) from e
        return row["value"] if row else None

    def set(self, key: str, value: str) -> None:
        self.initialize()
        with self.transaction() as conn:
            conn.execute(
                """
                INSERT OR REPLACE INTO local_state (key, value, updated_at)
                VALUES (?, ?, ?)
                """,
                [key, value, datetime.now().isoformat()],
            )

    def remove(self, key: str) -> None:
        self.initialize()
        with self.transaction() as conn:
            conn.execute("DELETE FROM local_state WHERE key = ?", [key])

    def keys(self, prefix: str = "") -> List[str]:
        self.initialize()
        escaped = prefix.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
        rows = self._get_connection().execute(
            "SELECT key FROM local_state WHERE key LIKE ? ESCAPE '\\' ORDER BY key",
            [f"{escaped}%"],
        ).fetchall()
        return [row["key"] for row in rows]

    def close(self) -> None:
        """Close this thread's database connection."""
        if getattr(self._local, "connection", None) is not None:
            self._local.connection.close()
            self._local.connection = None
