# =============================================================================
# skysense_core/services/settings_sync.py
# Debounced Settings Synchronization
# =============================================================================
"""
SettingsSyncPipeline - pushes settings to the remote service once edits
pause.

Every ``schedule()`` restarts the debounce window and replaces the pending
snapshot, so a burst of toggles produces a single save carrying the last
state. A failed save is logged and dropped; the next edit tries again.
"""

from __future__ import annotations
import asyncio
from typing import Optional

from skysense_core.api.base_client import ProfileAPI
from skysense_core.errors import SettingsSyncError, handle_error
from skysense_core.services.base_service import BaseService, ServiceResult
from skysense_core.services.timers import DebounceTimer
from skysense_core.state import AppSettings
from skysense_core.storage.local_store import LocalStateStore, StorageKeys


class SettingsSyncPipeline(BaseService):

    def __init__(self, api: ProfileAPI, store: LocalStateStore, debounce: float = 1.0):
        super().__init__()
        self.api = api
        self.store = store
        self._pending: Optional[AppSettings] = None
        self._timer = DebounceTimer(debounce, self.flush, name="settings-sync")
        self.last_result: Optional[ServiceResult] = None

    @property
    def pending(self) -> bool:
        return self._timer.pending

    def schedule(self, settings: AppSettings) -> None:
        """Queue a snapshot for upload. Must be called from the event loop."""
        self._pending = settings
        self._timer.trigger()

    def cancel(self) -> None:
        self._timer.cancel()
        self._pending = None

    async def flush(self) -> ServiceResult:
        """Upload the latest queued snapshot now."""
        settings, self._pending = self._pending, None
        if settings is None:
            return ServiceResult.ok()

        profile_id = self.store.get(StorageKeys.PROFILE_ID)
        if not profile_id:
            self.logger.debug("No profile id stored, settings stay local")
            self.last_result = ServiceResult.ok(metadata={"skipped": True})
            return self.last_result

        try:
            await asyncio.to_thread(self.api.save_settings, profile_id, settings)
        except Exception as e:
            error = SettingsSyncError(f"Failed to sync settings: {e}", profile_id=profile_id)
            handle_error(error)
            self.last_result = ServiceResult.from_exception(error)
        else:
            self.logger.info(f"Settings synced for profile {profile_id}")
            self.last_result = ServiceResult.ok(settings)
        return self.last_result
