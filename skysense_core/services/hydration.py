# =============================================================================
# skysense_core/services/hydration.py
# Returning-User Hydration from the Remote Profile Service
# =============================================================================
"""
ProfileHydrator - pulls the remote profile and settings of a returning user
into the in-memory state.

The two fetches run concurrently and are independent: a failed profile load
never prevents the settings from being applied, and vice versa. Failures are
soft; the user keeps the locally cached data and sees one warning toast.
"""

from __future__ import annotations
import asyncio
import json
from typing import Any, Dict, Optional, Tuple

from skysense_core.api.base_client import ProfileAPI
from skysense_core.errors import HydrationError, handle_error
from skysense_core.host import HostEnvironment
from skysense_core.notifications.toasts import ToastCenter
from skysense_core.services.base_service import BaseService
from skysense_core.state import AppSettings, StateManager, UserProfile
from skysense_core.storage.local_store import LocalStateStore, StorageKeys


class ProfileHydrator(BaseService):
    """
    Usage:
        hydrator = ProfileHydrator(api, state_manager, store, toasts, host)
        profile_loaded, settings_loaded = await hydrator.hydrate(profile_id, dark_mode)
    """

    def __init__(
        self,
        api: ProfileAPI,
        state_manager: StateManager,
        store: LocalStateStore,
        toasts: ToastCenter,
        host: HostEnvironment,
        welcome_delay: float = 1.0,
    ):
        super().__init__()
        self.api = api
        self.state_manager = state_manager
        self.store = store
        self.toasts = toasts
        self.host = host
        self.welcome_delay = welcome_delay
        self._welcome_task: Optional[asyncio.Task] = None

    async def hydrate(self, profile_id: str, initial_dark_mode: bool) -> Tuple[bool, bool]:
        """
        Fetch and apply the remote profile and settings.

        Args:
            profile_id: Stored profile identifier
            initial_dark_mode: Theme already resolved and applied at bootstrap

        Returns:
            (profile_loaded, settings_loaded)
        """
        with self.log_operation(f"Hydrating profile {profile_id}"):
            profile_result, settings_result = await asyncio.gather(
                asyncio.to_thread(self.api.get_profile, profile_id),
                asyncio.to_thread(self.api.get_user_settings, profile_id),
                return_exceptions=True,
            )

            failed = []
            profile_loaded = settings_loaded = False

            if isinstance(profile_result, Exception):
                failed.append("profile")
                self.logger.warning(f"Profile fetch failed: {profile_result}")
            elif profile_result is not None:
                try:
                    self._apply_profile(profile_result)
                    profile_loaded = True
                except Exception as e:
                    failed.append("profile")
                    self.logger.warning(f"Profile could not be applied: {e}")

            if isinstance(settings_result, Exception):
                failed.append("settings")
                self.logger.warning(f"Settings fetch failed: {settings_result}")
            elif settings_result is not None:
                try:
                    self._apply_settings(settings_result, initial_dark_mode)
                    settings_loaded = True
                except Exception as e:
                    failed.append("settings")
                    self.logger.warning(f"Settings payload rejected: {e}")

            try:
                self.store.stamp(StorageKeys.LAST_SYNC)
            except Exception as e:
                failed.append("last_sync")
                self.logger.warning(f"Last sync time not stored: {e}")

            if failed:
                handle_error(
                    HydrationError(
                        "Could not hydrate from remote service",
                        profile_id=profile_id,
                        failed=failed,
                    ),
                    self.toasts,
                    title="Sync Warning",
                    user_message="Could not sync latest data. Using local version.",
                    level="warning",
                )

        return profile_loaded, settings_loaded

    def cancel(self) -> None:
        """Drop a welcome toast that has not been shown yet."""
        if self._welcome_task is not None and not self._welcome_task.done():
            self._welcome_task.cancel()
        self._welcome_task = None

    # -------------------------------------------------------------------------
    # APPLY
    # -------------------------------------------------------------------------

    def _apply_profile(self, profile: UserProfile) -> None:
        self.state_manager.replace_profile(profile)
        self.store.set(StorageKeys.PROFILE_CACHE, json.dumps(profile.to_dict()))
        self._welcome_task = asyncio.get_running_loop().create_task(
            self._welcome_later(), name="welcome-toast"
        )

    def _apply_settings(self, payload: Dict[str, Any], initial_dark_mode: bool) -> None:
        updates = AppSettings.partial_from_dict(payload)
        updates.setdefault("medication_reminders", True)
        # The theme resolved at startup wins over the stored remote value
        updates["dark_mode"] = initial_dark_mode

        merged = self.state_manager.state.app_settings.merge(updates)
        self.state_manager.update(app_settings=merged)

        if merged.dark_mode != self.state_manager.state.is_dark_mode:
            self.host.apply_theme(merged.dark_mode)
            self.store.set_flag(StorageKeys.DARK_MODE, merged.dark_mode)
            self.state_manager.update(is_dark_mode=merged.dark_mode)

    async def _welcome_later(self) -> None:
        await asyncio.sleep(self.welcome_delay)
        self.toasts.success(
            "Welcome back to SkySense!",
            "Your health profile has been restored.",
        )
