# =============================================================================
# skysense_core/services/profile_service.py
# Profile Save, Theme Toggle and Navigation
# =============================================================================

from __future__ import annotations
import asyncio
import json
import random
import string
import time

from skysense_core.api.base_client import ProfileAPI
from skysense_core.errors import ProfileSaveError, handle_error
from skysense_core.host import HostEnvironment
from skysense_core.notifications.channels import NAVIGATION_TICK, TOGGLE_TICK
from skysense_core.notifications.dispatcher import NotificationDispatcher
from skysense_core.notifications.toasts import ToastCenter
from skysense_core.services.base_service import BaseService, ServiceResult
from skysense_core.state import AppScreen, StateManager, UserProfile
from skysense_core.storage.local_store import LocalStateStore, StorageKeys

_BASE36 = string.digits + string.ascii_lowercase


def local_profile_id() -> str:
    """Identifier for a profile that only exists on this device."""
    suffix = "".join(random.choice(_BASE36) for _ in range(9))
    return f"local_profile_{int(time.time() * 1000)}_{suffix}"


class ProfileService(BaseService):
    """
    User-driven profile operations.

    Usage:
        service = ProfileService(api, state_manager, store, toasts, host, dispatcher)
        result = await service.save_profile(profile)
        result.data  # stored profile id (remote or local fallback)
    """

    def __init__(
        self,
        api: ProfileAPI,
        state_manager: StateManager,
        store: LocalStateStore,
        toasts: ToastCenter,
        host: HostEnvironment,
        dispatcher: NotificationDispatcher,
    ):
        super().__init__()
        self.api = api
        self.state_manager = state_manager
        self.store = store
        self.toasts = toasts
        self.host = host
        self.dispatcher = dispatcher

    async def save_profile(self, profile: UserProfile) -> ServiceResult:
        """
        Save the profile remotely, falling back to a device-local id.

        Either way the user finishes onboarding and lands on the home screen.
        """
        self.state_manager.update(is_loading=True)
        self.state_manager.replace_profile(profile)

        try:
            try:
                response = await asyncio.to_thread(self.api.save_profile, profile)
                if not response.success:
                    raise ProfileSaveError("Profile save was not successful")
            except Exception as e:
                handle_error(e if isinstance(e, ProfileSaveError) else ProfileSaveError(f"Failed to save profile: {e}"))
                profile_id = local_profile_id()
                self.store.set(StorageKeys.PROFILE_ID, profile_id)
                self.store.set_flag(StorageKeys.ONBOARDING_COMPLETE, True)
                self.toasts.warning(
                    "Saved locally",
                    "Profile saved on device. Will sync when connection is restored.",
                )
                result = ServiceResult.fail(
                    "Profile saved locally",
                    error_code="SYNC_002",
                    data=profile_id,
                    metadata={"local": True},
                )
            else:
                profile_id = response.identifier
                if profile_id:
                    self.store.set(StorageKeys.PROFILE_ID, profile_id)
                    self.store.stamp(StorageKeys.LAST_SYNC)
                    self.logger.info(f"Profile ID stored: {profile_id}")
                self.store.set_flag(StorageKeys.ONBOARDING_COMPLETE, True)
                self.toasts.success(
                    "Profile saved successfully!",
                    "Your health preferences have been updated.",
                )
                result = ServiceResult.ok(profile_id)

            self.store.set(StorageKeys.PROFILE_CACHE, json.dumps(profile.to_dict()))
            self.navigate(AppScreen.HOME)
            return result
        finally:
            self.state_manager.update(is_loading=False)

    def toggle_dark_mode(self) -> bool:
        """Flip the theme, persist it and return the new value."""
        dark_mode = not self.state_manager.state.is_dark_mode
        self.state_manager.update(is_dark_mode=dark_mode)
        self.host.apply_theme(dark_mode)
        self.store.set_flag(StorageKeys.DARK_MODE, dark_mode)
        self.state_manager.update_settings(dark_mode=dark_mode)

        self.dispatcher.pulse(TOGGLE_TICK)
        self.toasts.success(
            f"{'Dark' if dark_mode else 'Light'} mode enabled",
            "Theme preference saved",
        )
        return dark_mode

    def navigate(self, screen: AppScreen) -> None:
        self.dispatcher.pulse(NAVIGATION_TICK)
        self.state_manager.update(current_screen=AppScreen(screen))
        self.logger.info(f"Navigated to: {AppScreen(screen).value}")
