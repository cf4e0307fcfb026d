# =============================================================================
# skysense_core/services/bootstrap.py
# Startup Sequencing: Connectivity, Local Keys, Theme, Hydration
# =============================================================================
"""
BootstrapSequencer - runs once per process and decides how the app starts.

    probe backend --> read local keys --> resolve theme --> select screen
                                                               |
                                     returning user? --> hydrate (soft)

Whatever happens, the sequencer finishes with ``is_loading=False`` and
``is_initialized=True`` so the app never stays on a blank screen.
"""

from __future__ import annotations
import asyncio
import json
from dataclasses import dataclass
from typing import Optional

from skysense_core.errors import ProfileValidationError, handle_error
from skysense_core.host import HostEnvironment
from skysense_core.notifications.toasts import ToastCenter
from skysense_core.offline.connection_manager import ConnectionManager
from skysense_core.services.base_service import BaseService
from skysense_core.services.hydration import ProfileHydrator
from skysense_core.state import (
    AppScreen,
    AppSettings,
    BootstrapOutcome,
    Connectivity,
    StateManager,
    UserKind,
    UserProfile,
)
from skysense_core.storage.local_store import LocalStateStore, StorageKeys

INIT_ERROR_MESSAGE = "Failed to initialize app. Please refresh and try again."


@dataclass(frozen=True)
class LocalSnapshot:
    """Local keys read at startup."""
    dark_mode: Optional[bool]
    profile_id: Optional[str]
    onboarding_complete: bool
    last_sync: Optional[str]
    cached_profile: Optional[str]
    cached_settings: Optional[str]

    @property
    def is_returning(self) -> bool:
        return self.onboarding_complete and bool(self.profile_id)


class BootstrapSequencer(BaseService):
    """
    Usage:
        sequencer = BootstrapSequencer(connection, store, state_manager, hydrator, toasts, host)
        outcome = await sequencer.run()
        outcome.mode  # StartupMode.ONLINE_SYNCED / ONLINE_DEGRADED / OFFLINE_FIRST
    """

    def __init__(
        self,
        connection: ConnectionManager,
        store: LocalStateStore,
        state_manager: StateManager,
        hydrator: ProfileHydrator,
        toasts: ToastCenter,
        host: HostEnvironment,
        hydrate_when_offline: bool = True,
    ):
        super().__init__()
        self.connection = connection
        self.store = store
        self.state_manager = state_manager
        self.hydrator = hydrator
        self.toasts = toasts
        self.host = host
        self.hydrate_when_offline = hydrate_when_offline
        self._task: Optional[asyncio.Task] = None

    @property
    def outcome(self) -> Optional[BootstrapOutcome]:
        if self._task is None or not self._task.done() or self._task.cancelled():
            return None
        return self._task.result()

    async def run(self) -> BootstrapOutcome:
        """Run the startup sequence; later calls return the first outcome."""
        if self._task is None:
            self._task = asyncio.get_running_loop().create_task(self._run_once(), name="bootstrap")
        return await self._task

    async def _run_once(self) -> BootstrapOutcome:
        connectivity = Connectivity.UNREACHABLE
        user_kind = UserKind.NEW
        profile_loaded = settings_loaded = False
        failed = False

        self.state_manager.update(is_loading=True)
        try:
            with self.log_operation("Bootstrapping app"):
                connectivity = await self.connection.probe()
                if connectivity is Connectivity.UNREACHABLE:
                    self.toasts.info(
                        "Running in offline mode",
                        "Some features may be limited until connection is restored.",
                    )

                local = self._read_local()
                dark_mode = local.dark_mode if local.dark_mode is not None else bool(self.host.prefers_dark())
                self.host.apply_theme(dark_mode)
                self.state_manager.update(is_dark_mode=dark_mode)

                if local.is_returning:
                    user_kind = UserKind.RETURNING
                    self._restore_cache(local)
                    self.state_manager.update(current_screen=AppScreen.HOME)

                    if connectivity is Connectivity.REACHABLE or self.hydrate_when_offline:
                        profile_loaded, settings_loaded = await self.hydrator.hydrate(
                            local.profile_id, dark_mode
                        )
                    else:
                        self.logger.info("Backend unreachable, skipping hydration")

                self.state_manager.update_settings(dark_mode=dark_mode)
        except Exception as e:
            failed = True
            handle_error(
                e,
                self.toasts,
                title="Initialization Error",
                user_message="App started with limited functionality. Please refresh if issues persist.",
                level="error",
            )
            self.state_manager.update(current_screen=AppScreen.HOME, error=INIT_ERROR_MESSAGE)
        finally:
            self.state_manager.update(is_loading=False, is_initialized=True)

        outcome = BootstrapOutcome(
            connectivity=connectivity,
            user_kind=user_kind,
            profile_loaded=profile_loaded,
            settings_loaded=settings_loaded,
            failed=failed,
        )
        self.logger.info(f"App started in {outcome.mode.value} mode ({user_kind.value} user)")
        return outcome

    def _read_local(self) -> LocalSnapshot:
        return LocalSnapshot(
            dark_mode=self.store.get_flag(StorageKeys.DARK_MODE),
            profile_id=self.store.get(StorageKeys.PROFILE_ID),
            onboarding_complete=self.store.get_flag(StorageKeys.ONBOARDING_COMPLETE) is True,
            last_sync=self.store.get(StorageKeys.LAST_SYNC),
            cached_profile=self.store.get(StorageKeys.PROFILE_CACHE),
            cached_settings=self.store.get(StorageKeys.SETTINGS_CACHE),
        )

    def _restore_cache(self, local: LocalSnapshot) -> None:
        """Load the last-known profile and settings kept on this device."""
        try:
            if local.cached_profile:
                self.state_manager.replace_profile(UserProfile.from_dict(json.loads(local.cached_profile)))
            if local.cached_settings:
                self.state_manager.update(
                    app_settings=AppSettings.from_dict(json.loads(local.cached_settings))
                )
        except (ValueError, ProfileValidationError) as e:
            self.logger.warning(f"Ignoring unreadable local cache: {e}")
        else:
            if local.last_sync:
                self.logger.info(f"Restored local data (last sync {local.last_sync})")
