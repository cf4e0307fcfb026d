# =============================================================================
# skysense_core/runtime.py
# Runtime Composition and Background Event Loop
# =============================================================================
"""
SkySenseApp wires the components together and reacts to state changes:

    state change --> persist settings cache
                 --> reminder scheduler refresh (arm / disarm)
                 --> notification permission handshake
                 --> debounced settings sync (once initialized)

BackgroundRuntime runs the app on its own event loop thread so a
synchronous front end (the Streamlit shell) can drive it.
"""

from __future__ import annotations
import asyncio
import concurrent.futures
import json
import threading
from datetime import datetime
from typing import Any, Awaitable, Callable, Optional

from skysense_core.api import ProfileAPI, ProfileAPIConfigManager
from skysense_core.config import AppConfig
from skysense_core.host import HostEnvironment
from skysense_core.logging import get_logger, setup_logging
from skysense_core.notifications import NotificationDispatcher, PermissionHandshake, ToastCenter
from skysense_core.offline import ConnectionManager
from skysense_core.services import (
    BootstrapSequencer,
    ProfileHydrator,
    ProfileService,
    ReminderScheduler,
    ServiceResult,
    SettingsSyncPipeline,
)
from skysense_core.state import AppScreen, AppState, BootstrapOutcome, StateManager, UserProfile
from skysense_core.storage import (
    LocalStateStore,
    ReminderMarkerStore,
    ReminderOccurrence,
    SQLiteStateStore,
    StorageKeys,
)

logger = get_logger(__name__)


class SkySenseApp:
    """
    Composed runtime core.

    Usage:
        app = SkySenseApp(config, api, store, host)
        outcome = await app.start()
        app.update_settings(medication_reminders=False)
        await app.shutdown()
    """

    def __init__(
        self,
        config: AppConfig,
        api: ProfileAPI,
        store: LocalStateStore,
        host: Optional[HostEnvironment] = None,
        clock: Callable[[], datetime] = datetime.now,
        toasts: Optional[ToastCenter] = None,
    ):
        self.config = config
        self.api = api
        self.store = store
        self.host = host or HostEnvironment.headless()
        self.toasts = toasts or ToastCenter()
        self.state_manager = StateManager()

        self.connection = ConnectionManager(api, timeout=config.probe_timeout)
        self.markers = ReminderMarkerStore(store, retention_days=config.marker_retention_days)
        self.dispatcher = NotificationDispatcher(self.host, self.toasts)
        self.hydrator = ProfileHydrator(
            api, self.state_manager, store, self.toasts, self.host,
            welcome_delay=config.welcome_toast_delay,
        )
        self.sequencer = BootstrapSequencer(
            self.connection, store, self.state_manager, self.hydrator, self.toasts, self.host,
            hydrate_when_offline=config.hydrate_when_offline,
        )
        self.scheduler = ReminderScheduler(
            self.state_manager, self.markers, self.dispatcher, self.toasts,
            clock=clock,
            interval=config.reminder_interval,
            snooze_minutes=config.snooze_minutes,
        )
        self.settings_sync = SettingsSyncPipeline(api, store, debounce=config.settings_debounce)
        self.permission = PermissionHandshake(
            self.host.permission, self.toasts, delay=config.permission_request_delay
        )
        self.profiles = ProfileService(
            api, self.state_manager, store, self.toasts, self.host, self.dispatcher
        )

        self.state_manager.register_callback(self._on_state_change)

    @property
    def state(self) -> AppState:
        return self.state_manager.state

    # -------------------------------------------------------------------------
    # LIFECYCLE
    # -------------------------------------------------------------------------

    async def start(self) -> BootstrapOutcome:
        return await self.sequencer.run()

    async def shutdown(self) -> None:
        """Cancel every timer owned by the runtime and release the client."""
        self.scheduler.stop()
        self.settings_sync.cancel()
        self.permission.cancel()
        self.hydrator.cancel()
        await asyncio.to_thread(self.api.close)
        logger.info("SkySense runtime stopped")

    def _on_state_change(self, old: AppState, new: AppState) -> None:
        if old.app_settings != new.app_settings:
            self.store.set(StorageKeys.SETTINGS_CACHE, json.dumps(new.app_settings.to_dict()))

        if not new.is_initialized:
            return

        self.scheduler.refresh(old)
        self.permission.maybe_request(new.app_settings)

        if not old.is_initialized or old.app_settings != new.app_settings:
            self.settings_sync.schedule(new.app_settings)

    # -------------------------------------------------------------------------
    # USER ACTIONS (call from the event loop)
    # -------------------------------------------------------------------------

    def navigate(self, screen: AppScreen) -> None:
        self.profiles.navigate(screen)

    def toggle_dark_mode(self) -> bool:
        return self.profiles.toggle_dark_mode()

    def update_settings(self, **changes: Any) -> AppState:
        return self.state_manager.update_settings(**changes)

    async def save_profile(self, profile: UserProfile) -> ServiceResult:
        return await self.profiles.save_profile(profile)

    def mark_taken(self, occurrence: ReminderOccurrence) -> None:
        self.scheduler.mark_taken(occurrence)

    def snooze(self, occurrence: ReminderOccurrence) -> None:
        self.scheduler.snooze(occurrence)

    def trigger_toast_action(self, toast_id: int) -> bool:
        return self.toasts.trigger_action(toast_id)


# =============================================================================
# BACKGROUND EVENT LOOP
# =============================================================================

class BackgroundRuntime:
    """
    Runs a SkySenseApp on a daemon thread with its own event loop.

    Usage:
        runtime = BackgroundRuntime(build_app())
        runtime.start().result(timeout=10)
        runtime.call(runtime.app.navigate, AppScreen.SETTINGS)
    """

    def __init__(self, app: SkySenseApp):
        self.app = app
        self.loop = asyncio.new_event_loop()
        self._thread = threading.Thread(target=self._run_loop, name="skysense-runtime", daemon=True)

    @property
    def is_running(self) -> bool:
        return self._thread.is_alive()

    def start(self) -> concurrent.futures.Future:
        """Start the loop thread and bootstrap the app; returns the outcome future."""
        if not self.is_running:
            self._thread.start()
        return self.submit(self.app.start())

    def submit(self, coro: Awaitable[Any]) -> concurrent.futures.Future:
        return asyncio.run_coroutine_threadsafe(coro, self.loop)

    def call(self, func: Callable[..., Any], *args: Any, timeout: Optional[float] = 10.0, **kwargs: Any) -> Any:
        """Run a plain function on the loop thread and wait for its result."""
        async def _invoke():
            return func(*args, **kwargs)
        return self.submit(_invoke()).result(timeout)

    def stop(self, timeout: float = 5.0) -> None:
        if not self.is_running:
            return
        self.submit(self.app.shutdown()).result(timeout)
        self.loop.call_soon_threadsafe(self.loop.stop)
        self._thread.join(timeout)

    def _run_loop(self) -> None:
        asyncio.set_event_loop(self.loop)
        self.loop.run_forever()


def build_app(
    config: Optional[AppConfig] = None,
    host: Optional[HostEnvironment] = None,
    store: Optional[LocalStateStore] = None,
) -> SkySenseApp:
    """Create a SkySenseApp from configuration (defaults: environment + SQLite store)."""
    config = config or AppConfig.from_env()
    setup_logging(level=config.log_level_value, log_to_file=config.log_to_file)

    api = ProfileAPIConfigManager(config).get_client()
    if store is None:
        store = SQLiteStateStore(config.db_path)
    logger.info(f"Building SkySense runtime (provider={config.api_provider})")
    return SkySenseApp(config, api, store, host=host)
