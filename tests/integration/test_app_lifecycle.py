# =============================================================================
# tests/integration/test_app_lifecycle.py
# Integration Tests for the Composed Runtime (Bootstrap → Reminders → Sync)
# =============================================================================

import asyncio
import dataclasses
import json
from datetime import date

import pytest

from skysense_core.api import MockProfileAPI
from skysense_core.runtime import BackgroundRuntime, SkySenseApp
from skysense_core.state import AppScreen, AppSettings, Medication, StartupMode, UserProfile
from skysense_core.storage import ReminderOccurrence, SQLiteStateStore, StorageKeys

from conftest import run, seed_returning_user, toast_titles


class TestReturningUserLifecycle:
    """
    Integration tests for a returning user.

    Tests the flow:
    1. Bootstrap with hydration
    2. Reminder dispatch on the due minute
    3. Debounced settings sync after edits
    4. Shutdown cancels every timer
    """

    @pytest.fixture
    def returning_app(self, fast_config, mock_api, memory_store, capturing_host, frozen_clock, sample_profile):
        profile_id = seed_returning_user(memory_store)
        mock_api.profiles[profile_id] = sample_profile.to_dict()
        mock_api.settings[profile_id] = AppSettings().to_dict()
        return SkySenseApp(fast_config, mock_api, memory_store, host=capturing_host, clock=frozen_clock)

    def test_startup_dispatches_due_reminder_once(self, returning_app, memory_store, frozen_clock):
        async def scenario():
            outcome = await returning_app.start()
            await asyncio.sleep(0.2)
            await returning_app.shutdown()
            return outcome

        outcome = run(scenario())

        assert outcome.mode is StartupMode.ONLINE_SYNCED
        assert returning_app.state.current_screen is AppScreen.HOME
        titles = toast_titles(returning_app.toasts)
        assert titles.count("💊 Time for Inhaler") == 1
        assert "Welcome back to SkySense!" in titles
        occurrence = ReminderOccurrence("med-inhaler", date(2024, 5, 1), "08:00")
        assert returning_app.markers.has_dispatched(occurrence)

    def test_restart_in_same_minute_does_not_redispatch(
        self, fast_config, mock_api, memory_store, capturing_host, frozen_clock, returning_app
    ):
        async def session(app):
            await app.start()
            await asyncio.sleep(0.1)
            await app.shutdown()

        run(session(returning_app))
        reloaded = SkySenseApp(fast_config, mock_api, memory_store, host=capturing_host, clock=frozen_clock)
        run(session(reloaded))

        assert toast_titles(reloaded.toasts).count("💊 Time for Inhaler") == 0

    def test_disabling_reminders_stops_dispatch(self, returning_app, frozen_clock, sample_profile):
        async def scenario():
            await returning_app.start()
            await asyncio.sleep(0.05)
            returning_app.update_settings(medication_reminders=False)
            assert not returning_app.scheduler.is_armed

            # Next day, same minute: still nothing while disabled
            frozen_clock.advance(days=1)
            await asyncio.sleep(0.1)
            count_disabled = toast_titles(returning_app.toasts).count("💊 Time for Inhaler")

            returning_app.update_settings(medication_reminders=True)
            await asyncio.sleep(0.05)
            count_enabled = toast_titles(returning_app.toasts).count("💊 Time for Inhaler")
            await returning_app.shutdown()
            return count_disabled, count_enabled

        count_disabled, count_enabled = run(scenario())

        assert count_disabled == 1
        assert count_enabled == 2

    def test_medication_added_mid_minute_is_reminded(
        self, fast_config, mock_api, memory_store, capturing_host, frozen_clock, sample_profile, inhaler
    ):
        profile_id = seed_returning_user(memory_store)
        mock_api.profiles[profile_id] = sample_profile.to_dict()
        slow_tick = dataclasses.replace(fast_config, reminder_interval=60.0)
        app = SkySenseApp(slow_tick, mock_api, memory_store, host=capturing_host, clock=frozen_clock)
        pill = Medication(id="med-pill", name="Pill", times=("08:00",))

        async def scenario():
            await app.start()
            await asyncio.sleep(0.05)
            app.state_manager.replace_profile(UserProfile(medications=(inhaler, pill)))
            await asyncio.sleep(0.05)
            await app.shutdown()

        run(scenario())

        titles = toast_titles(app.toasts)
        assert titles.count("💊 Time for Inhaler") == 1
        assert titles.count("💊 Time for Pill") == 1

    def test_settings_edits_coalesce_into_one_save(self, returning_app, mock_api, memory_store):
        async def scenario():
            await returning_app.start()
            await asyncio.sleep(0.15)
            before = len(mock_api.calls_to("save_settings"))

            returning_app.update_settings(weather_alerts=False)
            returning_app.update_settings(air_quality_alerts=False)
            returning_app.update_settings(auto_refresh=False)
            await asyncio.sleep(0.15)
            await returning_app.shutdown()
            return before

        before = run(scenario())

        saves = mock_api.calls_to("save_settings")
        assert len(saves) == before + 1
        profile_id, settings = saves[-1]
        assert profile_id == "profile-123"
        assert (settings.weather_alerts, settings.air_quality_alerts, settings.auto_refresh) == (False, False, False)
        cached = json.loads(memory_store.get(StorageKeys.SETTINGS_CACHE))
        assert cached["autoRefresh"] is False

    def test_shutdown_cancels_pending_sync(self, returning_app, mock_api):
        async def scenario():
            await returning_app.start()
            await asyncio.sleep(0.15)
            before = len(mock_api.calls_to("save_settings"))
            returning_app.update_settings(location_sharing=False)
            await returning_app.shutdown()
            await asyncio.sleep(0.1)
            return before

        before = run(scenario())

        assert len(mock_api.calls_to("save_settings")) == before
        assert not returning_app.scheduler.is_armed


class TestNewUserLifecycle:

    def test_onboarding_to_first_reminder(self, fast_config, mock_api, memory_store, capturing_host,
                                          frozen_clock, sample_profile):
        app = SkySenseApp(fast_config, mock_api, memory_store, host=capturing_host, clock=frozen_clock)

        async def scenario():
            outcome = await app.start()
            assert app.state.current_screen is AppScreen.SPLASH
            assert not app.scheduler.is_armed

            app.navigate(AppScreen.HEALTH_PROFILE)
            result = await app.save_profile(sample_profile)
            await asyncio.sleep(0.1)
            await app.shutdown()
            return outcome, result

        outcome, result = run(scenario())

        assert outcome.mode is StartupMode.ONLINE_SYNCED
        assert result.success
        assert app.state.current_screen is AppScreen.HOME
        assert memory_store.get(StorageKeys.PROFILE_ID) == result.data
        assert toast_titles(app.toasts).count("💊 Time for Inhaler") == 1

    def test_offline_first_start_with_local_save(self, fast_config, memory_store, frozen_clock, sample_profile):
        api = MockProfileAPI(healthy=False, fail_operations={"save_profile", "save_settings"})
        app = SkySenseApp(fast_config, api, memory_store, clock=frozen_clock)

        async def scenario():
            outcome = await app.start()
            await app.save_profile(sample_profile)
            await asyncio.sleep(0.1)
            await app.shutdown()
            return outcome

        outcome = run(scenario())

        assert outcome.mode is StartupMode.OFFLINE_FIRST
        assert memory_store.get(StorageKeys.PROFILE_ID).startswith("local_profile_")
        titles = toast_titles(app.toasts)
        assert "Running in offline mode" in titles
        assert "Saved locally" in titles


class TestPermissionIntegration:

    def test_permission_requested_after_startup(self, fast_config, mock_api, memory_store, capturing_host):
        capturing_host.permission.state = "default"
        capturing_host.permission.response = "granted"
        app = SkySenseApp(fast_config, mock_api, memory_store, host=capturing_host)

        async def scenario():
            await app.start()
            await asyncio.sleep(0.1)
            await app.shutdown()

        run(scenario())

        assert capturing_host.permission.requests == 1
        assert "Notifications enabled" in toast_titles(app.toasts)


class TestBackgroundRuntime:

    def test_drive_app_from_another_thread(self, fast_config, mock_api, tmp_path, frozen_clock):
        store = SQLiteStateStore(tmp_path / "runtime.db")
        runtime = BackgroundRuntime(SkySenseApp(fast_config, mock_api, store, clock=frozen_clock))

        try:
            outcome = runtime.start().result(timeout=5)
            runtime.call(runtime.app.navigate, AppScreen.SETTINGS)
            dark = runtime.call(runtime.app.toggle_dark_mode)
        finally:
            runtime.stop()

        assert outcome.mode is StartupMode.ONLINE_SYNCED
        assert runtime.app.state.current_screen is AppScreen.SETTINGS
        assert dark is True
        assert store.get_flag(StorageKeys.DARK_MODE) is True
        assert not runtime.is_running
