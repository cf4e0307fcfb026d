# =============================================================================
# tests/unit/test_models.py
# Unit Tests for Domain Models and the State Manager
# =============================================================================

import pytest

from skysense_core.errors import ProfileValidationError
from skysense_core.state import (
    AppScreen,
    AppSettings,
    AppState,
    BootstrapOutcome,
    Connectivity,
    Medication,
    StartupMode,
    StateManager,
    UserKind,
    UserProfile,
)


class TestMedication:
    """Test medication validation"""

    def test_rejects_malformed_time(self):
        with pytest.raises(ProfileValidationError):
            Medication(id="m1", name="Inhaler", times=("8:00",))

    def test_rejects_out_of_range_time(self):
        with pytest.raises(ProfileValidationError):
            Medication(id="m1", name="Inhaler", times=("24:00",))

    def test_rejects_empty_id(self):
        with pytest.raises(ProfileValidationError):
            Medication(id="", name="Inhaler")

    def test_duplicate_times_collapse(self):
        med = Medication(id="m1", name="Inhaler", times=("08:00", "20:00", "08:00"))
        assert med.times == ("08:00", "20:00")

    def test_inactive_medication_is_never_due(self):
        med = Medication(id="m1", name="Inhaler", times=("08:00",), is_active=False)
        assert not med.is_due_at("08:00")

    def test_wire_form_uses_camel_case(self, inhaler):
        data = inhaler.to_dict()
        assert data["isActive"] is True
        assert Medication.from_dict(data) == inhaler


class TestUserProfile:
    """Test profile invariants and wire conversion"""

    def test_duplicate_medication_ids_rejected(self, inhaler):
        with pytest.raises(ProfileValidationError):
            UserProfile(medications=(inhaler, inhaler))

    def test_wire_round_trip_preserves_medication_order(self, inhaler):
        second = Medication(id="med-2", name="Antihistamine", times=("21:30",))
        profile = UserProfile(has_uv_sensitivity=True, medications=(second, inhaler))

        data = profile.to_dict()
        assert data["hasUVSensitivity"] is True
        restored = UserProfile.from_dict(data)
        assert restored == profile
        assert [m.id for m in restored.medications] == ["med-2", "med-inhaler"]

    def test_missing_medications_become_empty(self):
        profile = UserProfile.from_dict({"hasAsthma": True})
        assert profile.has_asthma
        assert profile.medications == ()

    def test_merge_with_null_medications(self, sample_profile):
        assert sample_profile.merge({"medications": None}).medications == ()

    def test_active_medications_filter(self, inhaler):
        paused = Medication(id="m2", name="Paused", times=("09:00",), is_active=False)
        profile = UserProfile(medications=(inhaler, paused))
        assert profile.active_medications == (inhaler,)


class TestAppSettings:
    """Test settings defaults and merging"""

    def test_defaults(self):
        settings = AppSettings()
        assert settings.dark_mode is False
        assert settings.community_updates is False
        assert settings.medication_reminders is True
        assert settings.voice_assistant is True

    def test_partial_payload_ignores_unset_keys(self):
        updates = AppSettings.partial_from_dict({"weatherAlerts": False, "darkMode": None, "extra": 1})
        assert updates == {"weather_alerts": False}

    def test_merge_rejects_unknown_field(self):
        with pytest.raises(ProfileValidationError):
            AppSettings().merge({"telemetry": True})

    def test_camel_case_round_trip(self):
        settings = AppSettings(dark_mode=True, auto_refresh=False)
        assert settings.to_dict()["airQualityAlerts"] is True
        assert AppSettings.from_dict(settings.to_dict()) == settings


class TestBootstrapOutcome:
    """Test startup mode derivation"""

    def test_unreachable_is_offline_first(self):
        outcome = BootstrapOutcome(Connectivity.UNREACHABLE, UserKind.RETURNING, True, True)
        assert outcome.mode is StartupMode.OFFLINE_FIRST

    def test_returning_with_partial_hydration_is_degraded(self):
        outcome = BootstrapOutcome(Connectivity.REACHABLE, UserKind.RETURNING, True, False)
        assert outcome.mode is StartupMode.ONLINE_DEGRADED

    def test_new_user_online_is_synced(self):
        outcome = BootstrapOutcome(Connectivity.REACHABLE, UserKind.NEW)
        assert outcome.mode is StartupMode.ONLINE_SYNCED

    def test_failure_is_degraded(self):
        outcome = BootstrapOutcome(Connectivity.REACHABLE, UserKind.NEW, failed=True)
        assert outcome.mode is StartupMode.ONLINE_DEGRADED


class TestStateManager:
    """Test merge replacement and callbacks"""

    def test_updates_produce_new_snapshots(self):
        manager = StateManager()
        before = manager.state
        manager.update_settings(weather_alerts=False)

        assert before.app_settings.weather_alerts is True
        assert manager.state.app_settings.weather_alerts is False
        assert manager.state is not before

    def test_callback_receives_old_and_new(self):
        manager = StateManager()
        seen = []
        manager.register_callback(lambda old, new: seen.append((old.current_screen, new.current_screen)))

        manager.update(current_screen=AppScreen.HOME)

        assert seen == [(AppScreen.SPLASH, AppScreen.HOME)]

    def test_no_callback_when_nothing_changes(self):
        manager = StateManager(AppState(is_initialized=True))
        calls = []
        manager.register_callback(lambda old, new: calls.append(new))

        manager.update(is_initialized=True)

        assert calls == []

    def test_failing_callback_does_not_block_others(self):
        manager = StateManager()
        calls = []

        def broken(old, new):
            raise RuntimeError("boom")

        manager.register_callback(broken)
        manager.register_callback(lambda old, new: calls.append(new))
        manager.update(is_loading=True)

        assert len(calls) == 1

    def test_update_profile_merges_fields(self, sample_profile):
        manager = StateManager()
        manager.replace_profile(sample_profile)
        manager.update_profile(has_heart_condition=True)

        profile = manager.state.user_profile
        assert profile.has_heart_condition
        assert profile.medications == sample_profile.medications
