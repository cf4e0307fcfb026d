# =============================================================================
# tests/conftest.py
# Pytest Configuration and Fixtures
# =============================================================================

import asyncio
import json
from datetime import datetime, timedelta

import pytest
from unittest.mock import MagicMock

from skysense_core.api import MockProfileAPI
from skysense_core.config import AppConfig
from skysense_core.host import HostEnvironment
from skysense_core.notifications import CapabilitySink, StaticPermissionPlatform, ToastCenter
from skysense_core.state import Medication, UserProfile
from skysense_core.storage import InMemoryStateStore, StorageKeys


# =============================================================================
# CLOCK
# =============================================================================

class FrozenClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture
def frozen_clock():
    """08:00:30 local time on a fixed day"""
    return FrozenClock(datetime(2024, 5, 1, 8, 0, 30))


# =============================================================================
# SAMPLE DATA FIXTURES
# =============================================================================

@pytest.fixture
def inhaler():
    return Medication(
        id="med-inhaler",
        name="Inhaler",
        dosage="2 puffs",
        frequency="daily",
        condition="asthma",
        times=("08:00",),
    )


@pytest.fixture
def sample_profile(inhaler):
    """Returning user with asthma and one morning medication"""
    return UserProfile(
        has_asthma=True,
        has_pollen_allergy=True,
        gender="female",
        age_group="25-34",
        medications=(inhaler,),
    )


# =============================================================================
# RUNTIME FIXTURES
# =============================================================================

@pytest.fixture
def fast_config(tmp_path):
    """Configuration with delays shrunk for tests"""
    return AppConfig(
        api_provider="mock",
        db_path=tmp_path / "skysense.db",
        probe_timeout=0.2,
        settings_debounce=0.05,
        reminder_interval=0.05,
        permission_request_delay=0.01,
        welcome_toast_delay=0.01,
        log_to_file=False,
    )


@pytest.fixture
def memory_store():
    return InMemoryStateStore()


@pytest.fixture
def mock_api():
    return MockProfileAPI()


@pytest.fixture
def toasts():
    return ToastCenter()


@pytest.fixture
def capturing_host():
    """Host whose sinks record every payload they receive"""
    sent = {"notifications": [], "haptics": [], "themes": []}
    host = HostEnvironment(
        notifications=CapabilitySink.available(sent["notifications"].append),
        haptics=CapabilitySink.available(sent["haptics"].append),
        permission=StaticPermissionPlatform(state="granted"),
        apply_theme=sent["themes"].append,
    )
    host.sent = sent
    return host


@pytest.fixture
def mock_supabase():
    """Mock Supabase client"""
    mock_client = MagicMock()
    mock_client.table.return_value.select.return_value.limit.return_value.execute.return_value.data = []
    return mock_client


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def run(coro):
    """Drive a coroutine from a synchronous test"""
    return asyncio.run(coro)


def seed_returning_user(store, profile_id="profile-123", profile=None, settings=None, dark_mode=None):
    """Write the local keys a returning user leaves behind"""
    store.set(StorageKeys.PROFILE_ID, profile_id)
    store.set_flag(StorageKeys.ONBOARDING_COMPLETE, True)
    if dark_mode is not None:
        store.set_flag(StorageKeys.DARK_MODE, dark_mode)
    if profile is not None:
        store.set(StorageKeys.PROFILE_CACHE, json.dumps(profile.to_dict()))
    if settings is not None:
        store.set(StorageKeys.SETTINGS_CACHE, json.dumps(settings.to_dict()))
    return profile_id


def toast_titles(center):
    return [t.title for t in center.history]
