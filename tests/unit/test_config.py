# =============================================================================
# tests/unit/test_config.py
# Unit Tests for Configuration Loading
# =============================================================================

import logging

import pytest

from skysense_core.config import AppConfig
from skysense_core.errors import ConfigurationError


@pytest.fixture
def clean_env(monkeypatch):
    for name in ("SKYSENSE_API_PROVIDER", "SKYSENSE_PROBE_TIMEOUT", "SKYSENSE_HYDRATE_WHEN_OFFLINE",
                 "SKYSENSE_SNOOZE_MINUTES", "SUPABASE_URL", "SUPABASE_KEY"):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestDefaults:

    def test_default_timings(self):
        config = AppConfig()
        assert config.probe_timeout == 5.0
        assert config.settings_debounce == 1.0
        assert config.reminder_interval == 60.0
        assert config.permission_request_delay == 2.0
        assert config.snooze_minutes == 5
        assert config.marker_retention_days == 7
        assert config.log_level_value == logging.INFO

    @pytest.mark.parametrize("overrides", [
        {"api_provider": "firebase"},
        {"probe_timeout": 0},
        {"settings_debounce": -1},
        {"permission_request_delay": -0.5},
        {"snooze_minutes": 0},
        {"marker_retention_days": 0},
        {"log_level": "CHATTY"},
    ])
    def test_invalid_values_rejected(self, overrides):
        with pytest.raises(ConfigurationError):
            AppConfig(**overrides)


class TestFromEnv:

    def test_secrets_file_and_environment(self, tmp_path, clean_env):
        secrets = tmp_path / "secrets.toml"
        secrets.write_text(
            '[skysense]\n'
            'api_provider = "edge_function"\n'
            'api_base_url = "https://example.test/functions/v1/skysense"\n'
            'probe_timeout = 3.0\n'
            'unknown_key = 1\n'
        )
        clean_env.setenv("SKYSENSE_PROBE_TIMEOUT", "2.5")
        clean_env.setenv("SKYSENSE_HYDRATE_WHEN_OFFLINE", "false")

        config = AppConfig.from_env(secrets_path=secrets, env_file=tmp_path / ".env")

        assert config.api_provider == "edge_function"
        assert config.api_base_url.endswith("/skysense")
        assert config.probe_timeout == 2.5
        assert config.hydrate_when_offline is False

    def test_supabase_credentials_fallback(self, tmp_path, clean_env):
        clean_env.setenv("SUPABASE_URL", "https://abc.supabase.co")
        clean_env.setenv("SUPABASE_KEY", "anon")

        config = AppConfig.from_env(secrets_path=tmp_path / "missing.toml", env_file=tmp_path / ".env")

        assert config.supabase_url == "https://abc.supabase.co"
        assert config.supabase_key == "anon"

    def test_bad_number_raises(self, tmp_path, clean_env):
        clean_env.setenv("SKYSENSE_SNOOZE_MINUTES", "soon")

        with pytest.raises(ConfigurationError):
            AppConfig.from_env(secrets_path=tmp_path / "missing.toml", env_file=tmp_path / ".env")
