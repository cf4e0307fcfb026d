# =============================================================================
# skysense_core/config.py
# Runtime Configuration for SkySense
# =============================================================================
"""
Configuration loading.

Values are resolved in this order (later wins):

1. Dataclass defaults
2. ``[skysense]`` table of ``.streamlit/secrets.toml``
3. ``SKYSENSE_*`` environment variables (a ``.env`` file is loaded first)

Example secrets.toml:

    [skysense]
    api_provider = "edge_function"
    api_base_url = "https://your-project.supabase.co/functions/v1/skysense"
    api_key = "your-anon-key"
"""

from __future__ import annotations
import logging
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

import toml
from dotenv import load_dotenv

from skysense_core.errors import ConfigurationError

DEFAULT_SECRETS_PATH = Path(".streamlit") / "secrets.toml"
DEFAULT_DB_PATH = Path(__file__).parent.parent / "local_data" / "skysense.db"
ENV_PREFIX = "SKYSENSE_"

API_PROVIDERS = ("edge_function", "supabase", "mock")


@dataclass
class AppConfig:
    """All tunables of the runtime core. Durations are in seconds."""
    api_provider: str = "mock"
    api_base_url: str = ""
    api_key: Optional[str] = None
    supabase_url: Optional[str] = None
    supabase_key: Optional[str] = None
    api_timeout: float = 30.0
    db_path: Path = DEFAULT_DB_PATH

    probe_timeout: float = 5.0
    settings_debounce: float = 1.0
    reminder_interval: float = 60.0
    permission_request_delay: float = 2.0
    welcome_toast_delay: float = 1.0
    snooze_minutes: int = 5
    marker_retention_days: int = 7
    hydrate_when_offline: bool = True

    log_level: str = "INFO"
    log_to_file: bool = True

    def __post_init__(self):
        self.db_path = Path(self.db_path)
        self.validate()

    def validate(self) -> None:
        """Raise ConfigurationError for values the runtime cannot work with."""
        if self.api_provider not in API_PROVIDERS:
            raise ConfigurationError(
                f"Unknown API provider '{self.api_provider}'",
                config_key="api_provider",
                details={"allowed": list(API_PROVIDERS)},
            )

        for name in ("probe_timeout", "settings_debounce", "reminder_interval", "api_timeout"):
            if getattr(self, name) <= 0:
                raise ConfigurationError(
                    f"{name} must be positive",
                    config_key=name,
                    expected_type="float > 0",
                )

        for name in ("permission_request_delay", "welcome_toast_delay"):
            if getattr(self, name) < 0:
                raise ConfigurationError(
                    f"{name} must not be negative",
                    config_key=name,
                    expected_type="float >= 0",
                )

        if self.snooze_minutes < 1:
            raise ConfigurationError("snooze_minutes must be at least 1", config_key="snooze_minutes")
        if self.marker_retention_days < 1:
            raise ConfigurationError(
                "marker_retention_days must be at least 1",
                config_key="marker_retention_days",
            )

        if not isinstance(logging.getLevelName(self.log_level.upper()), int):
            raise ConfigurationError(f"Unknown log level '{self.log_level}'", config_key="log_level")

    @property
    def log_level_value(self) -> int:
        return logging.getLevelName(self.log_level.upper())

    @classmethod
    def from_env(
        cls,
        secrets_path: Optional[Path] = None,
        env_file: Optional[Path] = None,
    ) -> AppConfig:
        """
        Build the configuration from secrets.toml and the environment.

        Args:
            secrets_path: Path to a secrets.toml file (default: .streamlit/secrets.toml)
            env_file: Optional .env file to load before reading the environment

        Returns:
            Validated AppConfig
        """
        load_dotenv(env_file)

        values: Dict[str, Any] = {}
        values.update(_load_secrets(secrets_path or DEFAULT_SECRETS_PATH))
        values.update(_load_environment())

        # Supabase credentials are shared with the rest of the tooling
        values.setdefault("supabase_url", os.getenv("SUPABASE_URL"))
        values.setdefault("supabase_key", os.getenv("SUPABASE_KEY"))

        return cls(**_coerce(values))


def _load_secrets(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}

    try:
        data = toml.load(path)
    except toml.TomlDecodeError as e:
        raise ConfigurationError(f"Invalid secrets file: {e}", details={"path": str(path)})

    section = data.get("skysense", {})
    known = {f.name for f in fields(AppConfig)}
    return {k: v for k, v in section.items() if k in known}


def _load_environment() -> Dict[str, Any]:
    values = {}
    for f in fields(AppConfig):
        raw = os.getenv(f"{ENV_PREFIX}{f.name.upper()}")
        if raw is not None:
            values[f.name] = raw
    return values


def _coerce(values: Dict[str, Any]) -> Dict[str, Any]:
    """Convert raw strings from the environment to the declared field types."""
    types = {f.name: f.type for f in fields(AppConfig)}
    coerced = {}

    for name, value in values.items():
        if value is None:
            continue
        declared = str(types[name])
        try:
            if isinstance(value, str) and "bool" in declared:
                coerced[name] = value.strip().lower() in ("1", "true", "yes", "on")
            elif "float" in declared:
                coerced[name] = float(value)
            elif "int" in declared:
                coerced[name] = int(value)
            else:
                coerced[name] = value
        except (TypeError, ValueError):
            raise ConfigurationError(
                f"Invalid value for {name}: {value!r}",
                config_key=name,
                expected_type=declared,
            )

    return coerced
