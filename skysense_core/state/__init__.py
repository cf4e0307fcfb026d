# =============================================================================
# skysense_core/state/__init__.py
# Application State
# =============================================================================

from .models import (
    Medication,
    UserProfile,
    AppSettings,
    AppScreen,
    Connectivity,
    UserKind,
    StartupMode,
    BootstrapOutcome,
)
from .typed_state import AppState, StateManager

__all__ = [
    "Medication",
    "UserProfile",
    "AppSettings",
    "AppScreen",
    "Connectivity",
    "UserKind",
    "StartupMode",
    "BootstrapOutcome",
    "AppState",
    "StateManager",
]
