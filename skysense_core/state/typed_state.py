# =============================================================================
# skysense_core/state/typed_state.py
# Typed Application State for SkySense
# Single owned state value, replaced through merge functions only
# =============================================================================

from __future__ import annotations
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, List, Optional

from skysense_core.logging import get_logger
from skysense_core.state.models import AppScreen, AppSettings, UserProfile

logger = get_logger(__name__)

StateListener = Callable[["AppState", "AppState"], None]


# =============================================================================
# STATE DATA CLASS
# =============================================================================

@dataclass(frozen=True)
class AppState:
    """
    Complete application snapshot.

    Instances are immutable; every update produces a new, fully merged
    snapshot, so readers never observe a half-applied change.
    """
    current_screen: AppScreen = AppScreen.SPLASH
    is_dark_mode: bool = False
    user_profile: UserProfile = field(default_factory=UserProfile)
    app_settings: AppSettings = field(default_factory=AppSettings)
    is_initialized: bool = False
    is_loading: bool = False
    error: Optional[str] = None


# =============================================================================
# STATE MANAGER
# =============================================================================

class StateManager:
    """
    Owner of the single AppState value.

    Usage:
        manager = StateManager()
        manager.register_callback(on_change)   # called with (old, new)
        manager.update_settings(dark_mode=True)
        snapshot = manager.state
    """

    def __init__(self, initial: Optional[AppState] = None):
        self._state = initial or AppState()
        self._callbacks: List[StateListener] = []

    @property
    def state(self) -> AppState:
        """Get the current snapshot"""
        return self._state

    # -------------------------------------------------------------------------
    # MERGE REPLACEMENT
    # -------------------------------------------------------------------------

    def update(self, **changes: Any) -> AppState:
        """Replace top-level fields of the state."""
        return self._commit(replace(self._state, **changes))

    def update_profile(self, **changes: Any) -> AppState:
        """Merge fields into the user profile."""
        profile = self._state.user_profile.merge(changes)
        return self._commit(replace(self._state, user_profile=profile))

    def replace_profile(self, profile: UserProfile) -> AppState:
        return self._commit(replace(self._state, user_profile=profile))

    def update_settings(self, **changes: Any) -> AppState:
        """Merge toggles into the app settings."""
        settings = self._state.app_settings.merge(changes)
        return self._commit(replace(self._state, app_settings=settings))

    def _commit(self, new_state: AppState) -> AppState:
        old_state = self._state
        if new_state == old_state:
            return old_state

        self._state = new_state
        self._notify_callbacks(old_state, new_state)
        return new_state

    # -------------------------------------------------------------------------
    # CALLBACKS
    # -------------------------------------------------------------------------

    def register_callback(self, callback: StateListener) -> None:
        """
        Register a callback for state changes.

        Args:
            callback: Function called with (old_state, new_state)
        """
        if callback not in self._callbacks:
            self._callbacks.append(callback)

    def unregister_callback(self, callback: StateListener) -> None:
        """Remove a registered callback."""
        if callback in self._callbacks:
            self._callbacks.remove(callback)

    def _notify_callbacks(self, old_state: AppState, new_state: AppState) -> None:
        for callback in list(self._callbacks):
            try:
                callback(old_state, new_state)
            except Exception as e:
                logger.error(f"Error in state callback: {e}", exc_info=True)

    def to_dict(self) -> Dict[str, Any]:
        """Export state summary as dictionary (for debugging/logging)"""
        s = self._state
        return {
            "screen": s.current_screen.value,
            "dark_mode": s.is_dark_mode,
            "initialized": s.is_initialized,
            "loading": s.is_loading,
            "error": s.error,
            "medications": len(s.user_profile.medications),
            "medication_reminders": s.app_settings.medication_reminders,
        }
