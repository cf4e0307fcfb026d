# =============================================================================
# skysense_core/ui/screens.py
# Logical Screen Selection with an Error Boundary
# =============================================================================
from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional

from skysense_core.logging import get_logger
from skysense_core.state import AppScreen, AppState

logger = get_logger(__name__)

# Display labels for the shell's navigation
SCREENS = [
    {"screen": AppScreen.HOME, "name": "Home", "icon": "🏠"},
    {"screen": AppScreen.FORECAST, "name": "Forecast", "icon": "🌤️"},
    {"screen": AppScreen.ALERTS, "name": "Alerts", "icon": "⚠️"},
    {"screen": AppScreen.PARKS, "name": "Nearby Parks", "icon": "🌳"},
    {"screen": AppScreen.TRENDS, "name": "AQI Trends", "icon": "📈"},
    {"screen": AppScreen.NOTIFICATIONS, "name": "Notifications", "icon": "🔔"},
    {"screen": AppScreen.COMMUNITY, "name": "Community", "icon": "👥"},
    {"screen": AppScreen.ECO, "name": "Eco Score", "icon": "♻️"},
    {"screen": AppScreen.BADGES, "name": "Badges", "icon": "🏅"},
    {"screen": AppScreen.PROFILE, "name": "Profile", "icon": "👤"},
    {"screen": AppScreen.SETTINGS, "name": "Settings", "icon": "⚙️"},
]

# Screens without the voice assistant overlay
_INTRO_SCREENS = (AppScreen.SPLASH, AppScreen.ONBOARDING)

ScreenRenderer = Callable[[AppState], Any]


@dataclass(frozen=True)
class RecoveryView:
    """Shown in place of a screen that failed to render."""
    title: str = "Something went wrong"
    message: str = "Please refresh the app to continue"
    action_label: str = "Refresh App"
    error: Optional[str] = None


def render_current_screen(state: AppState, renderers: Mapping[AppScreen, ScreenRenderer]) -> Any:
    """
    Render the active logical screen.

    Screens without a renderer fall back to home. Any exception raised by a
    renderer is logged and replaced with a RecoveryView.
    """
    try:
        renderer = renderers.get(state.current_screen) or renderers[AppScreen.HOME]
        return renderer(state)
    except Exception as e:
        logger.error(f"Error rendering screen {state.current_screen.value}: {e}", exc_info=True)
        return RecoveryView(error=str(e))


def loading_message(state: AppState) -> Optional[str]:
    """Text of the startup placeholder; None once the app is initialized."""
    if state.is_initialized:
        return None
    return "Loading your health profile..." if state.is_loading else "Initializing..."


def voice_assistant_visible(state: AppState) -> bool:
    return state.current_screen not in _INTRO_SCREENS and state.app_settings.voice_assistant
