# =============================================================================
# skysense_core/ui/__init__.py
# Presentation Helpers
# =============================================================================

from .screens import (
    SCREENS,
    RecoveryView,
    render_current_screen,
    loading_message,
    voice_assistant_visible,
)

__all__ = [
    "SCREENS",
    "RecoveryView",
    "render_current_screen",
    "loading_message",
    "voice_assistant_visible",
]
