# =============================================================================
# skysense_core/host.py
# Host Environment Capabilities
# =============================================================================

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Callable

from skysense_core.notifications.channels import CapabilitySink
from skysense_core.notifications.permission import (
    PermissionPlatform,
    StaticPermissionPlatform,
)


def _light_preference() -> bool:
    return False


def _ignore_theme(dark: bool) -> None:
    return None


@dataclass
class HostEnvironment:
    """
    What the surrounding platform offers the core.

    Attributes:
        notifications: System notification sink
        haptics: Vibration sink (payload is a tuple of milliseconds)
        permission: Notification permission API
        prefers_dark: Ambient light/dark preference of the host
        apply_theme: Hook applying the theme before first paint
    """
    notifications: CapabilitySink = field(default_factory=CapabilitySink.unavailable)
    haptics: CapabilitySink = field(default_factory=CapabilitySink.unavailable)
    permission: PermissionPlatform = field(default_factory=StaticPermissionPlatform)
    prefers_dark: Callable[[], bool] = _light_preference
    apply_theme: Callable[[bool], None] = _ignore_theme

    @classmethod
    def headless(cls) -> HostEnvironment:
        """No system notifications, no haptics, light theme."""
        return cls()
