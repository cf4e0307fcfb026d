# =============================================================================
# skysense_core/notifications/__init__.py
# User-Facing Output Channels
# =============================================================================

from .channels import (
    CapabilitySink,
    NotificationAction,
    SystemNotification,
    REMINDER_PULSE,
    NAVIGATION_TICK,
    TOGGLE_TICK,
)
from .toasts import Toast, ToastAction, ToastCenter
from .permission import (
    PermissionHandshake,
    PermissionPlatform,
    PermissionState,
    StaticPermissionPlatform,
)
from .dispatcher import DispatchReport, NotificationDispatcher

__all__ = [
    "CapabilitySink",
    "NotificationAction",
    "SystemNotification",
    "REMINDER_PULSE",
    "NAVIGATION_TICK",
    "TOGGLE_TICK",
    "Toast",
    "ToastAction",
    "ToastCenter",
    "PermissionHandshake",
    "PermissionPlatform",
    "PermissionState",
    "StaticPermissionPlatform",
    "DispatchReport",
    "NotificationDispatcher",
]
