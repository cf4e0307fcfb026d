# =============================================================================
# skysense_core/notifications/permission.py
# Notification Permission Handshake
# =============================================================================
"""
PermissionHandshake - asks the platform once per session for permission to
show system notifications.

    UNREQUESTED --(reminders on, platform "default", delay)--> REQUESTED
    REQUESTED --platform answers--> GRANTED | DENIED   (terminal)

A denial never touches the medication_reminders flag; reminders keep
arriving as in-app toasts.
"""

from __future__ import annotations
import asyncio
from abc import ABC, abstractmethod
from enum import Enum
from typing import Optional

from skysense_core.logging import get_logger
from skysense_core.notifications.toasts import ToastCenter
from skysense_core.state.models import AppSettings

logger = get_logger(__name__)

PLATFORM_DEFAULT = "default"
PLATFORM_GRANTED = "granted"
PLATFORM_DENIED = "denied"
PLATFORM_UNSUPPORTED = "unsupported"


class PermissionPlatform(ABC):
    """Host notification-permission API."""

    @abstractmethod
    def current(self) -> str:
        """Return "default", "granted", "denied" or "unsupported"."""

    @abstractmethod
    def request(self) -> str:
        """Prompt the user (blocking) and return the resulting state."""


class StaticPermissionPlatform(PermissionPlatform):
    """Platform stand-in with a fixed answer (headless runs, tests)."""

    def __init__(self, state: str = PLATFORM_UNSUPPORTED, response: str = PLATFORM_DENIED):
        self.state = state
        self.response = response
        self.requests = 0

    def current(self) -> str:
        return self.state

    def request(self) -> str:
        self.requests += 1
        self.state = self.response
        return self.response


class PermissionState(Enum):
    UNREQUESTED = "unrequested"
    REQUESTED = "requested"
    GRANTED = "granted"
    DENIED = "denied"


class PermissionHandshake:
    def __init__(
        self,
        platform: PermissionPlatform,
        toasts: ToastCenter,
        delay: float = 2.0,
    ):
        self.platform = platform
        self.toasts = toasts
        self.delay = delay
        self._state = PermissionState.UNREQUESTED
        self._task: Optional[asyncio.Task] = None

    @property
    def state(self) -> PermissionState:
        return self._state

    @property
    def is_pending(self) -> bool:
        return self._task is not None and not self._task.done()

    def maybe_request(self, settings: AppSettings) -> bool:
        """
        Schedule the permission prompt when the conditions hold.

        Must be called from the event loop. Returns True when a request
        was scheduled.
        """
        if self._state is not PermissionState.UNREQUESTED or self.is_pending:
            return False
        if not settings.medication_reminders:
            return False
        if self.platform.current() != PLATFORM_DEFAULT:
            return False

        self._task = asyncio.get_running_loop().create_task(
            self._request_after_delay(), name="notification-permission"
        )
        return True

    def cancel(self) -> None:
        """Drop a prompt that has not been shown yet."""
        if self.is_pending and self._state is PermissionState.UNREQUESTED:
            self._task.cancel()
        self._task = None

    async def _request_after_delay(self) -> None:
        await asyncio.sleep(self.delay)
        self._state = PermissionState.REQUESTED

        try:
            result = await asyncio.to_thread(self.platform.request)
        except Exception as e:
            logger.warning(f"Notification permission request failed: {e}")
            result = PLATFORM_DENIED

        logger.info(f"Notification permission: {result}")

        if result == PLATFORM_GRANTED:
            self._state = PermissionState.GRANTED
            self.toasts.success(
                "Notifications enabled",
                "You'll receive medication and health reminders",
            )
        else:
            self._state = PermissionState.DENIED
            if result == PLATFORM_DENIED:
                self.toasts.warning(
                    "Notifications blocked",
                    "Enable notifications in your device settings for reminders",
                )
