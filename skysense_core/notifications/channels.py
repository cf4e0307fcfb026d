# =============================================================================
# skysense_core/notifications/channels.py
# Capability-Checked Platform Sinks
# =============================================================================
"""
Platform notification and haptic APIs behind one interface.

A sink is either ``CapabilitySink.unavailable()`` or
``CapabilitySink.available(send)``; callers never check the platform
themselves. Failures inside ``send`` degrade to ``False``.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Tuple

from skysense_core.errors import error_boundary

# Vibration patterns in milliseconds (on, off, on, ...)
REMINDER_PULSE = (200, 100, 200)
NAVIGATION_TICK = (10,)
TOGGLE_TICK = (5,)


@dataclass(frozen=True)
class NotificationAction:
    action: str
    title: str


DEFAULT_REMINDER_ACTIONS = (
    NotificationAction("taken", "Mark as Taken"),
    NotificationAction("snooze", "Remind in 5 min"),
)


@dataclass(frozen=True)
class SystemNotification:
    """System-level notification payload."""
    title: str
    body: str
    tag: str
    actions: Tuple[NotificationAction, ...] = DEFAULT_REMINDER_ACTIONS
    require_interaction: bool = True
    data: dict = field(default_factory=dict)


class CapabilitySink:
    """A one-way platform output that may not exist."""

    def __init__(self, send: Optional[Callable[[Any], None]] = None):
        self._send = send

    @classmethod
    def unavailable(cls) -> CapabilitySink:
        return cls(None)

    @classmethod
    def available(cls, send: Callable[[Any], None]) -> CapabilitySink:
        return cls(send)

    @property
    def is_available(self) -> bool:
        return self._send is not None

    @error_boundary(default_return=False)
    def send(self, payload: Any) -> bool:
        """Deliver a payload; False when the capability is missing or fails."""
        if self._send is None:
            return False
        self._send(payload)
        return True
