# =============================================================================
# skysense_core/notifications/dispatcher.py
# Multi-Channel Reminder Delivery
# =============================================================================

from __future__ import annotations
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Tuple

from skysense_core.logging import get_logger
from skysense_core.notifications.channels import REMINDER_PULSE, SystemNotification
from skysense_core.notifications.permission import PLATFORM_GRANTED
from skysense_core.notifications.toasts import ToastAction, ToastCenter
from skysense_core.state.models import Medication
from skysense_core.storage.markers import ReminderOccurrence

if TYPE_CHECKING:
    from skysense_core.host import HostEnvironment

logger = get_logger(__name__)

REMINDER_TOAST_DURATION_MS = 10000


@dataclass(frozen=True)
class DispatchReport:
    """Which channels accepted a reminder."""
    occurrence: ReminderOccurrence
    system_notification: bool
    haptic: bool
    toast_id: int


class NotificationDispatcher:
    """
    Sends a due reminder through every channel the host offers.

    The in-app toast is always shown; system notification and haptic
    pulse are best-effort.
    """

    def __init__(self, host: HostEnvironment, toasts: ToastCenter):
        self.host = host
        self.toasts = toasts

    def dispatch_reminder(
        self,
        medication: Medication,
        occurrence: ReminderOccurrence,
        on_taken: Callable[[], None],
    ) -> DispatchReport:
        system_sent = False
        if self._system_notifications_allowed():
            system_sent = self.host.notifications.send(SystemNotification(
                title=f"💊 Time for {medication.name}",
                body=f"Take {medication.dosage} as prescribed for your {medication.condition}",
                tag=f"medication-{medication.id}",
                data={"occurrence": occurrence.key},
            ))

        haptic_sent = self.pulse(REMINDER_PULSE)

        toast = self.toasts.info(
            f"💊 Time for {medication.name}",
            f"Take {medication.dosage} for your {medication.condition}",
            duration_ms=REMINDER_TOAST_DURATION_MS,
            action=ToastAction("Mark Taken", on_taken),
        )

        logger.info(f"Medication reminder sent: {medication.name} at {occurrence.time}")
        return DispatchReport(occurrence, system_sent, haptic_sent, toast.id)

    def pulse(self, pattern: Tuple[int, ...]) -> bool:
        return self.host.haptics.send(pattern)

    def _system_notifications_allowed(self) -> bool:
        if not self.host.notifications.is_available:
            return False
        try:
            return self.host.permission.current() == PLATFORM_GRANTED
        except Exception as e:
            logger.debug(f"Permission state unavailable: {e}")
            return False
