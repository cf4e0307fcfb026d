# =============================================================================
# skysense_core/services/reminder_scheduler.py
# Idempotent Medication Reminder Scheduler
# =============================================================================
"""
ReminderScheduler - fires each medication reminder at most once per
(medication, date, minute).

The scheduler is armed only while the app is initialized, medication
reminders are enabled and the profile lists at least one medication. Once
armed it evaluates immediately and then once per interval:

    now (local wall clock, truncated to the minute)
        for each active medication whose times contain "HH:MM":
            dispatch marker present?  -> skip
            otherwise                 -> write marker, dispatch

The marker is persisted before the dispatch, so a reload mid-minute can
never produce a second reminder for the same occurrence.
"""

from __future__ import annotations
import asyncio
from datetime import date, datetime, timedelta
from typing import Callable, Dict, List, Optional

from skysense_core.notifications.dispatcher import NotificationDispatcher
from skysense_core.notifications.toasts import ToastCenter
from skysense_core.services.base_service import BaseService
from skysense_core.services.timers import PeriodicTask
from skysense_core.state import AppState, Medication, StateManager
from skysense_core.storage.markers import ReminderMarkerStore, ReminderOccurrence

Clock = Callable[[], datetime]


class ReminderScheduler(BaseService):
    """
    Usage:
        scheduler = ReminderScheduler(state_manager, markers, dispatcher, toasts)
        state_manager.register_callback(lambda old, new: scheduler.refresh(old))
        scheduler.refresh()   # arms or disarms from the current state
    """

    def __init__(
        self,
        state_manager: StateManager,
        markers: ReminderMarkerStore,
        dispatcher: NotificationDispatcher,
        toasts: ToastCenter,
        clock: Clock = datetime.now,
        interval: float = 60.0,
        snooze_minutes: int = 5,
    ):
        super().__init__()
        self.state_manager = state_manager
        self.markers = markers
        self.dispatcher = dispatcher
        self.toasts = toasts
        self.clock = clock
        self.snooze_minutes = snooze_minutes
        self._ticker = PeriodicTask(interval, self.evaluate, name="medication-reminders")
        self._snoozes: Dict[str, asyncio.Task] = {}
        self._last_pruned: Optional[date] = None

    @property
    def is_armed(self) -> bool:
        return self._ticker.is_running

    @staticmethod
    def should_arm(state: AppState) -> bool:
        return (
            state.is_initialized
            and state.app_settings.medication_reminders
            and len(state.user_profile.medications) > 0
        )

    # -------------------------------------------------------------------------
    # ARMING
    # -------------------------------------------------------------------------

    def refresh(self, previous: Optional[AppState] = None) -> bool:
        """
        Re-evaluate the arming conditions against the current state.

        When already armed and ``previous`` lists different medications,
        the current minute is evaluated again right away so an added or
        edited dose due now is not left for the next tick. Must be called
        from the event loop. Returns whether the scheduler is armed
        afterwards.
        """
        state = self.state_manager.state
        wanted = self.should_arm(state)
        if wanted and not self.is_armed:
            self._prune(self.clock().date())
            self._ticker.start()
            self.logger.info("Medication reminders armed")
        elif not wanted and self.is_armed:
            self.stop()
            self.logger.info("Medication reminders disarmed")
        elif wanted and previous is not None and (
            previous.user_profile.medications != state.user_profile.medications
        ):
            self.logger.debug("Medications changed, checking the current minute")
            self.evaluate()
        return self.is_armed

    def stop(self) -> None:
        """Cancel the tick and any pending snoozes."""
        self._ticker.stop()
        for task in self._snoozes.values():
            task.cancel()
        self._snoozes.clear()

    # -------------------------------------------------------------------------
    # EVALUATION
    # -------------------------------------------------------------------------

    def evaluate(self, now: Optional[datetime] = None) -> List[ReminderOccurrence]:
        """
        Dispatch every reminder due in the current minute that has not
        been dispatched yet.

        Returns:
            The occurrences dispatched by this evaluation
        """
        state = self.state_manager.state
        if not state.app_settings.medication_reminders:
            return []

        now = now or self.clock()
        today = now.date()
        if self._last_pruned != today:
            self._prune(today)

        hhmm = now.strftime("%H:%M")
        dispatched = []
        for medication in state.user_profile.active_medications:
            if hhmm not in medication.times:
                continue

            occurrence = ReminderOccurrence(medication.id, today, hhmm)
            if self.markers.has_dispatched(occurrence):
                continue

            self.markers.record_dispatch(occurrence)
            try:
                self._dispatch(medication, occurrence)
            except Exception as e:
                self.logger.error(f"Reminder dispatch failed for {medication.name}: {e}", exc_info=True)
                continue
            dispatched.append(occurrence)

        return dispatched

    def _dispatch(self, medication: Medication, occurrence: ReminderOccurrence) -> None:
        self.dispatcher.dispatch_reminder(
            medication,
            occurrence,
            on_taken=lambda: self.mark_taken(occurrence),
        )

    def _prune(self, today: date) -> None:
        self.markers.prune(today)
        self._last_pruned = today

    # -------------------------------------------------------------------------
    # USER ACTIONS
    # -------------------------------------------------------------------------

    def mark_taken(self, occurrence: ReminderOccurrence) -> None:
        """Record the user's acknowledgment of a reminder."""
        self.markers.record_taken(occurrence, self.clock())
        medication = self._find_medication(occurrence.medication_id)
        name = medication.name if medication else "Medication"
        self.toasts.success(f"{name} marked as taken")
        self.logger.info(f"Medication taken: {occurrence.medication_id} ({occurrence.key})")

    def snooze(self, occurrence: ReminderOccurrence) -> None:
        """Show the reminder again after the snooze period."""
        existing = self._snoozes.pop(occurrence.key, None)
        if existing is not None:
            existing.cancel()
        self._snoozes[occurrence.key] = asyncio.get_running_loop().create_task(
            self._redispatch_later(occurrence), name=f"snooze-{occurrence.medication_id}"
        )
        self.logger.info(f"Reminder snoozed for {self.snooze_minutes} min: {occurrence.key}")

    def handle_notification_action(self, action: str, occurrence: ReminderOccurrence) -> None:
        """Route a system notification button ("taken" or "snooze")."""
        if action == "taken":
            self.mark_taken(occurrence)
        elif action == "snooze":
            self.snooze(occurrence)
        else:
            self.logger.warning(f"Unknown notification action: {action}")

    async def _redispatch_later(self, occurrence: ReminderOccurrence) -> None:
        await asyncio.sleep(timedelta(minutes=self.snooze_minutes).total_seconds())
        self._snoozes.pop(occurrence.key, None)

        state = self.state_manager.state
        medication = self._find_medication(occurrence.medication_id)
        if not state.app_settings.medication_reminders or medication is None or not medication.is_active:
            return
        if self.markers.is_taken(occurrence):
            return
        self._dispatch(medication, occurrence)

    def _find_medication(self, medication_id: str) -> Optional[Medication]:
        for medication in self.state_manager.state.user_profile.medications:
            if medication.id == medication_id:
                return medication
        return None
