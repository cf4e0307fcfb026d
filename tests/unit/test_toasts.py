# =============================================================================
# tests/unit/test_toasts.py
# Unit Tests for the In-App Toast Queue
# =============================================================================

import pytest

from skysense_core.notifications import ToastAction, ToastCenter


class TestActions:

    def test_unanswered_actions_are_bounded(self, toasts):
        taken = []
        pushed = [
            toasts.info(f"Reminder {i}", action=ToastAction("Mark taken", lambda i=i: taken.append(i)))
            for i in range(ToastCenter.MAX_ACTIONABLE + 5)
        ]

        assert len(toasts._actionable) == ToastCenter.MAX_ACTIONABLE
        # The oldest entries expired; the newest still work
        assert not toasts.trigger_action(pushed[0].id)
        assert toasts.trigger_action(pushed[-1].id)
        assert taken == [ToastCenter.MAX_ACTIONABLE + 4]

    def test_action_runs_once(self, toasts):
        calls = []
        toast = toasts.warning("Time for Inhaler", action=ToastAction("Mark taken", lambda: calls.append(1)))

        assert toasts.trigger_action(toast.id)
        assert not toasts.trigger_action(toast.id)
        assert calls == [1]

    def test_unknown_level_rejected(self, toasts):
        with pytest.raises(ValueError):
            toasts.push("fatal", "Nope")


class TestReaders:
    """Several sessions read the same toast log"""

    def test_each_reader_keeps_its_own_cursor(self, toasts):
        first = toasts.info("Running in offline mode")
        second = toasts.success("Welcome back to SkySense!")

        session_a = toasts.since(0)
        session_b = toasts.since(first.id)

        assert [t.id for t in session_a] == [first.id, second.id]
        assert [t.id for t in session_b] == [second.id]
        assert toasts.since(second.id) == []

    def test_open_actions_visible_until_used(self, toasts):
        plain = toasts.info("Theme preference saved")
        reminder = toasts.warning("💊 Time for Inhaler", action=ToastAction("Mark taken", lambda: None))

        assert toasts.open_actions() == [reminder]
        assert toasts.open_actions() == [reminder]

        toasts.trigger_action(reminder.id)

        assert toasts.open_actions() == []
        assert plain in toasts.history
