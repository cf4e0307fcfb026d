# =============================================================================
# tests/unit/test_timers.py
# Unit Tests for the Event-Loop Timers
# =============================================================================

import asyncio
import time

from skysense_core.services.timers import DebounceTimer, PeriodicTask

from conftest import run


class TestPeriodicTask:

    def test_slow_callback_does_not_shift_later_ticks(self):
        ticks = []

        def slow_tick():
            ticks.append(asyncio.get_running_loop().time())
            time.sleep(0.03)

        task = PeriodicTask(0.1, slow_tick, name="slow")

        async def scenario():
            task.start()
            await asyncio.sleep(0.55)
            task.stop()

        run(scenario())

        assert len(ticks) == 6
        # Tick n starts close to n * interval after the first one
        assert ticks[-1] - ticks[0] < 0.5 + 0.05

    def test_failing_callback_keeps_ticking(self):
        calls = []

        def flaky():
            calls.append(1)
            raise RuntimeError("boom")

        task = PeriodicTask(0.01, flaky)

        async def scenario():
            task.start()
            await asyncio.sleep(0.05)
            running = task.is_running
            task.stop()
            return running

        assert run(scenario()) is True
        assert len(calls) >= 2
        assert not task.is_running


class TestDebounceTimer:

    def test_only_last_trigger_fires(self):
        fired = []

        async def flush():
            fired.append(1)

        timer = DebounceTimer(0.03, flush)

        async def scenario():
            for _ in range(3):
                timer.trigger()
                await asyncio.sleep(0.01)
            await asyncio.sleep(0.06)

        run(scenario())

        assert fired == [1]
        assert not timer.pending
