# tests/test_scheduling.py
"""
Timers / Debouncer / PeriodicTask Unit Tests
"""

import asyncio
import logging
import sys
from pathlib import Path
from unittest.mock import MagicMock

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from metrics_hub.scheduling import Debouncer, LoopTimers, PeriodicTask


class TestDebouncer:
    """연속 트리거 → 조용한 구간 후 1번 실행"""

    def test_burst_runs_once(self, timers):
        callback = MagicMock()
        debouncer = Debouncer(timers, 0.3, callback)

        for _ in range(5):
            debouncer.trigger()
            timers.advance(0.1)
        assert callback.call_count == 0
        assert debouncer.pending

        timers.advance(0.25)
        assert callback.call_count == 1
        assert not debouncer.pending

    def test_flush_runs_pending_now(self, timers):
        callback = MagicMock()
        debouncer = Debouncer(timers, 0.3, callback)

        assert debouncer.flush() is False
        debouncer.trigger()
        assert debouncer.flush() is True
        timers.advance(1)

        assert callback.call_count == 1

    def test_cancel_drops_pending(self, timers):
        callback = MagicMock()
        debouncer = Debouncer(timers, 0.3, callback)

        debouncer.trigger()
        debouncer.cancel()
        timers.advance(1)

        callback.assert_not_called()
        assert timers.pending == 0


class TestPeriodicTask:
    """주기 실행 검증"""

    def test_runs_every_interval(self, timers):
        callback = MagicMock()
        task = PeriodicTask(timers, 60, callback, name="sweep")

        task.start()
        task.start()  # second start is a no-op
        timers.advance(180)

        assert callback.call_count == 3
        assert task.running

    def test_stop(self, timers):
        callback = MagicMock()
        task = PeriodicTask(timers, 60, callback)
        task.start()
        timers.advance(60)
        task.stop()
        timers.advance(600)

        assert callback.call_count == 1
        assert not task.running

    def test_failure_logged_and_rescheduled(self, timers, caplog):
        """실패해도 다음 주기 실행"""
        callback = MagicMock(side_effect=[RuntimeError("boom"), None])
        task = PeriodicTask(timers, 60, callback, name="sweep")
        task.start()

        with caplog.at_level(logging.ERROR, logger="metrics_hub.scheduling"):
            timers.advance(120)

        assert callback.call_count == 2
        assert "[sweep] run failed" in caplog.text


class TestLoopTimers:
    """asyncio 이벤트 루프 기반 타이머"""

    def test_call_later_and_frames(self):
        async def scenario():
            timers = LoopTimers(frame_interval=0.001)
            fired = []
            frames = []

            timers.call_later(0.01, lambda: fired.append(timers.now()))
            timers.request_frame(frames.append)
            start = timers.now()
            await asyncio.sleep(0.05)
            return start, fired, frames

        start, fired, frames = asyncio.run(scenario())

        assert len(fired) == 1
        assert fired[0] >= start
        assert len(frames) == 1
        assert frames[0] >= start

    def test_cancelled_callback_does_not_run(self):
        async def scenario():
            timers = LoopTimers()
            fired = []
            handle = timers.call_later(0.01, lambda: fired.append(True))
            handle.cancel()
            await asyncio.sleep(0.03)
            return fired, handle.cancelled()

        fired, cancelled = asyncio.run(scenario())
        assert fired == []
        assert cancelled is True
