# metrics_hub/scheduling.py
"""
Traffic Metrics Hub - Timers, Debouncing and Periodic Tasks

The core is single-threaded and event-driven. Everything time-based
(debounce windows, the cache sweep, animation frames) goes through a
Timers object so the same code runs on an asyncio event loop in the
application and on a manually advanced clock in tests.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Optional, Protocol

from .config import FRAME_INTERVAL

logger = logging.getLogger(__name__)


class TimerHandle(Protocol):
    def cancel(self) -> None: ...

    def cancelled(self) -> bool: ...


class Timers(Protocol):
    """Clock + delayed callbacks + rendering frames."""

    def now(self) -> float: ...

    def call_later(self, delay: float, callback: Callable[[], Any]) -> TimerHandle: ...

    def request_frame(self, callback: Callable[[float], Any]) -> TimerHandle: ...


class LoopTimers:
    """
    Timers backed by an asyncio event loop.

    Frames are emitted every `frame_interval` seconds and receive the
    loop time of the frame. When no loop is given, the running loop is
    picked up on first use.

    Usage:
        async def main():
            timers = LoopTimers()
            timers.call_later(0.3, save)
    """

    def __init__(
        self,
        loop: Optional[asyncio.AbstractEventLoop] = None,
        frame_interval: float = FRAME_INTERVAL,
    ):
        self._loop = loop
        self.frame_interval = frame_interval

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def now(self) -> float:
        return self.loop.time()

    def call_later(self, delay: float, callback: Callable[[], Any]) -> asyncio.TimerHandle:
        return self.loop.call_later(max(delay, 0.0), callback)

    def request_frame(self, callback: Callable[[float], Any]) -> asyncio.TimerHandle:
        return self.loop.call_later(self.frame_interval, self._run_frame, callback)

    def _run_frame(self, callback: Callable[[float], Any]) -> None:
        callback(self.loop.time())


class Debouncer:
    """
    Coalesce bursts of triggers into one callback after a quiet period.

    Every trigger() restarts the window; the callback runs once when
    `delay` seconds pass without another trigger.
    """

    def __init__(self, timers: Timers, delay: float, callback: Callable[[], Any]):
        self._timers = timers
        self.delay = delay
        self._callback = callback
        self._handle: Optional[TimerHandle] = None

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def trigger(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
        self._handle = self._timers.call_later(self.delay, self._fire)

    def flush(self) -> bool:
        """Run a pending callback now. Returns True if one was pending."""
        if self._handle is None:
            return False
        self._handle.cancel()
        self._fire()
        return True

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self) -> None:
        self._handle = None
        self._callback()


class PeriodicTask:
    """
    Run a callback every `interval` seconds until stopped.

    A failing run is logged and the next run is still scheduled.
    """

    def __init__(self, timers: Timers, interval: float, callback: Callable[[], Any], name: str = "periodic"):
        self._timers = timers
        self.interval = interval
        self._callback = callback
        self.name = name
        self._handle: Optional[TimerHandle] = None

    @property
    def running(self) -> bool:
        return self._handle is not None

    def start(self) -> None:
        if self._handle is None:
            self._handle = self._timers.call_later(self.interval, self._tick)
            logger.debug(f"[{self.name}] started (interval={self.interval}s)")

    def stop(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
            logger.debug(f"[{self.name}] stopped")

    def _tick(self) -> None:
        try:
            self._callback()
        except Exception:
            logger.exception(f"[{self.name}] run failed")
        finally:
            if self._handle is not None:
                self._handle = self._timers.call_later(self.interval, self._tick)
