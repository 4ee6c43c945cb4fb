# tests/conftest.py
"""
Shared fixtures: a manually advanced clock and small metric data sets.
"""

import heapq
import itertools
import sys
from pathlib import Path

import pytest

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from metrics_hub.cache import SeriesCache
from metrics_hub.data_source import InMemoryDataSource
from metrics_hub.models import DailyMetric, MetricSeries, MetricType
from metrics_hub.persistence import MemorySnapshotStore
from metrics_hub.state import DashboardStore


class ManualHandle:
    def __init__(self):
        self._cancelled = False

    def cancel(self):
        self._cancelled = True

    def cancelled(self):
        return self._cancelled


class ManualTimers:
    """Deterministic Timers: nothing runs until advance() is called."""

    def __init__(self, start=1000.0, frame_interval=1 / 60):
        self._now = start
        self.frame_interval = frame_interval
        self._queue = []
        self._seq = itertools.count()

    def now(self):
        return self._now

    def call_later(self, delay, callback):
        handle = ManualHandle()
        heapq.heappush(self._queue, (self._now + max(delay, 0.0), next(self._seq), handle, callback))
        return handle

    def request_frame(self, callback):
        return self.call_later(self.frame_interval, lambda: callback(self._now))

    @property
    def pending(self):
        return sum(1 for _, _, handle, _ in self._queue if not handle.cancelled())

    def advance(self, seconds):
        """Move the clock forward, running every callback that falls due."""
        target = self._now + seconds
        while self._queue and self._queue[0][0] <= target + 1e-9:
            due, _, handle, callback = heapq.heappop(self._queue)
            self._now = max(self._now, due)
            if not handle.cancelled():
                callback()
        self._now = max(self._now, target)

    def run_until_idle(self, limit=10_000):
        """Run queued callbacks in time order until none are left."""
        for _ in range(limit):
            if not self._queue:
                return
            due, _, handle, callback = heapq.heappop(self._queue)
            self._now = max(self._now, due)
            if not handle.cancelled():
                callback()
        raise AssertionError("timers never went idle")


def make_series(values, target, start_day=1, desktop_share=0.6):
    """Feb 2025 series from a list of daily totals."""
    daily = []
    for offset, total in enumerate(values):
        desktop = int(total * desktop_share)
        daily.append(
            DailyMetric(
                date=f"2025-02-{start_day + offset:02d}",
                total=total,
                desktop=desktop,
                mobile=total - desktop,
            )
        )
    return MetricSeries(monthly_target=target, daily_data=tuple(daily))


@pytest.fixture()
def timers():
    return ManualTimers()


@pytest.fixture()
def users_series():
    # 10 days, 100..190 users (1,450 total)
    return make_series([100 + 10 * i for i in range(10)], target=2000)


@pytest.fixture()
def page_views_series():
    return make_series([1000 + 50 * i for i in range(10)], target=50_000)


@pytest.fixture()
def source(users_series, page_views_series):
    return InMemoryDataSource({
        MetricType.USERS: users_series,
        MetricType.PAGE_VIEWS: page_views_series,
    })


@pytest.fixture()
def cache(source, timers):
    return SeriesCache(source, timers=timers)


@pytest.fixture()
def snapshot_store():
    return MemorySnapshotStore()


@pytest.fixture()
def store(source, cache, snapshot_store, timers):
    return DashboardStore(source, cache, snapshot_store=snapshot_store, timers=timers)
