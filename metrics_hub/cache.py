# metrics_hub/cache.py
"""
Traffic Metrics Hub - Derived-Data Cache

Read-through cache of metric series:
- TTLCache keyed by (metric_type, device_filter, selected_day)
- Entries expire 5 minutes after creation (lazy on lookup)
- Periodic sweep every minute bounds memory for keys never requeried

Never invalidated by writers: the data source is immutable for the
process lifetime, so a short TTL is enough to stay consistent.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Any, Optional

from cachetools import TTLCache

from .config import CACHE_MAXSIZE, CACHE_SWEEP_INTERVAL, CACHE_TTL_SECONDS
from .data_source import MetricsDataSource
from .errors import UnknownMetricType
from .models import CacheEntry, DeviceFilter, MetricSeries, MetricType
from .scheduling import PeriodicTask, Timers

logger = logging.getLogger(__name__)

CacheKey = tuple[MetricType, DeviceFilter, str]


def make_cache_key(metric_type: MetricType | str, device_filter: DeviceFilter | str, selected_day: str) -> CacheKey:
    """
    Generate cache key (pure function of its three inputs).

    Raises:
        UnknownMetricType: metric_type is not a known metric type.
    """
    try:
        metric = MetricType(metric_type)
    except ValueError:
        raise UnknownMetricType(metric_type)
    return (metric, DeviceFilter(device_filter), selected_day)


class SeriesCache:
    """
    TTL cache in front of a MetricsDataSource.

    Usage:
        cache = SeriesCache(source, timers=timers)
        cache.start()                      # periodic sweep
        series = cache.get(MetricType.USERS, DeviceFilter.TOTAL, "2025-02-28")

    Note:
        - UnknownMetricType from the source propagates and nothing is cached
        - Thread-safe with internal locking
    """

    def __init__(
        self,
        data_source: MetricsDataSource,
        timers: Optional[Timers] = None,
        ttl: float = CACHE_TTL_SECONDS,
        sweep_interval: float = CACHE_SWEEP_INTERVAL,
        maxsize: int = CACHE_MAXSIZE,
    ):
        self._source = data_source
        self._timers = timers
        self._clock = timers.now if timers is not None else time.monotonic
        self.ttl = ttl
        # maxsize: 최대 캐시 항목 수, ttl: 초 단위 TTL
        self._entries: TTLCache = TTLCache(maxsize=maxsize, ttl=ttl, timer=self._clock)
        self._lock = threading.Lock()
        self._sweeper = (
            PeriodicTask(timers, sweep_interval, self.sweep, name="cache-sweep")
            if timers is not None else None
        )
        self.hits = 0
        self.misses = 0
        self.fetches = 0

    def get(self, metric_type: MetricType | str, device_filter: DeviceFilter | str, selected_day: str) -> MetricSeries:
        """
        Return the cached series, fetching from the data source on a miss.

        Raises:
            UnknownMetricType: The data source has no series for metric_type.
        """
        key = make_cache_key(metric_type, device_filter, selected_day)

        with self._lock:
            entry: Optional[CacheEntry] = self._entries.get(key)
            if entry is not None:
                self.hits += 1
                return entry.series
            self.misses += 1

        # Fetch outside lock
        series = self._source.get_series(key[0])

        now = self._clock()
        with self._lock:
            self.fetches += 1
            self._entries[key] = CacheEntry(series=series, created_at=now, expires_at=now + self.ttl)
        return series

    def peek(self, metric_type: MetricType | str, device_filter: DeviceFilter | str, selected_day: str) -> Optional[CacheEntry]:
        """Unexpired entry for the key without counting a hit, or None."""
        key = make_cache_key(metric_type, device_filter, selected_day)
        with self._lock:
            return self._entries.get(key)

    def sweep(self) -> int:
        """Remove expired entries. Returns the number removed."""
        with self._lock:
            expired = self._entries.expire()
        removed = len(expired) if expired is not None else 0
        if removed:
            logger.debug(f"Cache sweep removed {removed} expired entries")
        return removed

    def start(self) -> None:
        """Start the periodic sweep (requires timers)."""
        if self._sweeper is None:
            raise RuntimeError("SeriesCache needs timers to run the periodic sweep")
        self._sweeper.start()

    def stop(self) -> None:
        if self._sweeper is not None:
            self._sweeper.stop()

    def clear(self) -> None:
        """Clear all cache entries (thread-safe)."""
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def stats(self) -> dict[str, Any]:
        """Get cache statistics for monitoring (thread-safe)."""
        with self._lock:
            return {
                "size": len(self._entries),
                "maxsize": self._entries.maxsize,
                "ttl": self._entries.ttl,
                "hits": self.hits,
                "misses": self.misses,
                "fetches": self.fetches,
                "sweeping": self._sweeper is not None and self._sweeper.running,
            }
