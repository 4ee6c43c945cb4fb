# metrics_hub/context.py
"""
Traffic Metrics Hub - Application Context

Owns the collaborating components of one dashboard and their lifecycle:
data source -> cache -> store -> animation scheduler -> one coordinator
per widget present in the store.

Constructed by the application root and passed to consumers; there is no
module-level shared instance.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from .animation import AnimationScheduler
from .cache import SeriesCache
from .config import SNAPSHOT_FILE
from .data_source import MetricsDataSource, load_sample_data_source
from .models import DashboardSnapshot
from .observable import Subscription
from .persistence import FileSnapshotStore, SnapshotStore
from .scheduling import LoopTimers, Timers
from .state import DashboardStore
from .widgets import ErrorSink, LoggingErrorSink, WidgetUpdateCoordinator

logger = logging.getLogger(__name__)


class DashboardContext:
    """
    Wires the core together and keeps coordinators in sync with the store.

    Usage:
        async def main():
            ctx = DashboardContext.create()
            ctx.start()
            widget_id = ctx.store.add_widget("regular", "users")
            ...
            ctx.close()
    """

    def __init__(
        self,
        data_source: MetricsDataSource,
        timers: Timers,
        snapshot_store: Optional[SnapshotStore] = None,
        error_sink: Optional[ErrorSink] = None,
    ):
        self.timers = timers
        self.data_source = data_source
        self.error_sink = error_sink or LoggingErrorSink()
        self.cache = SeriesCache(data_source, timers=timers)
        self.store = DashboardStore(data_source, self.cache, snapshot_store=snapshot_store, timers=timers)
        self.scheduler = AnimationScheduler(timers)
        self._coordinators: dict[int, WidgetUpdateCoordinator] = {}
        self._watch: Optional[Subscription] = None

    @classmethod
    def create(
        cls,
        data_source: Optional[MetricsDataSource] = None,
        snapshot_path: Optional[str | Path] = SNAPSHOT_FILE,
        timers: Optional[Timers] = None,
        error_sink: Optional[ErrorSink] = None,
    ) -> "DashboardContext":
        """
        Default wiring: bundled sample data, file snapshot, asyncio timers.

        Must be called with a running event loop unless timers are given.
        """
        return cls(
            data_source=data_source or load_sample_data_source(),
            timers=timers or LoopTimers(),
            snapshot_store=FileSnapshotStore(snapshot_path) if snapshot_path is not None else None,
            error_sink=error_sink,
        )

    # ==========================================================
    # Lifecycle
    # ==========================================================
    @property
    def started(self) -> bool:
        return self._watch is not None

    def start(self) -> None:
        if self.started:
            return
        self.cache.start()
        self._watch = self.store.watch(self._sync_widgets)
        logger.info(f"Dashboard started with {len(self._coordinators)} widgets")

    def close(self) -> None:
        if self._watch is not None:
            self._watch.unsubscribe()
            self._watch = None
        for coordinator in self._coordinators.values():
            coordinator.unmount()
        self._coordinators.clear()
        self.cache.stop()
        self.store.close()
        logger.info("Dashboard closed")

    def _sync_widgets(self, snapshot: DashboardSnapshot) -> None:
        """Mount coordinators for new widgets, unmount removed ones."""
        present = set(snapshot.widget_ids)

        for widget_id in [i for i in self._coordinators if i not in present]:
            self._coordinators.pop(widget_id).unmount()
            logger.debug(f"Unmounted widget {widget_id}")

        for widget_id in snapshot.widget_ids:
            if widget_id not in self._coordinators:
                coordinator = WidgetUpdateCoordinator(
                    widget_id,
                    self.store,
                    self.scheduler,
                    self.timers,
                    error_sink=self.error_sink,
                )
                self._coordinators[widget_id] = coordinator
                coordinator.mount()
                logger.debug(f"Mounted widget {widget_id}")

    # ==========================================================
    # Access
    # ==========================================================
    def widget(self, widget_id: int) -> Optional[WidgetUpdateCoordinator]:
        return self._coordinators.get(widget_id)

    @property
    def coordinators(self) -> list[WidgetUpdateCoordinator]:
        """Coordinators in display order: regular widgets, then expanded."""
        return [self._coordinators[i] for i in self.store.widget_ids() if i in self._coordinators]
