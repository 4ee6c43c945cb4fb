# metrics_hub/state.py
"""
Traffic Metrics Hub - Dashboard State Store

Single source of truth for the dashboard:
- device filter and selected day (scalar slices)
- regular and expanded widget collections (ordered tuples of WidgetConfig)

Every mutation computes the new values first, applies all changed slices,
then publishes them, so a subscriber reading several slices always sees a
consistent state. Unchanged slices are never published.

Persistence:
- Each committed change marks the store dirty and re-arms a debouncer;
  one snapshot write happens after the quiet period
- On construction the persisted snapshot is validated and applied whole,
  or discarded in favour of defaults
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Iterable, Optional, Sequence

from .cache import SeriesCache
from .config import DEFAULT_SELECTED_DAY, PERSIST_DEBOUNCE_SECONDS
from .data_source import MetricsDataSource
from .errors import InvalidReorder, InvalidSnapshot, UnknownMetricType
from .models import (
    DashboardSnapshot,
    DeviceFilter,
    MetricSeries,
    MetricType,
    WidgetCollection,
    WidgetConfig,
)
from .observable import CompositeSubscription, StateSlice, Subscription
from .persistence import SnapshotStore
from .scheduling import Debouncer, Timers
from .validators import parse_snapshot, serialize_snapshot

logger = logging.getLogger(__name__)

WidgetList = tuple[WidgetConfig, ...]


def widgets_equal(a: Sequence[WidgetConfig], b: Sequence[WidgetConfig]) -> bool:
    """Same length, same (id, metric_type) pairs in the same order."""
    return len(a) == len(b) and all(
        x.id == y.id and x.metric_type == y.metric_type for x, y in zip(a, b)
    )


class DashboardStore:
    """
    Observable dashboard state with debounced snapshot persistence.

    Usage:
        store = DashboardStore(source, cache, snapshot_store=FileSnapshotStore(path), timers=timers)
        widget_id = store.add_widget(WidgetCollection.REGULAR, MetricType.USERS)
        store.set_device_filter(DeviceFilter.MOBILE)
        store.move_widget(widget_id)   # regular -> expanded
    """

    def __init__(
        self,
        data_source: MetricsDataSource,
        cache: SeriesCache,
        snapshot_store: Optional[SnapshotStore] = None,
        timers: Optional[Timers] = None,
        persist_delay: float = PERSIST_DEBOUNCE_SECONDS,
    ):
        self._source = data_source
        self._cache = cache
        self._snapshot_store = snapshot_store
        self._lock = threading.RLock()

        self.device_filter: StateSlice[DeviceFilter] = StateSlice("device_filter", DeviceFilter.TOTAL)
        self.selected_day: StateSlice[str] = StateSlice("selected_day", self.default_day())
        self.regular_widgets: StateSlice[WidgetList] = StateSlice("regular_widgets", (), widgets_equal)
        self.expanded_widgets: StateSlice[WidgetList] = StateSlice("expanded_widgets", (), widgets_equal)
        self._next_id = 1

        self._dirty = False
        self._persist: Optional[Debouncer] = None
        if snapshot_store is not None and timers is not None:
            self._persist = Debouncer(timers, persist_delay, self._write_snapshot)

        if snapshot_store is not None:
            self._restore()

    # ==========================================================
    # Defaults & Restore
    # ==========================================================
    def default_day(self) -> str:
        """Last day of the data month."""
        days = self._source.available_days()
        return days[-1] if days else DEFAULT_SELECTED_DAY

    def available_days(self) -> list[str]:
        return self._source.available_days()

    def _restore(self) -> None:
        try:
            blob = self._snapshot_store.load()
        except Exception:
            logger.exception("Failed to read dashboard snapshot, using defaults")
            return

        if blob is None:
            logger.info("No dashboard snapshot found, using defaults")
            return

        try:
            snapshot = parse_snapshot(blob)
        except InvalidSnapshot as e:
            logger.warning(f"Discarding invalid dashboard snapshot: {e}")
            return

        # Restore is not a user change: replace without publishing or persisting
        self.device_filter.replace(snapshot.device_filter)
        self.selected_day.replace(snapshot.selected_day)
        self.regular_widgets.replace(snapshot.regular_widgets)
        self.expanded_widgets.replace(snapshot.expanded_widgets)
        ids = snapshot.widget_ids
        self._next_id = max(ids) + 1 if ids else 1
        logger.info(
            f"Restored dashboard snapshot: filter={snapshot.device_filter.value}, "
            f"day={snapshot.selected_day}, widgets={len(ids)}"
        )

    # ==========================================================
    # Commit / Notify
    # ==========================================================
    def _slice_for(self, collection: WidgetCollection) -> StateSlice[WidgetList]:
        collection = WidgetCollection(collection)
        if collection is WidgetCollection.REGULAR:
            return self.regular_widgets
        return self.expanded_widgets

    def _commit(self, changes: Iterable[tuple[StateSlice, object]]) -> bool:
        """Apply every change, then publish the slices that changed."""
        with self._lock:
            changed = [slice_ for slice_, value in changes if slice_.replace(value)]
            if changed:
                self._mark_dirty()

        for slice_ in changed:
            slice_.publish()
        return bool(changed)

    # ==========================================================
    # Scalar Mutators
    # ==========================================================
    def set_device_filter(self, device_filter: DeviceFilter | str) -> bool:
        return self._commit([(self.device_filter, DeviceFilter(device_filter))])

    def set_selected_day(self, day: str) -> bool:
        # Callers pass ISO dates; no format validation here
        return self._commit([(self.selected_day, day)])

    # ==========================================================
    # Widget Mutators
    # ==========================================================
    def add_widget(self, collection: WidgetCollection | str, metric_type: MetricType | str) -> int:
        """Append a new widget; ids are never reused, even after removal."""
        target = self._slice_for(collection)
        metric_type = MetricType(metric_type)
        with self._lock:
            widget_id = self._next_id
            self._next_id += 1
            self._commit([(target, target.value + (WidgetConfig(widget_id, metric_type),))])
        logger.info(f"Added widget {widget_id} ({metric_type.value}) to {WidgetCollection(collection).value}")
        return widget_id

    def remove_widget(self, widget_id: int) -> bool:
        with self._lock:
            location = self.locate_widget(widget_id)
            if location is None:
                return False
            source = self._slice_for(location)
            remaining = tuple(w for w in source.value if w.id != widget_id)
            return self._commit([(source, remaining)])

    def move_widget(self, widget_id: int) -> bool:
        """Toggle display mode: move to the end of the other collection."""
        with self._lock:
            location = self.locate_widget(widget_id)
            if location is None:
                return False
            source = self._slice_for(location)
            target = self._slice_for(location.other)
            widget = next(w for w in source.value if w.id == widget_id)
            return self._commit([
                (source, tuple(w for w in source.value if w.id != widget_id)),
                (target, target.value + (widget,)),
            ])

    def update_widget_type(self, widget_id: int, metric_type: MetricType | str) -> bool:
        metric_type = MetricType(metric_type)
        with self._lock:
            location = self.locate_widget(widget_id)
            if location is None:
                return False
            source = self._slice_for(location)
            updated = tuple(
                WidgetConfig(w.id, metric_type) if w.id == widget_id else w
                for w in source.value
            )
            return self._commit([(source, updated)])

    def toggle_metric_type(self, widget_id: int) -> bool:
        widget = self.get_widget(widget_id)
        if widget is None:
            return False
        return self.update_widget_type(widget_id, widget.metric_type.toggled())

    def reorder_widgets(self, collection: WidgetCollection | str, new_order: Sequence[WidgetConfig]) -> bool:
        """
        Replace a collection's order.

        Raises:
            InvalidReorder: new_order adds, drops, duplicates or retypes a
                            widget. State is left unchanged.
        """
        target = self._slice_for(collection)
        with self._lock:
            current = {w.id: w.metric_type for w in target.value}
            new_order = tuple(new_order)
            proposed_ids = [w.id for w in new_order]

            if len(new_order) != len(current) or len(set(proposed_ids)) != len(proposed_ids):
                logger.warning(f"Rejected reorder of {WidgetCollection(collection).value}: {proposed_ids}")
                raise InvalidReorder(
                    f"Reorder must be a permutation of {sorted(current)}, got {proposed_ids}."
                )
            for widget in new_order:
                if current.get(widget.id) != widget.metric_type:
                    logger.warning(f"Rejected reorder of {WidgetCollection(collection).value}: widget {widget.id}")
                    raise InvalidReorder(
                        f"Widget {widget.id} is not in this collection with type "
                        f"{widget.metric_type!r}."
                    )
            reordered = tuple(WidgetConfig(w.id, current[w.id]) for w in new_order)
            return self._commit([(target, reordered)])

    # ==========================================================
    # Queries
    # ==========================================================
    def locate_widget(self, widget_id: int) -> Optional[WidgetCollection]:
        for collection in WidgetCollection:
            if any(w.id == widget_id for w in self._slice_for(collection).value):
                return collection
        return None

    def get_widget(self, widget_id: int) -> Optional[WidgetConfig]:
        """Linear lookup across both collections; None when not found."""
        for widget in self.regular_widgets.value + self.expanded_widgets.value:
            if widget.id == widget_id:
                return widget
        return None

    def widget_ids(self) -> list[int]:
        return [w.id for w in self.regular_widgets.value + self.expanded_widgets.value]

    @property
    def next_id(self) -> int:
        return self._next_id

    def get_metric_series(self, metric_type: MetricType | str) -> MetricSeries:
        """
        Series for the current filter and day, through the cache.

        A metric type the source cannot supply degrades to an empty series
        so the widget shows zeroes instead of failing.
        """
        try:
            return self._cache.get(metric_type, self.device_filter.value, self.selected_day.value)
        except UnknownMetricType as e:
            logger.warning(f"{e}; falling back to empty series")
            return MetricSeries.empty()

    def snapshot(self) -> DashboardSnapshot:
        with self._lock:
            return DashboardSnapshot(
                device_filter=self.device_filter.value,
                selected_day=self.selected_day.value,
                regular_widgets=self.regular_widgets.value,
                expanded_widgets=self.expanded_widgets.value,
            )

    def watch(self, callback: Callable[[DashboardSnapshot], None], emit_current: bool = True) -> Subscription:
        """Call back with a full snapshot whenever any slice changes."""
        subscriptions = CompositeSubscription(
            slice_.subscribe(lambda _value: callback(self.snapshot()), emit_current=False)
            for slice_ in (self.device_filter, self.selected_day, self.regular_widgets, self.expanded_widgets)
        )
        if emit_current:
            callback(self.snapshot())
        return subscriptions

    # ==========================================================
    # Persistence
    # ==========================================================
    @property
    def dirty(self) -> bool:
        return self._dirty

    def _mark_dirty(self) -> None:
        if self._snapshot_store is None:
            return
        self._dirty = True
        if self._persist is not None:
            self._persist.trigger()

    def _write_snapshot(self) -> None:
        if not self._dirty or self._snapshot_store is None:
            return
        self._dirty = False
        blob = serialize_snapshot(self.snapshot())
        try:
            self._snapshot_store.save(blob)
            logger.debug(f"Dashboard snapshot saved ({len(blob)} bytes)")
        except Exception:
            # Retry on the next change
            self._dirty = True
            logger.exception("Failed to save dashboard snapshot")

    def flush(self) -> None:
        """Write a pending snapshot now instead of waiting for the debounce."""
        if self._persist is not None:
            self._persist.cancel()
        self._write_snapshot()

    def close(self) -> None:
        self.flush()
