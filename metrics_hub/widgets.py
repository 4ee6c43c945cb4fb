# metrics_hub/widgets.py
"""
Traffic Metrics Hub - Widget Update Coordinator

One coordinator per mounted widget:
- Watches device filter, selected day and the widget's own config
- Coalesces bursts with a short debounce window
- Recomputes only while the widget still exists in the store
- Feeds current / cumulative / progress targets to AnimatedValues

A failure in one widget's pipeline is recorded on that widget and
reported to the error sink; it never reaches the store or sibling widgets.
"""

from __future__ import annotations

import logging
from typing import Optional, Protocol

import pandas as pd

from .animation import (
    AnimatedValue,
    AnimationScheduler,
    ease_in_out_quad,
    ease_out_back,
    ease_out_expo,
)
from .calculations import chart_frame, summarize
from .config import (
    ANIMATION_DURATION,
    CHART_DAYS,
    EMPHASIS_DURATION,
    SIGNIFICANT_INCREASE_RATIO,
    WIDGET_DEBOUNCE_SECONDS,
)
from .formatting import format_change, format_large_number, format_number, format_percentage
from .logging_config import widget_context
from .models import MetricSeries, MetricSummary, WidgetConfig
from .observable import CompositeSubscription
from .scheduling import Debouncer, Timers
from .state import DashboardStore

logger = logging.getLogger(__name__)


class ErrorSink(Protocol):
    def report_error(self, context: str, error: Exception) -> None: ...


class LoggingErrorSink:
    """Default sink: log the failure and keep the last few for inspection."""

    def __init__(self, keep: int = 50):
        self.keep = keep
        self.errors: list[tuple[str, Exception]] = []

    def report_error(self, context: str, error: Exception) -> None:
        logger.error(f"[{context}] {type(error).__name__}: {error}")
        self.errors.append((context, error))
        del self.errors[:max(0, len(self.errors) - self.keep)]


class WidgetUpdateCoordinator:
    """
    Reactive update pipeline of a single widget.

    Usage:
        coordinator = WidgetUpdateCoordinator(widget_id, store, scheduler, timers)
        coordinator.mount()
        ...   # read coordinator.display_value every frame
        coordinator.unmount()
    """

    def __init__(
        self,
        widget_id: int,
        store: DashboardStore,
        scheduler: AnimationScheduler,
        timers: Timers,
        error_sink: Optional[ErrorSink] = None,
        debounce: float = WIDGET_DEBOUNCE_SECONDS,
    ):
        self.widget_id = widget_id
        self._store = store
        self._error_sink = error_sink or LoggingErrorSink()
        self._debouncer = Debouncer(timers, debounce, self.refresh)
        self._subscriptions: Optional[CompositeSubscription] = None
        self._widget: Optional[WidgetConfig] = None

        self.current = AnimatedValue(scheduler)
        self.cumulative = AnimatedValue(scheduler)
        self.progress = AnimatedValue(scheduler, percentage=True)

        self.summary: Optional[MetricSummary] = None
        self.error: Optional[Exception] = None
        self.refresh_count = 0

    # ==========================================================
    # Lifecycle
    # ==========================================================
    @property
    def mounted(self) -> bool:
        return self._subscriptions is not None

    def mount(self) -> None:
        if self.mounted:
            return
        self._widget = self._store.get_widget(self.widget_id)
        self._subscriptions = CompositeSubscription([
            self._store.device_filter.subscribe(lambda _: self._schedule(), emit_current=False),
            self._store.selected_day.subscribe(lambda _: self._schedule(), emit_current=False),
            self._store.regular_widgets.subscribe(lambda _: self._on_widgets_changed(), emit_current=False),
            self._store.expanded_widgets.subscribe(lambda _: self._on_widgets_changed(), emit_current=False),
        ])
        # First computation for the freshly mounted widget
        self._schedule()

    def unmount(self) -> None:
        if self._subscriptions is not None:
            self._subscriptions.unsubscribe()
            self._subscriptions = None
        self._debouncer.cancel()
        for value in (self.current, self.cumulative, self.progress):
            value.dispose()

    # ==========================================================
    # Triggers
    # ==========================================================
    def _on_widgets_changed(self) -> None:
        # Only this widget's own entry matters, not its siblings
        widget = self._store.get_widget(self.widget_id)
        if widget == self._widget:
            return
        self._widget = widget
        self._schedule()

    def _schedule(self) -> None:
        self._debouncer.trigger()

    def flush(self) -> bool:
        """Run a pending debounced refresh now."""
        return self._debouncer.flush()

    # ==========================================================
    # Pipeline
    # ==========================================================
    def refresh(self) -> bool:
        """
        Recompute and animate toward the new values.

        Returns:
            True if a computation ran successfully.
        """
        widget = self._store.get_widget(self.widget_id)
        if widget is None:
            # Removed while the debounce window was open
            return False

        with widget_context(self.widget_id):
            try:
                summary = self._compute(widget)
                self._animate(summary)
            except Exception as e:
                self.error = e
                logger.debug(f"Recompute failed, keeping previous values: {e}")
                self._error_sink.report_error(f"widget-{self.widget_id}", e)
                return False

        self.summary = summary
        self.error = None
        self.refresh_count += 1
        return True

    def _compute(self, widget: WidgetConfig) -> MetricSummary:
        series = self._store.get_metric_series(widget.metric_type)
        if not series.daily_data:
            # Unknown metric type fallback: show zeroes
            return MetricSummary.zero(series.monthly_target)
        return summarize(series, self._store.selected_day.value, self._store.device_filter.value)

    def _animate(self, summary: MetricSummary) -> None:
        previous = self.current.last_value
        increase = summary.current_value - previous
        if increase > previous * SIGNIFICANT_INCREASE_RATIO:
            self.current.update(summary.current_value, easing=ease_out_back, duration=EMPHASIS_DURATION)
        else:
            self.current.update(summary.current_value, easing=ease_out_expo, duration=ANIMATION_DURATION)

        self.cumulative.update(summary.cumulative_value, easing=ease_in_out_quad, duration=EMPHASIS_DURATION)
        self.progress.update(summary.progress_percentage)

    # ==========================================================
    # Readouts
    # ==========================================================
    @property
    def widget(self) -> Optional[WidgetConfig]:
        return self._store.get_widget(self.widget_id)

    @property
    def metric_label(self) -> str:
        widget = self.widget
        return widget.metric_type.label if widget is not None else ""

    @property
    def display_value(self) -> float:
        return self.current.display_value

    @property
    def display_cumulative_value(self) -> float:
        return self.cumulative.display_value

    @property
    def display_progress_percentage(self) -> float:
        return self.progress.display_value

    @property
    def progress_bar_width(self) -> float:
        return max(0.0, min(100.0, self.progress.display_value))

    @property
    def target_reached(self) -> bool:
        return self.summary is not None and self.summary.target_reached

    @property
    def value_text(self) -> str:
        return format_number(self.display_value)

    @property
    def cumulative_text(self) -> str:
        return format_large_number(self.display_cumulative_value)

    @property
    def progress_text(self) -> str:
        return format_percentage(self.display_progress_percentage)

    @property
    def week_over_week_text(self) -> str:
        return format_change(self.summary.week_over_week_change if self.summary else 0)

    @property
    def trailing_average_text(self) -> str:
        return format_change(self.summary.trailing_average_change if self.summary else 0)

    def chart_frame(self, days: int = CHART_DAYS) -> pd.DataFrame:
        """Sparkline data for the current filter and day."""
        widget = self.widget
        if widget is None:
            return chart_frame(MetricSeries.empty(), "", self._store.device_filter.value, days)
        series = self._store.get_metric_series(widget.metric_type)
        return chart_frame(series, self._store.selected_day.value, self._store.device_filter.value, days)
