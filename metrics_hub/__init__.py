"""
Traffic Metrics Hub - Dashboard Core

Reactive state, derivation and animation core of the metrics dashboard:
- calculations: metric calculation engine (pure functions)
- cache: derived-data cache with TTL and periodic sweep
- state: dashboard state store with debounced snapshot persistence
- animation: per-frame number animation with cancellable handles
- widgets: per-widget update coordinator
- context: application context wiring everything together
"""

from .config import (
    BASE_DIR,
    LOGS_DIR,
    SNAPSHOT_FILE,
    SAMPLE_DATA_FILE,
    CACHE_TTL_SECONDS,
    CACHE_SWEEP_INTERVAL,
    PERSIST_DEBOUNCE_SECONDS,
    WIDGET_DEBOUNCE_SECONDS,
    CHANGE_THRESHOLD,
)

from .errors import (
    DashboardError,
    DayNotFound,
    UnknownMetricType,
    InvalidReorder,
    InvalidSnapshot,
)

from .models import (
    DeviceFilter,
    MetricType,
    WidgetCollection,
    DailyMetric,
    MetricSeries,
    WidgetConfig,
    DashboardSnapshot,
    CacheEntry,
    MetricSummary,
)

from .logging_config import setup_logging, get_logger, widget_context
from .data_source import InMemoryDataSource, load_series_csv, load_sample_data_source
from .persistence import FileSnapshotStore, MemorySnapshotStore
from .scheduling import LoopTimers, Debouncer, PeriodicTask
from .cache import SeriesCache
from .state import DashboardStore
from .animation import AnimationScheduler, AnimatedValue, EASINGS
from .widgets import WidgetUpdateCoordinator, LoggingErrorSink
from .context import DashboardContext

__all__ = [
    # config
    "BASE_DIR",
    "LOGS_DIR",
    "SNAPSHOT_FILE",
    "SAMPLE_DATA_FILE",
    "CACHE_TTL_SECONDS",
    "CACHE_SWEEP_INTERVAL",
    "PERSIST_DEBOUNCE_SECONDS",
    "WIDGET_DEBOUNCE_SECONDS",
    "CHANGE_THRESHOLD",
    # errors
    "DashboardError",
    "DayNotFound",
    "UnknownMetricType",
    "InvalidReorder",
    "InvalidSnapshot",
    # models
    "DeviceFilter",
    "MetricType",
    "WidgetCollection",
    "DailyMetric",
    "MetricSeries",
    "WidgetConfig",
    "DashboardSnapshot",
    "CacheEntry",
    "MetricSummary",
    # logging
    "setup_logging",
    "get_logger",
    "widget_context",
    # data / persistence
    "InMemoryDataSource",
    "load_series_csv",
    "load_sample_data_source",
    "FileSnapshotStore",
    "MemorySnapshotStore",
    # scheduling
    "LoopTimers",
    "Debouncer",
    "PeriodicTask",
    # components
    "SeriesCache",
    "DashboardStore",
    "AnimationScheduler",
    "AnimatedValue",
    "EASINGS",
    "WidgetUpdateCoordinator",
    "LoggingErrorSink",
    "DashboardContext",
]
