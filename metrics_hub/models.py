# metrics_hub/models.py
"""
Traffic Metrics Hub - Data Model

Immutable value types shared by the calculation engine, cache, store
and widget coordinators.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class DeviceFilter(str, Enum):
    """Which sub-population of a daily count to read."""

    TOTAL = "total"
    DESKTOP = "desktop"
    MOBILE = "mobile"


class MetricType(str, Enum):
    USERS = "users"
    PAGE_VIEWS = "pageViews"

    @property
    def label(self) -> str:
        return "Users" if self is MetricType.USERS else "Page Views"

    def toggled(self) -> "MetricType":
        return MetricType.PAGE_VIEWS if self is MetricType.USERS else MetricType.USERS


class WidgetCollection(str, Enum):
    """Display mode collections owning widget configs."""

    REGULAR = "regular"
    EXPANDED = "expanded"

    @property
    def other(self) -> "WidgetCollection":
        return WidgetCollection.EXPANDED if self is WidgetCollection.REGULAR else WidgetCollection.REGULAR


@dataclass(frozen=True)
class DailyMetric:
    """
    One day of counts.

    total == desktop + mobile is assumed by producers but not enforced.
    """
    date: str
    total: int
    desktop: int
    mobile: int

    def value_for(self, device_filter: DeviceFilter) -> int:
        if device_filter is DeviceFilter.DESKTOP:
            return self.desktop
        if device_filter is DeviceFilter.MOBILE:
            return self.mobile
        return self.total


@dataclass(frozen=True)
class MetricSeries:
    """A month of daily metrics, strictly increasing by date."""
    monthly_target: float
    daily_data: tuple[DailyMetric, ...] = ()

    @classmethod
    def empty(cls) -> "MetricSeries":
        """Safe fallback for metric types the data source cannot supply."""
        return cls(monthly_target=0, daily_data=())

    @property
    def days(self) -> list[str]:
        return [entry.date for entry in self.daily_data]

    def index_of(self, day: str) -> int:
        """Position of the entry for `day`, or -1 when absent."""
        for index, entry in enumerate(self.daily_data):
            if entry.date == day:
                return index
        return -1


@dataclass(frozen=True)
class WidgetConfig:
    id: int
    metric_type: MetricType

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "metricType": self.metric_type.value}


@dataclass(frozen=True)
class DashboardSnapshot:
    """The persisted projection of Store state."""
    device_filter: DeviceFilter
    selected_day: str
    regular_widgets: tuple[WidgetConfig, ...] = ()
    expanded_widgets: tuple[WidgetConfig, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "deviceFilter": self.device_filter.value,
            "selectedDay": self.selected_day,
            "regularWidgets": [w.to_dict() for w in self.regular_widgets],
            "expandedWidgets": [w.to_dict() for w in self.expanded_widgets],
        }

    @property
    def widget_ids(self) -> list[int]:
        return [w.id for w in self.regular_widgets + self.expanded_widgets]


@dataclass(frozen=True)
class CacheEntry:
    series: MetricSeries
    created_at: float
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at


@dataclass(frozen=True)
class MetricSummary:
    """Derived analytics for one widget as of the selected day."""
    current_value: float
    cumulative_value: float
    progress_percentage: float
    week_over_week_change: int
    trailing_average_change: int
    monthly_target: float

    @property
    def target_reached(self) -> bool:
        return self.progress_percentage >= 100

    @classmethod
    def zero(cls, monthly_target: float = 0) -> "MetricSummary":
        return cls(0, 0, 0.0, 0, 0, monthly_target)


__all__ = [
    "DeviceFilter",
    "MetricType",
    "WidgetCollection",
    "DailyMetric",
    "MetricSeries",
    "WidgetConfig",
    "DashboardSnapshot",
    "CacheEntry",
    "MetricSummary",
]
