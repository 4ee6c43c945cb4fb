# metrics_hub/errors.py
"""
Traffic Metrics Hub - Error Taxonomy

None of these are fatal: every failure path has a defined fallback
(zero values, unchanged state, or default state).
"""

from __future__ import annotations


class DashboardError(Exception):
    """Base class for all dashboard core errors."""


class DayNotFound(DashboardError, LookupError):
    """The requested day is absent from a metric series."""

    def __init__(self, day: str):
        super().__init__(f"No data found for day: '{day}'")
        self.day = day


class UnknownMetricType(DashboardError, LookupError):
    """The data source cannot supply a series for the metric type."""

    def __init__(self, metric_type: object):
        super().__init__(f"Unknown metric type: '{metric_type}'")
        self.metric_type = metric_type


class InvalidReorder(DashboardError, ValueError):
    """A reorder request is not a permutation of the current collection."""


class InvalidSnapshot(DashboardError, ValueError):
    """A persisted snapshot is corrupt or type-mismatched."""
