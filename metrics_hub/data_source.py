# metrics_hub/data_source.py
"""
Traffic Metrics Hub - Read-only Metric Data Source

The core never mutates the data it is given. The bundled sample month
(February 2025) is loaded from CSV with pandas.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import Final, Mapping, Protocol

import pandas as pd

from .config import MONTHLY_TARGETS, SAMPLE_DATA_FILE
from .errors import UnknownMetricType
from .models import DailyMetric, MetricSeries, MetricType

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS: Final[tuple[str, ...]] = ("metric_type", "date", "total", "desktop", "mobile")


class MetricsDataSource(Protocol):
    def get_series(self, metric_type: MetricType | str) -> MetricSeries: ...

    def available_days(self) -> list[str]: ...


def _coerce_metric_type(metric_type: MetricType | str) -> MetricType:
    try:
        return MetricType(metric_type)
    except ValueError:
        raise UnknownMetricType(metric_type)


class InMemoryDataSource:
    """
    Series held in memory, keyed by metric type.

    Raises UnknownMetricType for anything it does not hold.
    """

    def __init__(self, series: Mapping[MetricType, MetricSeries]):
        self._series = dict(series)

    def get_series(self, metric_type: MetricType | str) -> MetricSeries:
        key = _coerce_metric_type(metric_type)
        try:
            return self._series[key]
        except KeyError:
            raise UnknownMetricType(metric_type)

    def available_days(self) -> list[str]:
        """All days present in any series, oldest first."""
        days: set[str] = set()
        for series in self._series.values():
            days.update(series.days)
        return sorted(days)

    def metric_types(self) -> list[MetricType]:
        return list(self._series)

    @classmethod
    def from_frame(cls, df: pd.DataFrame, targets: Mapping[str, float]) -> "InMemoryDataSource":
        """
        Build series from a long-format frame.

        Args:
            df: Columns metric_type, date, total, desktop, mobile
            targets: Monthly target per metric type value

        Raises:
            ValueError: Missing columns, unknown metric type, missing target
                        or duplicate dates within one metric type.
        """
        missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
        if missing:
            raise ValueError(f"Missing columns: {', '.join(missing)}")

        series: dict[MetricType, MetricSeries] = {}
        for raw_type, group in df.groupby("metric_type", sort=False):
            try:
                metric_type = MetricType(raw_type)
            except ValueError:
                raise ValueError(f"Unknown metric type in data: '{raw_type}'")

            if metric_type.value not in targets:
                raise ValueError(f"No monthly target configured for '{metric_type.value}'")

            group = group.sort_values("date")
            if group["date"].duplicated().any():
                raise ValueError(f"Duplicate dates for '{metric_type.value}'")

            daily = tuple(
                DailyMetric(
                    date=str(record["date"]),
                    total=int(record["total"]),
                    desktop=int(record["desktop"]),
                    mobile=int(record["mobile"]),
                )
                for record in group.to_dict(orient="records")
            )
            series[metric_type] = MetricSeries(monthly_target=targets[metric_type.value], daily_data=daily)

        return cls(series)


def load_series_csv(csv_path: str | Path, targets: Mapping[str, float] = MONTHLY_TARGETS) -> InMemoryDataSource:
    """
    Load a data source from CSV.

    Raises:
        FileNotFoundError: CSV path does not exist.
        ValueError: Malformed content (see InMemoryDataSource.from_frame).
    """
    path = Path(csv_path)
    if not path.exists():
        raise FileNotFoundError(f"CSV file not found: {path}")

    # Keep dates as ISO strings; comparisons are lexicographic
    df = pd.read_csv(path, dtype={"metric_type": str, "date": str})
    source = InMemoryDataSource.from_frame(df, targets)
    logger.info(f"Loaded {len(df)} daily rows from {path.name}")
    return source


@lru_cache(maxsize=1)
def load_sample_data_source() -> InMemoryDataSource:
    """The bundled February 2025 month (users + page views)."""
    return load_series_csv(SAMPLE_DATA_FILE)
