# metrics_hub/calculations.py
"""
Traffic Metrics Hub - Metric Calculation Engine

Pure, stateless functions over a MetricSeries and a DeviceFilter.

"No meaningful comparison" (first week of data, zero base) is an
expected state: the comparison helpers return 0 instead of raising.
"""

from __future__ import annotations

import math
from typing import Sequence

import pandas as pd

from .config import CHART_DAYS, COMPARISON_LOOKBACK_DAYS, WEEK_OVER_WEEK_OFFSET
from .errors import DayNotFound
from .models import DeviceFilter, MetricSeries, MetricSummary

__all__ = [
    "value_for_day",
    "cumulative_to_date",
    "progress_percentage",
    "week_over_week_change",
    "trailing_average_comparison",
    "comparison_window",
    "summarize",
    "series_to_frame",
    "chart_frame",
]


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _percent_change(current_value: float, previous_value: float) -> int:
    """
    변화율 계산 (정수 %)

    Returns 0 when the base is zero or the result is not finite.
    """
    if previous_value == 0:
        return 0

    change = ((current_value - previous_value) / previous_value) * 100
    if not math.isfinite(change):
        return 0
    return _round_half_up(change)


def value_for_day(series: MetricSeries, day: str, device_filter: DeviceFilter) -> int:
    """
    Selected field of the entry whose date equals `day`.

    Raises:
        DayNotFound: No entry has exactly that date string.
    """
    for entry in series.daily_data:
        if entry.date == day:
            return entry.value_for(device_filter)
    raise DayNotFound(day)


def cumulative_to_date(series: MetricSeries, day: str, device_filter: DeviceFilter) -> int:
    # ISO dates sort chronologically as strings
    return sum(
        entry.value_for(device_filter)
        for entry in series.daily_data
        if entry.date <= day
    )


def progress_percentage(series: MetricSeries, day: str, device_filter: DeviceFilter) -> float:
    """
    Cumulative value as a percentage of the monthly target.

    Not capped at 100; display code clamps where it needs to.
    A non-positive target (empty fallback series) yields 0.
    """
    if series.monthly_target <= 0:
        return 0.0
    return cumulative_to_date(series, day, device_filter) / series.monthly_target * 100


def week_over_week_change(window: Sequence[float]) -> int:
    """Last value vs. the value 7 positions earlier, in whole percent."""
    if len(window) < WEEK_OVER_WEEK_OFFSET + 1:
        return 0

    today_value = window[-1]
    last_week_value = window[-(WEEK_OVER_WEEK_OFFSET + 1)]
    return _percent_change(today_value, last_week_value)


def trailing_average_comparison(window: Sequence[float]) -> int:
    """Last value vs. the mean of all preceding values, in whole percent."""
    if len(window) < 2:
        return 0

    today_value = window[-1]
    previous_days = window[:-1]
    average = sum(previous_days) / len(previous_days)
    return _percent_change(today_value, average)


def comparison_window(
    series: MetricSeries,
    day: str,
    device_filter: DeviceFilter,
    lookback_days: int = COMPARISON_LOOKBACK_DAYS,
) -> list[int]:
    """
    Up to lookback_days + 1 consecutive values ending at `day`.

    Clipped at the start of the series; empty when `day` is absent.
    """
    day_index = series.index_of(day)
    if day_index == -1:
        return []

    start_index = max(0, day_index - lookback_days)
    relevant_days = series.daily_data[start_index:day_index + 1]
    return [entry.value_for(device_filter) for entry in relevant_days]


def summarize(series: MetricSeries, day: str, device_filter: DeviceFilter) -> MetricSummary:
    """
    Run every calculation for one widget cycle.

    Raises:
        DayNotFound: `day` is absent from the series.
    """
    current_value = value_for_day(series, day, device_filter)
    window = comparison_window(series, day, device_filter)

    return MetricSummary(
        current_value=current_value,
        cumulative_value=cumulative_to_date(series, day, device_filter),
        progress_percentage=progress_percentage(series, day, device_filter),
        week_over_week_change=week_over_week_change(window),
        trailing_average_change=trailing_average_comparison(window),
        monthly_target=series.monthly_target,
    )


def series_to_frame(series: MetricSeries) -> pd.DataFrame:
    """Whole series as a DataFrame with columns date/total/desktop/mobile."""
    if not series.daily_data:
        return pd.DataFrame(columns=["date", "total", "desktop", "mobile"])

    return pd.DataFrame(
        [
            {
                "date": entry.date,
                "total": entry.total,
                "desktop": entry.desktop,
                "mobile": entry.mobile,
            }
            for entry in series.daily_data
        ]
    )


def chart_frame(
    series: MetricSeries,
    day: str,
    device_filter: DeviceFilter,
    days: int = CHART_DAYS,
) -> pd.DataFrame:
    """
    Trailing window for the widget sparkline.

    Returns:
        DataFrame with columns 'date', 'label' ("Feb 1") and 'value',
        oldest first. Empty when `day` is absent.
    """
    day_index = series.index_of(day)
    if day_index == -1 or days <= 0:
        return pd.DataFrame(columns=["date", "label", "value"])

    start_index = max(0, day_index - (days - 1))
    relevant_days = series.daily_data[start_index:day_index + 1]

    frame = pd.DataFrame(
        {
            "date": [entry.date for entry in relevant_days],
            "value": [entry.value_for(device_filter) for entry in relevant_days],
        }
    )
    parsed = pd.to_datetime(frame["date"])
    frame.insert(1, "label", [f"{ts:%b} {ts.day}" for ts in parsed])
    return frame
