# metrics_hub/validators.py
"""
Traffic Metrics Hub - Validation Utilities

Pure validation functions. Date helpers raise ValueError; snapshot
helpers raise InvalidSnapshot so the store can discard a persisted
snapshot wholesale instead of applying part of it.
"""

from __future__ import annotations

import datetime as dt
import json
from typing import Any

from .config import DATE_FORMAT
from .errors import InvalidSnapshot
from .models import DashboardSnapshot, DeviceFilter, MetricType, WidgetConfig


def validate_date_format(date_str: str, field_name: str = "date") -> dt.date:
    """
    Parse and validate a date string in YYYY-MM-DD format.

    Args:
        date_str: Date string to validate.
        field_name: Field name for error messages.

    Returns:
        Parsed date object.

    Raises:
        ValueError: If the format is invalid.
    """
    if not isinstance(date_str, str) or len(date_str) != 10:
        raise ValueError(
            f"Invalid {field_name} format: '{date_str}'. Expected YYYY-MM-DD."
        )
    try:
        return dt.datetime.strptime(date_str, DATE_FORMAT).date()
    except ValueError:
        raise ValueError(
            f"Invalid {field_name} format: '{date_str}'. Expected YYYY-MM-DD."
        )


def _validate_widget(raw: Any, field_name: str) -> WidgetConfig:
    if not isinstance(raw, dict):
        raise InvalidSnapshot(f"{field_name} must be an object, got {type(raw).__name__}.")

    widget_id = raw.get("id")
    # bool is an int subclass; reject it explicitly
    if not isinstance(widget_id, int) or isinstance(widget_id, bool):
        raise InvalidSnapshot(f"{field_name}.id must be an integer, got {widget_id!r}.")

    try:
        metric_type = MetricType(raw.get("metricType"))
    except ValueError:
        raise InvalidSnapshot(f"{field_name}.metricType is unknown: {raw.get('metricType')!r}.")

    return WidgetConfig(id=widget_id, metric_type=metric_type)


def _validate_widget_list(raw: Any, field_name: str) -> tuple[WidgetConfig, ...]:
    if not isinstance(raw, list):
        raise InvalidSnapshot(f"{field_name} must be a list, got {type(raw).__name__}.")
    return tuple(_validate_widget(item, f"{field_name}[{i}]") for i, item in enumerate(raw))


def validate_snapshot(data: Any) -> DashboardSnapshot:
    """
    Validate a decoded snapshot field by field.

    Checks:
        - deviceFilter is a known device filter
        - selectedDay is a YYYY-MM-DD string
        - regularWidgets / expandedWidgets are lists of {id: int, metricType: known}
        - widget ids are unique across both lists

    Raises:
        InvalidSnapshot: On the first failing field.
    """
    if not isinstance(data, dict):
        raise InvalidSnapshot(f"Snapshot must be an object, got {type(data).__name__}.")

    try:
        device_filter = DeviceFilter(data.get("deviceFilter"))
    except ValueError:
        raise InvalidSnapshot(f"deviceFilter is unknown: {data.get('deviceFilter')!r}.")

    selected_day = data.get("selectedDay")
    try:
        validate_date_format(selected_day, "selectedDay")
    except ValueError as e:
        raise InvalidSnapshot(str(e))

    regular = _validate_widget_list(data.get("regularWidgets"), "regularWidgets")
    expanded = _validate_widget_list(data.get("expandedWidgets"), "expandedWidgets")

    snapshot = DashboardSnapshot(
        device_filter=device_filter,
        selected_day=selected_day,
        regular_widgets=regular,
        expanded_widgets=expanded,
    )

    ids = snapshot.widget_ids
    if len(ids) != len(set(ids)):
        raise InvalidSnapshot(f"Duplicate widget ids in snapshot: {sorted(ids)}.")

    return snapshot


def parse_snapshot(blob: str) -> DashboardSnapshot:
    """
    Decode and validate a persisted snapshot blob.

    Raises:
        InvalidSnapshot: Not JSON, or fails validate_snapshot().
    """
    try:
        data = json.loads(blob)
    except (TypeError, ValueError) as e:
        raise InvalidSnapshot(f"Snapshot is not valid JSON: {e}")
    return validate_snapshot(data)


def serialize_snapshot(snapshot: DashboardSnapshot) -> str:
    return json.dumps(snapshot.to_dict(), separators=(",", ":"))
