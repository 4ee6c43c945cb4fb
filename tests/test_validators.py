# tests/test_validators.py
"""
Snapshot Validation Unit Tests

Tests for date format checks and field-by-field snapshot validation.
"""

import datetime as dt
import json
import pytest
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from metrics_hub.errors import InvalidSnapshot
from metrics_hub.models import DashboardSnapshot, DeviceFilter, MetricType, WidgetConfig
from metrics_hub.validators import (
    parse_snapshot,
    serialize_snapshot,
    validate_date_format,
    validate_snapshot,
)


def _valid():
    return {
        "deviceFilter": "desktop",
        "selectedDay": "2025-02-14",
        "regularWidgets": [{"id": 1, "metricType": "users"}],
        "expandedWidgets": [{"id": 2, "metricType": "pageViews"}],
    }


class TestValidateDateFormat:
    """YYYY-MM-DD 형식 검증"""

    def test_valid_date(self):
        assert validate_date_format("2025-02-28") == dt.date(2025, 2, 28)

    @pytest.mark.parametrize("value", ["2025-2-28", "2025/02/28", "2025-02-30", "", None, 20250228])
    def test_invalid_date(self, value):
        """잘못된 형식 → ValueError"""
        with pytest.raises(ValueError) as exc_info:
            validate_date_format(value, "selectedDay")
        assert "selectedDay" in str(exc_info.value)


class TestValidateSnapshot:
    """스냅샷 필드별 검증"""

    def test_valid_snapshot(self):
        snapshot = validate_snapshot(_valid())

        assert snapshot.device_filter is DeviceFilter.DESKTOP
        assert snapshot.selected_day == "2025-02-14"
        assert snapshot.regular_widgets == (WidgetConfig(1, MetricType.USERS),)
        assert snapshot.expanded_widgets == (WidgetConfig(2, MetricType.PAGE_VIEWS),)

    def test_empty_collections_allowed(self):
        data = _valid()
        data["regularWidgets"] = []
        data["expandedWidgets"] = []
        assert validate_snapshot(data).widget_ids == []

    @pytest.mark.parametrize(
        "field, value",
        [
            ("deviceFilter", "tablet"),
            ("deviceFilter", None),
            ("selectedDay", "yesterday"),
            ("selectedDay", 20250214),
            ("regularWidgets", None),
            ("regularWidgets", {"id": 1, "metricType": "users"}),
            ("regularWidgets", ["users"]),
            ("regularWidgets", [{"id": "1", "metricType": "users"}]),
            ("regularWidgets", [{"id": True, "metricType": "users"}]),
            ("regularWidgets", [{"id": 1, "metricType": "sessions"}]),
            ("expandedWidgets", [{"id": 2}]),
        ],
    )
    def test_invalid_field_rejected(self, field, value):
        """한 필드라도 틀리면 InvalidSnapshot"""
        data = _valid()
        data[field] = value
        with pytest.raises(InvalidSnapshot):
            validate_snapshot(data)

    def test_missing_field_rejected(self):
        data = _valid()
        del data["expandedWidgets"]
        with pytest.raises(InvalidSnapshot):
            validate_snapshot(data)

    def test_duplicate_ids_rejected(self):
        data = _valid()
        data["expandedWidgets"] = [{"id": 1, "metricType": "pageViews"}]
        with pytest.raises(InvalidSnapshot) as exc_info:
            validate_snapshot(data)
        assert "Duplicate" in str(exc_info.value)

    def test_not_an_object(self):
        with pytest.raises(InvalidSnapshot):
            validate_snapshot([_valid()])


class TestParseSnapshot:
    """JSON 디코딩 + 검증"""

    def test_serialized_snapshot_parses_back(self):
        snapshot = DashboardSnapshot(
            device_filter=DeviceFilter.MOBILE,
            selected_day="2025-02-01",
            regular_widgets=(WidgetConfig(4, MetricType.PAGE_VIEWS),),
        )
        blob = serialize_snapshot(snapshot)

        assert json.loads(blob)["regularWidgets"] == [{"id": 4, "metricType": "pageViews"}]
        assert parse_snapshot(blob) == snapshot

    @pytest.mark.parametrize("blob", ["", "{", "null", "[]"])
    def test_garbage_rejected(self, blob):
        with pytest.raises(InvalidSnapshot):
            parse_snapshot(blob)
