# tests/test_logging_config.py
"""
Logging Configuration Unit Tests
"""

import logging
import sys
from pathlib import Path

import pytest

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from metrics_hub.logging_config import (
    WidgetContextFilter,
    get_widget_context,
    setup_logging,
    widget_context,
)


@pytest.fixture()
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)


class TestWidgetContext:
    """위젯 ID 컨텍스트 전파"""

    def test_default_is_dash(self):
        assert get_widget_context() == "-"

    def test_context_sets_and_resets(self):
        with widget_context(7) as label:
            assert label == "widget-7"
            assert get_widget_context() == "widget-7"
        assert get_widget_context() == "-"

    def test_filter_stamps_record(self):
        record = logging.LogRecord("test", logging.INFO, __file__, 1, "msg", None, None)
        with widget_context(3):
            assert WidgetContextFilter().filter(record) is True
        assert record.widget_id == "widget-3"


class TestSetupLogging:
    def test_console_and_file_handlers(self, tmp_path, restore_root_logger):
        log_file = tmp_path / "logs" / "dashboard.log"
        setup_logging(logging.DEBUG, log_file=log_file)

        with widget_context(5):
            logging.getLogger("metrics_hub.test").info("recomputed")
        for handler in restore_root_logger.handlers:
            handler.flush()

        content = log_file.read_text(encoding="utf-8")
        assert "widget-5" in content
        assert "recomputed" in content
        assert len(restore_root_logger.handlers) == 2

    def test_console_only(self, restore_root_logger):
        setup_logging(logging.WARNING, log_file=None)

        assert restore_root_logger.level == logging.WARNING
        assert len(restore_root_logger.handlers) == 1
