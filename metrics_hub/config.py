# metrics_hub/config.py
"""
Traffic Metrics Hub - Configuration Constants

All hardcoded values are centralized here for maintainability.
Environment variables can override default values.
"""

import os
from pathlib import Path
from dotenv import load_dotenv

# Load .env file
load_dotenv(Path(__file__).resolve().parent.parent / ".env")

# ==========================================================
# Paths
# ==========================================================
BASE_DIR = Path(__file__).resolve().parent.parent
PACKAGE_DIR = Path(__file__).resolve().parent
LOGS_DIR = Path(os.getenv("DASHBOARD_LOGS_DIR", BASE_DIR / "logs"))

SAMPLE_DATA_FILE = PACKAGE_DIR / "data" / "metrics_2025_02.csv"
SNAPSHOT_FILE = Path(os.getenv("DASHBOARD_SNAPSHOT_FILE", BASE_DIR / "state" / "dashboard_snapshot.json"))

# ==========================================================
# Sample Data
# ==========================================================
# Monthly goals of the bundled February 2025 month
MONTHLY_TARGETS = {
    "users": 10_000,
    "pageViews": 100_000,
}
DEFAULT_SELECTED_DAY = "2025-02-28"  # used only when the data source has no days

# ==========================================================
# Derived-Data Cache
# ==========================================================
CACHE_TTL_SECONDS = float(os.getenv("CACHE_TTL_SECONDS", 300))  # 5 min
CACHE_SWEEP_INTERVAL = 60.0  # seconds
CACHE_MAXSIZE = 200

# ==========================================================
# Timing (seconds)
# ==========================================================
PERSIST_DEBOUNCE_SECONDS = 0.3
WIDGET_DEBOUNCE_SECONDS = 0.05
FRAME_INTERVAL = 1 / 60  # ~60 fps rendering clock

# ==========================================================
# Animation
# ==========================================================
ANIMATION_DURATION = 0.75
ANIMATION_PRECISION = 2
PERCENTAGE_DURATION = 0.5
PERCENTAGE_PRECISION = 1
EMPHASIS_DURATION = 1.0  # overshoot curve and cumulative readout
CHANGE_THRESHOLD = 0.1  # smaller target changes are not animated
SIGNIFICANT_INCREASE_RATIO = 0.1

# ==========================================================
# Calculations
# ==========================================================
COMPARISON_LOOKBACK_DAYS = 29
WEEK_OVER_WEEK_OFFSET = 7
CHART_DAYS = 7

# ==========================================================
# Logging
# ==========================================================
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FILE = LOGS_DIR / "dashboard.log"
LOG_MAX_BYTES = 10 * 1024 * 1024  # 10 MB
LOG_BACKUP_COUNT = 5
LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(widget_id)s | %(name)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# ==========================================================
# Date Handling Policy
# ==========================================================
# - Days are ISO 'YYYY-MM-DD' strings, compared lexicographically
# - Exact string match for single-day lookups
DATE_FORMAT = "%Y-%m-%d"
