"""
Utilities package for the match-day tracker.

This package contains utility functions used throughout the application.
"""
from .time_utils import fmt_mmss, fmt_match_minute, now_ts, local_date_and_time
from .log_utils import get_logger, configure_logging
from .constants import (
    APP_TITLE, LOCATION_BENCH, LOCATION_FIELD, LOCATION_INACTIVE,
    PLAYTIME_LOCATIONS, SIDE_HOME, SIDE_AWAY,
    HISTORY_MAX_ENTRIES,
)

__all__ = [
    "fmt_mmss", "fmt_match_minute", "now_ts", "local_date_and_time",
    "get_logger", "configure_logging",
    "APP_TITLE", "LOCATION_BENCH", "LOCATION_FIELD", "LOCATION_INACTIVE",
    "PLAYTIME_LOCATIONS", "SIDE_HOME", "SIDE_AWAY",
    "HISTORY_MAX_ENTRIES",
]
