"""
Time helpers for the match-day tracker.

All authoritative instants are epoch seconds (floats). Derived values such as
the clock display are recomputed from those instants on demand.
"""
import time
from datetime import datetime
from typing import Optional


def fmt_mmss(seconds: int) -> str:
    """
    Format seconds as MM:SS string.

    Args:
        seconds: Number of seconds to format

    Returns:
        Formatted time string in MM:SS format

    Example:
        >>> fmt_mmss(90)
        '01:30'
        >>> fmt_mmss(5400)
        '90:00'
    """
    seconds = max(0, int(seconds))
    m = seconds // 60
    s = seconds % 60
    return f"{m:02d}:{s:02d}"


def fmt_match_minute(game_seconds: int) -> str:
    """
    Format a match second as the minute shown next to an event.

    Stoppage time after 45 and 90 minutes is shown as ``45+N'`` / ``90+N'``.

    Example:
        >>> fmt_match_minute(0)
        "1'"
        >>> fmt_match_minute(600)
        "11'"
        >>> fmt_match_minute(5530)
        "90+3'"
    """
    minute = game_seconds // 60
    extra = game_seconds % 60
    if minute >= 90 and extra > 0:
        return f"90+{-(-(game_seconds - 90 * 60) // 60)}'"
    if 45 <= minute < 50 and extra > 0:
        return f"45+{-(-(game_seconds - 45 * 60) // 60)}'"
    return f"{max(1, minute + 1)}'"


def now_ts() -> float:
    """
    Get current timestamp in epoch seconds.

    Returns:
        Current time as floating point epoch seconds
    """
    return time.time()


def local_date_and_time(ts: Optional[float] = None):
    """Return ``(YYYY-MM-DD, HH:MM)`` strings for ``ts`` in local time."""
    moment = datetime.fromtimestamp(ts if ts is not None else now_ts())
    return moment.strftime("%Y-%m-%d"), moment.strftime("%H:%M")
