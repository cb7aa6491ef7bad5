"""Timezone conversion utilities for CLI display."""

import os
from datetime import datetime, timezone
from typing import Optional


def _get_configured_tz():
    """Return the configured timezone, falling back to system local."""
    from dateutil import tz as dateutil_tz
    tz_name = os.getenv("POMOPOINT_TIMEZONE")
    if tz_name:
        tz = dateutil_tz.gettz(tz_name)
        if tz:
            return tz
    return dateutil_tz.tzlocal()


def ms_to_local(ms: Optional[int]) -> str:
    """Format epoch milliseconds as a local 'YYYY-MM-DD HH:MM' string."""
    if not ms:
        return "-"
    dt = datetime.fromtimestamp(ms / 1000, tz=timezone.utc)
    return dt.astimezone(_get_configured_tz()).strftime("%Y-%m-%d %H:%M")


def format_countdown(seconds: int) -> str:
    minutes, secs = divmod(max(0, seconds), 60)
    return f"{minutes:02d}:{secs:02d}"
