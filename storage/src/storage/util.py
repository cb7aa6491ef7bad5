import time
import uuid
from datetime import datetime, timezone, timedelta
from typing import Optional


def generate_id() -> str:
    return uuid.uuid4().hex[:12]


def generate_sub_task_id() -> str:
    return f"subtask_{get_unix_timestamp()}_{uuid.uuid4().hex[:9]}"


def get_utc_iso8601_timestamp() -> str:
    now = datetime.now(timezone.utc)
    return now.strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z"


def get_unix_timestamp() -> int:
    """Epoch milliseconds."""
    return int(time.time() * 1000)


def get_today(now_ms: Optional[int] = None) -> str:
    """UTC calendar date (YYYY-MM-DD) of ``now_ms``, defaulting to now."""
    if now_ms is None:
        now_ms = get_unix_timestamp()
    return datetime.fromtimestamp(now_ms / 1000, tz=timezone.utc).strftime("%Y-%m-%d")


def days_between(earlier: str, later: str) -> int:
    """Whole days from one YYYY-MM-DD date to another."""
    a = datetime.strptime(earlier, "%Y-%m-%d")
    b = datetime.strptime(later, "%Y-%m-%d")
    return (b - a) // timedelta(days=1)


def truncate(text: str, limit: int) -> str:
    return text[:limit] + ("..." if len(text) > limit else "")
