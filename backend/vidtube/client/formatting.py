"""
Display helpers shared by VidTube front ends.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional, Union

# Calendar-agnostic approximations: a month is 30 days, a year 365.
_INTERVALS = [
    ("year", 31_536_000),
    ("month", 2_592_000),
    ("week", 604_800),
    ("day", 86_400),
    ("hour", 3_600),
    ("minute", 60),
]


def format_duration(seconds: Union[int, float]) -> str:
    """``75`` -> ``"1:15"``, ``3725`` -> ``"1:02:05"``."""
    total = int(max(seconds or 0, 0))
    hours, rest = divmod(total, 3600)
    minutes, secs = divmod(rest, 60)
    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


def format_view_count(count: int) -> str:
    if count < 1_000:
        return str(count)
    if count < 1_000_000:
        return f"{count / 1_000:.1f}K"
    if count < 1_000_000_000:
        return f"{count / 1_000_000:.1f}M"
    return f"{count / 1_000_000_000:.1f}B"


def _aware(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def format_relative_time(value: Union[datetime, str], now: Optional[datetime] = None) -> str:
    """
    Human relative time such as ``"3 days ago"``.

    Accepts a datetime or an ISO-8601 string; naive values are read as UTC.
    Anything under a minute (or in the future) is ``"Just now"``.
    """
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    now = now or datetime.now(timezone.utc)
    elapsed = int((_aware(now) - _aware(value)).total_seconds())

    for label, size in _INTERVALS:
        count = elapsed // size
        if count > 0:
            return f"{count} {label}{'s' if count > 1 else ''} ago"
    return "Just now"
