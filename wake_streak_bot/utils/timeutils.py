"""Timezone and minute-of-day helpers used by the check-in engine."""

from __future__ import annotations

import datetime as dt
import re
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

MINUTES_PER_DAY = 24 * 60
GRACE_MINUTES = 30

_HHMM_RE = re.compile(r"^(\d{1,2}):(\d{2})$")


def parse_hhmm(value: str) -> dt.time:
    """Parse ``H:MM`` / ``HH:MM`` into a time, raising ValueError otherwise."""
    match = _HHMM_RE.match(value.strip())
    if not match:
        raise ValueError(f"Invalid time {value!r}, expected HH:MM")
    hour, minute = int(match.group(1)), int(match.group(2))
    if hour > 23 or minute > 59:
        raise ValueError(f"Invalid time {value!r}, expected HH:MM")
    return dt.time(hour, minute)


def format_hhmm(value: dt.time | dt.datetime) -> str:
    return f"{value.hour:02d}:{value.minute:02d}"


def to_minutes(value: dt.time | dt.datetime) -> int:
    return value.hour * 60 + value.minute


def get_zone(name: str) -> ZoneInfo:
    """Return the IANA zone, raising ValueError for unknown or malformed names."""
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError, OSError) as exc:
        raise ValueError(f"Unknown timezone {name!r}") from exc


def is_valid_timezone(name: str) -> bool:
    try:
        get_zone(name)
    except ValueError:
        return False
    return True


def now_in_zone(zone: str, now: dt.datetime | None = None) -> dt.datetime:
    """Current instant (or ``now``, which must be aware) as wall-clock time in ``zone``."""
    if now is None:
        now = dt.datetime.now(dt.timezone.utc)
    if now.tzinfo is None:
        raise ValueError("now must be timezone-aware")
    return now.astimezone(get_zone(zone))


def in_wake_window(now_minutes: int, goal_minutes: int, grace: int = GRACE_MINUTES) -> bool:
    """True when ``now_minutes`` lies within ``goal_minutes`` +/- ``grace``, both ends inclusive.

    The window is clamped to the local calendar day and never wraps past
    midnight: for a 00:10 wake time the window is 00:00-00:40, and 23:50 on
    the evening before does not count.
    """
    low = max(0, goal_minutes - grace)
    high = min(MINUTES_PER_DAY - 1, goal_minutes + grace)
    return low <= now_minutes <= high
