"""Date helpers: wire formatting and US-style display strings."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone, tzinfo

from stayops.config import display_timezone


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def to_iso(dt: datetime) -> str:
    """ISO-8601 with offset and no fractional seconds, as the functions expect."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.replace(microsecond=0).isoformat()


def local(dt: datetime, tz: tzinfo | None = None) -> datetime:
    """Convert an aware datetime into the display timezone."""
    return dt.astimezone(tz or display_timezone())


def start_of_day(dt: datetime, tz: tzinfo | None = None) -> datetime:
    loc = local(dt, tz)
    return loc.replace(hour=0, minute=0, second=0, microsecond=0)


def _clock(dt: datetime) -> str:
    hour = dt.hour % 12 or 12
    return f"{hour}:{dt.minute:02d} {'AM' if dt.hour < 12 else 'PM'}"


def format_short(dt: datetime, tz: tzinfo | None = None) -> str:
    """``1/19/26, 4:54 PM``"""
    loc = local(dt, tz)
    return f"{loc.month}/{loc.day}/{loc:%y}, {_clock(loc)}"


def format_medium(dt: datetime, tz: tzinfo | None = None) -> str:
    """``Jan 19, 2026 at 4:54 PM``"""
    loc = local(dt, tz)
    return f"{loc:%b} {loc.day}, {loc.year} at {_clock(loc)}"


def format_day_title(dt: datetime, tz: tzinfo | None = None) -> str:
    """``Monday, Jan 19``"""
    loc = local(dt, tz)
    return f"{loc:%A}, {loc:%b} {loc.day}"


def format_date_short(d: date) -> str:
    """``1/19/26``"""
    return f"{d.month}/{d.day}/{d:%y}"


def week_bounds(now: datetime, tz: tzinfo | None = None) -> tuple[datetime, datetime]:
    """Start and end of the Sunday-based calendar week containing ``now``."""
    today = start_of_day(now, tz)
    start = today - timedelta(days=(today.weekday() + 1) % 7)
    return start, start + timedelta(days=7)
