"""
Reference-time helpers.

Turns a slider offset into an absolute instant and derives the validity
window used to query the upstream advisory feeds.
"""
from datetime import datetime, timedelta, timezone
from typing import NamedTuple

DEFAULT_BACK_HOURS = 24
DEFAULT_FORWARD_HOURS = 6


class TimeWindow(NamedTuple):
    """Absolute [start, end] query window."""
    start: datetime
    end: datetime


def ensure_utc(instant: datetime) -> datetime:
    """Return an aware UTC datetime, treating naive values as UTC."""
    if instant.tzinfo is None:
        return instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(timezone.utc)


def offset_to_instant(offset_hours: float) -> datetime:
    """Current UTC time shifted by ``offset_hours`` (may be negative)."""
    return datetime.now(timezone.utc) + timedelta(hours=offset_hours)


def build_time_window(
    target: datetime,
    back_hours: float = DEFAULT_BACK_HOURS,
    forward_hours: float = DEFAULT_FORWARD_HOURS,
) -> TimeWindow:
    """Window from ``back_hours`` before ``target`` to ``forward_hours`` after."""
    return TimeWindow(
        start=target - timedelta(hours=back_hours),
        end=target + timedelta(hours=forward_hours),
    )


def format_offset_label(offset_hours: float) -> str:
    """Slider label: "Now", "+3h", "-12h"."""
    if offset_hours == 0:
        return "Now"
    if float(offset_hours).is_integer():
        offset_hours = int(offset_hours)
    sign = "+" if offset_hours > 0 else ""
    return f"{sign}{offset_hours}h"


def to_iso_utc(instant: datetime) -> str:
    """ISO 8601 UTC string with millisecond precision and a Z suffix."""
    return ensure_utc(instant).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _format_display(instant: datetime) -> str:
    instant = ensure_utc(instant)
    if instant.second == 0 and instant.microsecond == 0:
        return instant.strftime("%Y-%m-%dT%H:%MZ")
    return to_iso_utc(instant)


def format_range_for_display(start: datetime, end: datetime) -> str:
    """Human readable window, e.g. ``2024-01-01T00:00Z → 2024-01-01T06:00Z``."""
    return f"{_format_display(start)} → {_format_display(end)}"
