from __future__ import annotations

from datetime import date, datetime, time

from ..core.exceptions import ValidationError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid date: {value!r} (expected YYYY-MM-DD)")


def parse_hhmm(value: str, field_name: str = "Time") -> time:
    """Parse HH:MM (or HH:MM:SS as sent by some browsers)."""
    v = (value or "").strip()
    for fmt in ("%H:%M", "%H:%M:%S"):
        try:
            return datetime.strptime(v, fmt).time()
        except ValueError:
            continue
    raise ValidationError(f"{field_name} is not valid (HH:MM)")


def format_time_12h(t: time) -> str:
    hour = t.hour % 12 or 12
    ampm = "PM" if t.hour >= 12 else "AM"
    return f"{hour}:{t.minute:02d} {ampm}"


def minutes_between(start: time, end: time) -> int:
    return (end.hour * 60 + end.minute) - (start.hour * 60 + start.minute)


def month_label(d: date) -> str:
    """Short month label such as 'Mar 2026'."""
    return d.strftime("%b %Y")


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()
