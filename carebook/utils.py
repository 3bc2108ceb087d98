"""Shared utilities used across the booking core."""

import math
from datetime import datetime, time
from typing import Union

MINUTES_PER_HOUR = 60


def parse_clock_time(value: Union[str, time]) -> time:
    """Parse an ``HH:MM`` (or ``HH:MM:SS``) string into a minute-resolution time.

    Examples:
        >>> parse_clock_time("09:30")
        datetime.time(9, 30)
        >>> parse_clock_time("14:05:59")
        datetime.time(14, 5)
    """
    if isinstance(value, time):
        return value.replace(second=0, microsecond=0, tzinfo=None)
    text = value.strip()
    for fmt in ("%H:%M", "%H:%M:%S"):
        try:
            return datetime.strptime(text, fmt).time().replace(second=0)
        except ValueError:
            continue
    raise ValueError(f"Invalid clock time {value!r}; expected HH:MM")


def minutes_since_midnight(value: time) -> int:
    return value.hour * MINUTES_PER_HOUR + value.minute


def hours_between(start: time, end: time) -> float:
    """Hours from ``start`` to ``end`` on the same day (negative if end is earlier)."""
    return (minutes_since_midnight(end) - minutes_since_midnight(start)) / MINUTES_PER_HOUR


def is_finite_number(value: float) -> bool:
    return isinstance(value, (int, float)) and not math.isnan(value) and not math.isinf(value)


def format_hours(hours: float) -> str:
    """Format an hour count for messages.

    Examples:
        >>> format_hours(3)
        '3 hours'
        >>> format_hours(1)
        '1 hour'
        >>> format_hours(1.5)
        '1.5 hours'
    """
    rounded = round(hours, 1)
    text = f"{int(rounded)}" if rounded == int(rounded) else f"{rounded:.1f}"
    return f"{text} hour" if rounded == 1 else f"{text} hours"
