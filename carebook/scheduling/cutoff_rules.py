"""
Cutoff rules deciding which calendar dates are bookable right now.

Rules are evaluated in order and the first match wins:
1. date before today                         -> past
2. date is today                             -> today (no same-day bookings)
3. date is tomorrow and local time >= cutoff -> tomorrow_after_cutoff
4. anything else                             -> bookable

The caller passes ``now`` explicitly. It is converted to local wall-clock
time once, and both the date check and the cutoff check read that single
value.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Optional

from carebook.config import CutoffConfig, settings
from carebook.messages import ReasonCode, message_for

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DateStatus:
    """Bookability of one calendar date."""
    bookable: bool
    reason: Optional[ReasonCode] = None


def to_local(now: datetime, config: Optional[CutoffConfig] = None) -> datetime:
    """Convert ``now`` to local wall-clock time. Naive values are taken as already local."""
    config = config or settings.cutoff
    if now.tzinfo is None:
        return now
    return now.astimezone(config.zone).replace(tzinfo=None)


def classify(day: date, now: datetime, config: Optional[CutoffConfig] = None) -> DateStatus:
    """Classify ``day`` as bookable or not relative to ``now``."""
    config = config or settings.cutoff
    local_now = to_local(now, config)
    today = local_now.date()

    if day < today:
        return DateStatus(bookable=False, reason=ReasonCode.PAST)
    if day == today:
        return DateStatus(bookable=False, reason=ReasonCode.TODAY)
    if day == today + timedelta(days=1) and local_now.time() >= time(config.cutoff_hour):
        return DateStatus(bookable=False, reason=ReasonCode.TOMORROW_AFTER_CUTOFF)
    return DateStatus(bookable=True)


def earliest_bookable_date(now: datetime, config: Optional[CutoffConfig] = None) -> date:
    """Smallest date that ``classify`` reports as bookable for this ``now``."""
    config = config or settings.cutoff
    local_now = to_local(now, config)
    tomorrow = local_now.date() + timedelta(days=1)
    if local_now.time() >= time(config.cutoff_hour):
        return tomorrow + timedelta(days=1)
    return tomorrow


def bookable_dates(
    now: datetime, days: int = 14, config: Optional[CutoffConfig] = None
) -> list[date]:
    """Bookable dates within the next ``days`` calendar days (today counted as day 0)."""
    config = config or settings.cutoff
    today = to_local(now, config).date()
    return [
        today + timedelta(days=offset)
        for offset in range(days + 1)
        if classify(today + timedelta(days=offset), now, config).bookable
    ]


def format_long_date(day: date) -> str:
    """e.g. ``Wednesday, 5 March 2025``."""
    return f"{day.strftime('%A')}, {day.day} {day.strftime('%B %Y')}"


def message_for_status(
    status: DateStatus, now: datetime, config: Optional[CutoffConfig] = None
) -> str:
    """Canonical message for an unbookable date; empty string when bookable.

    For ``tomorrow_after_cutoff`` the earliest bookable date is appended.
    """
    if status.bookable or status.reason is None:
        return ""
    config = config or settings.cutoff
    if status.reason == ReasonCode.TOMORROW_AFTER_CUTOFF:
        cutoff = time(config.cutoff_hour).strftime("%I:%M %p").lstrip("0")
        earliest = format_long_date(earliest_bookable_date(now, config))
        base = message_for(status.reason, cutoff=cutoff)
        return f"{base} The earliest you can book is {earliest}."
    return message_for(status.reason)
