"""
Overlap and duplicate-booking detection for one child's sessions.

Ranges are half-open: a session ending at 12:00 and another starting at
12:00 do not conflict. An exact repeat of an existing booking (same child,
date, start and end) is a duplicate and is reported instead of a conflict,
because the corrective action differs ("you already booked this" versus
"choose a different time"). Proposed slots are also checked pairwise
against each other.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, time
from typing import Literal, Optional, Sequence, Union

from carebook.schemas.booking_schema import ExistingBooking, SessionSlot

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Conflict:
    """A proposed slot overlapping an existing booking or another proposed slot."""
    proposed_index: int
    slot: SessionSlot
    other: Union[ExistingBooking, SessionSlot]
    source: Literal["existing", "batch"] = "existing"
    other_index: Optional[int] = None


@dataclass(frozen=True)
class Duplicate:
    """A proposed slot identical to an existing booking for the same child."""
    proposed_index: int
    slot: SessionSlot
    existing: ExistingBooking


@dataclass
class ConflictReport:
    conflicts: list[Conflict] = field(default_factory=list)
    duplicates: list[Duplicate] = field(default_factory=list)

    @property
    def clear(self) -> bool:
        return not self.conflicts and not self.duplicates


def ranges_overlap(start_a: time, end_a: time, start_b: time, end_b: time) -> bool:
    """Half-open interval overlap on the same day."""
    return start_a < end_b and start_b < end_a


def _same_range(slot: SessionSlot, day: date, start: time, end: time) -> bool:
    return slot.date == day and slot.start_time == start and slot.end_time == end


def check(
    existing: Sequence[ExistingBooking],
    proposed: Sequence[SessionSlot],
    child_id: Optional[str] = None,
) -> ConflictReport:
    """Report conflicts and duplicates for ``proposed`` against ``existing``.

    When ``child_id`` is given, existing bookings for other children are
    ignored. Cancelled bookings never conflict.
    """
    report = ConflictReport()
    relevant = [
        booking
        for booking in existing
        if booking.is_active and (child_id is None or booking.child_id == child_id)
    ]

    for index, slot in enumerate(proposed):
        for booking in relevant:
            if booking.date != slot.date:
                continue
            if _same_range(slot, booking.date, booking.start_time, booking.end_time):
                report.duplicates.append(Duplicate(index, slot, booking))
            elif ranges_overlap(slot.start_time, slot.end_time, booking.start_time, booking.end_time):
                report.conflicts.append(Conflict(index, slot, booking))

    for i, first in enumerate(proposed):
        for j in range(i + 1, len(proposed)):
            second = proposed[j]
            if first.date != second.date:
                continue
            if ranges_overlap(first.start_time, first.end_time, second.start_time, second.end_time):
                report.conflicts.append(
                    Conflict(j, second, first, source="batch", other_index=i)
                )

    if not report.clear:
        logger.debug(
            "Conflict check: %d conflicts, %d duplicates",
            len(report.conflicts), len(report.duplicates),
        )
    return report
