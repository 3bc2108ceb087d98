"""
In-memory existing-bookings repository.

In production, this would call the booking API's per-child schedule
endpoint. Unknown children yield empty results, never errors.
"""

import logging
from datetime import date
from typing import Optional

from carebook.schemas.booking_schema import ExistingBooking

logger = logging.getLogger(__name__)


class InMemoryBookingRepository:
    """Existing sessions keyed by child id."""

    def __init__(self, bookings: Optional[list[ExistingBooking]] = None) -> None:
        self._bookings: dict[str, list[ExistingBooking]] = {}
        for booking in bookings or []:
            self.add(booking)

    def add(self, booking: ExistingBooking) -> None:
        self._bookings.setdefault(booking.child_id, []).append(booking)
        logger.debug("Stored booking %s for child %s", booking.booking_id, booking.child_id)

    async def list_bookings_for_child(self, child_id: str) -> list[ExistingBooking]:
        return list(self._bookings.get(child_id, []))

    async def list_booked_dates_for_child(self, child_id: str) -> list[date]:
        dates = {b.date for b in self._bookings.get(child_id, []) if b.is_active}
        return sorted(dates)

    def reset(self) -> None:
        """Clear all bookings. Used by test fixtures for isolation."""
        self._bookings.clear()
