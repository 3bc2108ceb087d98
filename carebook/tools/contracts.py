"""
Narrow interfaces to the collaborators the booking core depends on.

The remote booking/payment API is a black box. The core only needs these
four async contracts; the in-memory implementations in this package back
the tests and the console demo.
"""

from dataclasses import dataclass
from datetime import date
from typing import Optional, Protocol

from pydantic import BaseModel

from carebook.schemas.booking_schema import ExistingBooking, Package
from carebook.schemas.trainer_schema import CapabilityTag, Trainer


class RepositoryError(Exception):
    """A collaborator could not be reached or returned an unusable answer.

    ``message`` is safe to show to a parent.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


@dataclass(frozen=True)
class TrainerFilters:
    """Roster query filters. ``on_date`` prunes trainers unavailable that day."""
    on_date: Optional[date] = None
    capability: Optional[CapabilityTag] = None


class PaymentIntentResponse(BaseModel):
    """Payment provider answer to a create-payment-intent request."""
    success: bool
    checkout_url: Optional[str] = None
    error: Optional[str] = None


class BookingRepository(Protocol):
    async def list_bookings_for_child(self, child_id: str) -> list[ExistingBooking]: ...

    async def list_booked_dates_for_child(self, child_id: str) -> list[date]: ...


class TrainerRoster(Protocol):
    async def list_available_trainers(
        self, filters: Optional[TrainerFilters] = None
    ) -> list[Trainer]: ...

    async def is_available(self, trainer_id: str, on_date: date) -> bool: ...


class PackageRepository(Protocol):
    async def get_package(self, package_id: str) -> Package: ...


class PaymentProvider(Protocol):
    async def create_payment_intent(
        self, booking_id: str, amount: float, currency: str, method: str
    ) -> PaymentIntentResponse: ...
