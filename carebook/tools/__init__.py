from carebook.tools.bookings import InMemoryBookingRepository
from carebook.tools.contracts import (
    BookingRepository,
    PackageRepository,
    PaymentIntentResponse,
    PaymentProvider,
    RepositoryError,
    TrainerFilters,
    TrainerRoster,
)
from carebook.tools.packages import InMemoryPackageRepository
from carebook.tools.payments import MockPaymentProvider
from carebook.tools.trainers import InMemoryTrainerRoster

__all__ = [
    "BookingRepository",
    "InMemoryBookingRepository",
    "InMemoryPackageRepository",
    "InMemoryTrainerRoster",
    "MockPaymentProvider",
    "PackageRepository",
    "PaymentIntentResponse",
    "PaymentProvider",
    "RepositoryError",
    "TrainerFilters",
    "TrainerRoster",
]
