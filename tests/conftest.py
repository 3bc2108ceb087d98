"""Shared test fixtures and helpers."""

from datetime import date, datetime
from typing import Optional
from zoneinfo import ZoneInfo

import pytest

from carebook.schemas.booking_schema import (
    BookingRequest,
    BookingStatus,
    ExistingBooking,
    Package,
    SessionSlot,
)
from carebook.schemas.trainer_schema import CapabilityTag, Coordinates, Trainer
from carebook.tools import (
    InMemoryBookingRepository,
    InMemoryPackageRepository,
    InMemoryTrainerRoster,
    MockPaymentProvider,
)

LONDON = ZoneInfo("Europe/London")

# Monday 10 March 2025, midday in London.
NOW = datetime(2025, 3, 10, 12, 0, tzinfo=LONDON)
TODAY = date(2025, 3, 10)
TOMORROW = date(2025, 3, 11)
IN_THREE_DAYS = date(2025, 3, 13)

HATFIELD = Coordinates(latitude=51.7630, longitude=-0.2231)
ST_ALBANS = Coordinates(latitude=51.7550, longitude=-0.3360)
LONDON_CENTRE = Coordinates(latitude=51.5074, longitude=-0.1278)
MANCHESTER = Coordinates(latitude=53.4808, longitude=-2.2426)


def local(year: int, month: int, day: int, hour: int, minute: int = 0, second: int = 0) -> datetime:
    """An aware London wall-clock instant."""
    return datetime(year, month, day, hour, minute, second, tzinfo=LONDON)


def make_slot(
    day: date = IN_THREE_DAYS,
    start: str = "09:00",
    end: str = "13:00",
    trainer_id: Optional[str] = None,
) -> SessionSlot:
    return SessionSlot(date=day, start_time=start, end_time=end, trainer_id=trainer_id)


def make_existing(
    day: date = IN_THREE_DAYS,
    start: str = "09:00",
    end: str = "13:00",
    child_id: str = "C1",
    booking_id: str = "BK-1",
    status: BookingStatus = BookingStatus.CONFIRMED,
) -> ExistingBooking:
    return ExistingBooking(
        booking_id=booking_id,
        child_id=child_id,
        date=day,
        start_time=start,
        end_time=end,
        status=status,
    )


def make_package(
    total: float = 20.0,
    used: float = 0.0,
    package_id: str = "P1",
    expires_on: Optional[date] = None,
) -> Package:
    return Package(id=package_id, total_hours=total, used_hours=used, price=300.0, expires_on=expires_on)


def make_trainer(
    trainer_id: str = "T1",
    prefixes: Optional[list[str]] = None,
    regions: Optional[list[str]] = None,
    home: Optional[Coordinates] = None,
    radius_km: Optional[float] = None,
    capabilities: Optional[set[CapabilityTag]] = None,
) -> Trainer:
    return Trainer(
        id=trainer_id,
        name=f"Trainer {trainer_id}",
        home_location=home,
        service_postcode_prefixes=prefixes or [],
        service_regions=regions or [],
        service_radius_km=radius_km,
        capabilities=capabilities or set(),
    )


def make_request(
    slots: Optional[list[SessionSlot]] = None,
    child_id: str = "C1",
    package_id: str = "P1",
    mode_key: Optional[str] = "sessions",
) -> BookingRequest:
    return BookingRequest(
        child_id=child_id,
        package_id=package_id,
        slots=slots if slots is not None else [make_slot()],
        mode_key=mode_key,
    )


@pytest.fixture
def booking_repo():
    return InMemoryBookingRepository()


@pytest.fixture
def roster():
    return InMemoryTrainerRoster([
        make_trainer("T1", prefixes=["AL"], home=HATFIELD, radius_km=20,
                     capabilities={CapabilityTag.SEN_SUPPORT}),
        make_trainer("T2", regions=["Greater Manchester"], home=MANCHESTER, radius_km=30,
                     capabilities={CapabilityTag.RESPITE}),
    ])


@pytest.fixture
def package_repo():
    return InMemoryPackageRepository([make_package()])


@pytest.fixture
def provider():
    return MockPaymentProvider()
