"""Booking, session and package data models."""

import datetime as dt
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from carebook.utils import hours_between, parse_clock_time


class BookingStatus(str, Enum):
    CONFIRMED = "confirmed"
    PENDING = "pending"
    CANCELLED = "cancelled"


class SessionSlot(BaseModel):
    """One proposed session on a single UK local calendar day."""

    date: dt.date
    start_time: dt.time
    end_time: dt.time
    trainer_id: Optional[str] = None
    activity_ids: list[str] = Field(default_factory=list)

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def _parse_time(cls, value):
        if isinstance(value, (str, dt.time)):
            return parse_clock_time(value)
        return value

    @property
    def duration_hours(self) -> float:
        """End minus start in hours; zero or negative when the range is illegal."""
        return hours_between(self.start_time, self.end_time)


class BookingRequest(BaseModel):
    """A parent's submission attempt. Transient, never persisted by the core."""

    child_id: str
    package_id: str
    slots: list[SessionSlot] = Field(default_factory=list)
    mode_key: Optional[str] = None

    @property
    def total_hours(self) -> float:
        return sum(slot.duration_hours for slot in self.slots if slot.duration_hours > 0)


class ExistingBooking(BaseModel):
    """A child's already confirmed or pending session, supplied by the booking repository."""

    booking_id: str
    child_id: str
    date: dt.date
    start_time: dt.time
    end_time: dt.time
    status: BookingStatus = BookingStatus.CONFIRMED

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def _parse_time(cls, value):
        if isinstance(value, (str, dt.time)):
            return parse_clock_time(value)
        return value

    @property
    def is_active(self) -> bool:
        return self.status != BookingStatus.CANCELLED


class Package(BaseModel):
    """Purchased hours as of request time."""

    id: str
    total_hours: float
    used_hours: float = 0.0
    price: float = 0.0
    hours_per_currency: Optional[float] = None
    expires_on: Optional[dt.date] = None

    @property
    def remaining_hours(self) -> float:
        return self.total_hours - self.used_hours
