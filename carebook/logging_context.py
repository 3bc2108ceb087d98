"""Booking reference stamped onto log records.

The payment gate runs each checkout inside ``booking_scope``. Any record
emitted meanwhile, including from the provider adapter and from tasks the
gate spawns, carries ``booking_id`` once it passes a ``BookingIdFilter``.
``load_config`` installs the filter on the root handlers and includes the
field in ``LOG_FORMAT``; records emitted outside a scope show ``-``.

Usage:
    with booking_scope("BK-1042"):
        logger.info("Creating payment intent")  # ... [booking=BK-1042]: Creating ...
"""

import logging
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterable, Iterator, Optional

NO_BOOKING = "-"
LOG_FORMAT = "%(asctime)s [%(name)s] %(levelname)s [booking=%(booking_id)s]: %(message)s"

_current_booking: ContextVar[Optional[str]] = ContextVar("current_booking", default=None)


def current_booking_id() -> str:
    return _current_booking.get() or NO_BOOKING


@contextmanager
def booking_scope(booking_id: str) -> Iterator[None]:
    """Attribute log records to ``booking_id`` until the block exits."""
    token = _current_booking.set(booking_id)
    try:
        yield
    finally:
        _current_booking.reset(token)


class BookingIdFilter(logging.Filter):
    """Adds ``booking_id`` unless the caller passed one through ``extra``."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "booking_id"):
            record.booking_id = current_booking_id()  # type: ignore[attr-defined]
        return True


def install_booking_filter(handlers: Iterable[logging.Handler]) -> None:
    for handler in handlers:
        if not any(isinstance(f, BookingIdFilter) for f in handler.filters):
            handler.addFilter(BookingIdFilter())


def get_booking_logger(name: str) -> logging.Logger:
    """Logger whose own records carry ``booking_id`` under any handler."""
    logger = logging.getLogger(name)
    if not any(isinstance(f, BookingIdFilter) for f in logger.filters):
        logger.addFilter(BookingIdFilter())
    return logger
