"""
Payment intent lifecycle as a pure state machine.

States: uninitiated -> pending -> succeeded | failed, and failed -> pending
(retry) while retry_count < max_attempts. Once the retries are used up the
failure is terminal for that booking; a new booking id starts a new state.

Transitions are plain functions over a frozen PaymentIntentState, so they
can be tested without any event loop.

Usage:
    state = initial_state("BK-1", 50.0)
    state = apply_event(state, PaymentEvent.REQUEST_SENT)
    state = apply_event(state, PaymentEvent.REQUEST_FAILED, error="timeout")
    assert state.status == PaymentStatus.FAILED and state.retry_count == 1
"""

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, Optional

from carebook.config import settings

logger = logging.getLogger(__name__)


class PaymentStatus(str, Enum):
    UNINITIATED = "uninitiated"
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class PaymentEvent(str, Enum):
    """Events that cause state transitions."""
    REQUEST_SENT = "request_sent"
    CHECKOUT_RECEIVED = "checkout_received"
    REQUEST_FAILED = "request_failed"


@dataclass(frozen=True)
class PaymentIntentState:
    """Payment progress for one (booking_id, amount) lineage."""
    booking_id: str
    amount: float
    status: PaymentStatus = PaymentStatus.UNINITIATED
    retry_count: int = 0
    checkout_url: Optional[str] = None
    last_error: Optional[str] = None

    def can_retry(self, max_attempts: Optional[int] = None) -> bool:
        limit = max_attempts if max_attempts is not None else settings.payment.max_attempts
        return self.status == PaymentStatus.FAILED and self.retry_count < limit

    def is_terminal(self, max_attempts: Optional[int] = None) -> bool:
        if self.status == PaymentStatus.SUCCEEDED:
            return True
        return self.status == PaymentStatus.FAILED and not self.can_retry(max_attempts)


@dataclass(frozen=True)
class Transition:
    """A single valid state transition."""
    from_status: PaymentStatus
    to_status: PaymentStatus
    event: PaymentEvent
    guard: Optional[Callable[[PaymentIntentState, int], bool]] = None


class InvalidTransitionError(Exception):
    """Raised when an event is not valid from the current status."""


TRANSITIONS: list[Transition] = [
    Transition(PaymentStatus.UNINITIATED, PaymentStatus.PENDING, PaymentEvent.REQUEST_SENT),
    Transition(PaymentStatus.FAILED, PaymentStatus.PENDING, PaymentEvent.REQUEST_SENT,
               guard=lambda state, max_attempts: state.retry_count < max_attempts),
    Transition(PaymentStatus.PENDING, PaymentStatus.SUCCEEDED, PaymentEvent.CHECKOUT_RECEIVED),
    Transition(PaymentStatus.PENDING, PaymentStatus.FAILED, PaymentEvent.REQUEST_FAILED),
]


def initial_state(booking_id: str, amount: float) -> PaymentIntentState:
    return PaymentIntentState(booking_id=booking_id, amount=amount)


def valid_events(state: PaymentIntentState, max_attempts: Optional[int] = None) -> list[PaymentEvent]:
    """Return all events accepted from ``state``."""
    limit = max_attempts if max_attempts is not None else settings.payment.max_attempts
    return [
        t.event
        for t in TRANSITIONS
        if t.from_status == state.status and (t.guard is None or t.guard(state, limit))
    ]


def apply_event(
    state: PaymentIntentState,
    event: PaymentEvent,
    checkout_url: Optional[str] = None,
    error: Optional[str] = None,
    max_attempts: Optional[int] = None,
) -> PaymentIntentState:
    """
    Compute the state after ``event``.

    Args:
        state: Current state (never mutated).
        event: The event being applied.
        checkout_url: Required with CHECKOUT_RECEIVED.
        error: Failure detail recorded with REQUEST_FAILED.
        max_attempts: Retry cap; defaults to configuration.

    Returns:
        The new PaymentIntentState.

    Raises:
        InvalidTransitionError: If no valid transition exists.
    """
    limit = max_attempts if max_attempts is not None else settings.payment.max_attempts
    for t in TRANSITIONS:
        if t.from_status != state.status or t.event != event:
            continue
        if t.guard is not None and not t.guard(state, limit):
            continue

        if event == PaymentEvent.REQUEST_SENT:
            new_state = replace(state, status=t.to_status, last_error=None)
        elif event == PaymentEvent.CHECKOUT_RECEIVED:
            if not checkout_url:
                raise InvalidTransitionError("checkout_received requires a checkout URL")
            new_state = replace(state, status=t.to_status, checkout_url=checkout_url)
        else:
            new_state = replace(
                state, status=t.to_status, retry_count=state.retry_count + 1, last_error=error
            )

        logger.debug(
            "Payment %s: %s -> %s (event: %s, retries: %d)",
            state.booking_id, state.status.value, new_state.status.value,
            event.value, new_state.retry_count,
        )
        return new_state

    valid = [e.value for e in valid_events(state, limit)]
    raise InvalidTransitionError(
        f"No valid transition from '{state.status.value}' "
        f"with event '{event.value}'. Valid events: {valid}"
    )
