"""
At-most-once payment intent creation per booking.

The payment provider is not idempotent: two create calls for one booking
open two checkout sessions. The gate keeps one PaymentIntentState per
booking id for its whole lifetime, so at most one request is in flight or
already succeeded per booking. Concurrent callers await the same request
and receive the same outcome. Failed attempts can be retried manually up to
the configured cap, after which the parent is told to reload the page.

Switching to another booking and back returns to the first booking's
existing state. A change of amount for the same booking starts a new
lineage: that booking's state resets to uninitiated and a response still in
flight for the old amount is ignored when it arrives.

Usage:
    gate = PaymentIntentGate(provider)
    outcome = await gate.ensure_checkout("BK-1042", 150.0)
    if outcome.succeeded:
        redirect(outcome.checkout_url)
    elif outcome.retryable:
        show_try_again(outcome.message)
    else:
        show_refresh(outcome.message)
"""

import asyncio
from dataclasses import dataclass
from typing import Optional

from carebook.config import PaymentConfig, settings
from carebook.logging_context import booking_scope, get_booking_logger
from carebook.messages import parent_friendly_payment_error
from carebook.payments.state_machine import (
    PaymentEvent,
    PaymentIntentState,
    PaymentStatus,
    apply_event,
    initial_state,
)
from carebook.tools.contracts import PaymentProvider

logger = get_booking_logger(__name__)

DEFAULT_PROVIDER_ERROR = "Failed to create payment session"
SUPERSEDED_MESSAGE = "This payment request was replaced by a newer one."
INVALID_AMOUNT_MESSAGE = "There is nothing to pay for this booking."


def retries_exhausted_message(max_attempts: int) -> str:
    return (
        f"We couldn't start your payment after {max_attempts} attempts. "
        "Please refresh the page to try again."
    )


@dataclass(frozen=True)
class CheckoutOutcome:
    """What the caller shows next.

    ``reason`` is one of ``provider_error``, ``retries_exhausted``,
    ``superseded`` or ``invalid_amount`` when the checkout did not succeed.
    ``retryable`` decides between a "Try again" and a "Refresh page" action.
    """
    succeeded: bool
    checkout_url: Optional[str] = None
    reason: Optional[str] = None
    retryable: bool = False
    message: str = ""


class PaymentIntentGate:
    """Single-flight guard around ``PaymentProvider.create_payment_intent``.

    One gate is owned by one browser session and holds the payment state of
    every booking started in it.
    """

    def __init__(self, provider: PaymentProvider, config: Optional[PaymentConfig] = None) -> None:
        self._provider = provider
        self._config = config or settings.payment
        self._states: dict[str, PaymentIntentState] = {}
        self._in_flight: dict[str, asyncio.Future] = {}
        self._generations: dict[str, int] = {}
        self._current: Optional[str] = None

    @property
    def state(self) -> Optional[PaymentIntentState]:
        """State of the most recently requested booking."""
        if self._current is None:
            return None
        return self._states.get(self._current)

    def state_for(self, booking_id: str) -> Optional[PaymentIntentState]:
        return self._states.get(booking_id)

    @property
    def in_flight(self) -> bool:
        return bool(self._in_flight)

    @property
    def max_attempts(self) -> int:
        return self._config.max_attempts

    def reset(self, booking_id: str, amount: float) -> None:
        """Start a new lineage for (booking_id, amount), dropping that booking's in-flight guard."""
        self._generations[booking_id] = self._generations.get(booking_id, 0) + 1
        self._in_flight.pop(booking_id, None)
        self._states[booking_id] = initial_state(booking_id, amount)
        logger.info("Payment gate reset for %s (amount %.2f)", booking_id, amount)

    async def ensure_checkout(self, booking_id: str, amount: float) -> CheckoutOutcome:
        """Return a checkout URL for the booking, creating at most one payment intent at a time."""
        with booking_scope(booking_id):
            if amount <= 0:
                return CheckoutOutcome(
                    succeeded=False, reason="invalid_amount", message=INVALID_AMOUNT_MESSAGE
                )

            self._current = booking_id
            state = self._states.get(booking_id)
            if state is None or state.amount != amount:
                self.reset(booking_id, amount)
                state = self._states[booking_id]

            if state.status == PaymentStatus.SUCCEEDED:
                return CheckoutOutcome(succeeded=True, checkout_url=state.checkout_url)

            in_flight = self._in_flight.get(booking_id)
            if in_flight is not None:
                logger.debug("Joining in-flight payment intent request")
                return await asyncio.shield(in_flight)

            if state.status == PaymentStatus.FAILED and not state.can_retry(self.max_attempts):
                logger.warning("Payment retry rejected after %d attempts", state.retry_count)
                return CheckoutOutcome(
                    succeeded=False,
                    reason="retries_exhausted",
                    message=retries_exhausted_message(self.max_attempts),
                )

            self._states[booking_id] = apply_event(
                state, PaymentEvent.REQUEST_SENT, max_attempts=self.max_attempts
            )
            task = asyncio.ensure_future(
                self._create_intent(booking_id, amount, self._generations[booking_id])
            )
            self._in_flight[booking_id] = task
            return await asyncio.shield(task)

    async def _create_intent(self, booking_id: str, amount: float, generation: int) -> CheckoutOutcome:
        checkout_url: Optional[str] = None
        try:
            response = await self._provider.create_payment_intent(
                booking_id, amount, self._config.currency, self._config.method
            )
            if response.success and response.checkout_url:
                checkout_url = response.checkout_url
                error = None
            else:
                error = response.error or DEFAULT_PROVIDER_ERROR
        except Exception as exc:
            logger.warning("Payment provider raised %s: %s", type(exc).__name__, exc)
            error = str(exc) or DEFAULT_PROVIDER_ERROR

        if generation != self._generations.get(booking_id):
            logger.info("Ignoring stale payment intent response (amount %.2f)", amount)
            return CheckoutOutcome(succeeded=False, reason="superseded", message=SUPERSEDED_MESSAGE)

        self._in_flight.pop(booking_id, None)
        state = self._states[booking_id]
        if error is None:
            self._states[booking_id] = apply_event(
                state, PaymentEvent.CHECKOUT_RECEIVED, checkout_url=checkout_url
            )
            logger.info("Checkout session ready")
            return CheckoutOutcome(succeeded=True, checkout_url=checkout_url)

        state = apply_event(
            state, PaymentEvent.REQUEST_FAILED, error=error, max_attempts=self.max_attempts
        )
        self._states[booking_id] = state
        if state.can_retry(self.max_attempts):
            logger.info(
                "Payment intent attempt %d/%d failed: %s",
                state.retry_count, self.max_attempts, error,
            )
            return CheckoutOutcome(
                succeeded=False,
                reason="provider_error",
                retryable=True,
                message=parent_friendly_payment_error(error),
            )

        logger.warning("Payment intent failed permanently after %d attempts", state.retry_count)
        return CheckoutOutcome(
            succeeded=False,
            reason="retries_exhausted",
            message=retries_exhausted_message(self.max_attempts),
        )
