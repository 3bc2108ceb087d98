"""
Mock payment provider.

In production, this would call the payment API, which creates a Stripe
checkout session and returns its URL. The mock records every call so
tests can assert how many outbound requests were made.
"""

import asyncio
import logging
import uuid
from dataclasses import dataclass

from carebook.tools.contracts import PaymentIntentResponse

logger = logging.getLogger(__name__)

CHECKOUT_BASE_URL = "https://checkout.example.com/pay"


@dataclass(frozen=True)
class PaymentCall:
    booking_id: str
    amount: float
    currency: str
    method: str


class MockPaymentProvider:
    """Scripted provider.

    The first ``fail_times`` calls fail, either with an unsuccessful
    response or, when ``raise_errors`` is set, by raising ``ConnectionError``.
    ``delay`` seconds are awaited before answering so concurrent callers can
    overlap.
    """

    def __init__(
        self,
        fail_times: int = 0,
        error: str = "Card network unavailable",
        raise_errors: bool = False,
        delay: float = 0.0,
    ) -> None:
        self.fail_times = fail_times
        self.error = error
        self.raise_errors = raise_errors
        self.delay = delay
        self.calls: list[PaymentCall] = []

    @property
    def call_count(self) -> int:
        return len(self.calls)

    async def create_payment_intent(
        self, booking_id: str, amount: float, currency: str, method: str
    ) -> PaymentIntentResponse:
        self.calls.append(PaymentCall(booking_id, amount, currency, method))
        if self.delay:
            await asyncio.sleep(self.delay)

        if len(self.calls) <= self.fail_times:
            logger.info("Mock payment intent failed for %s", booking_id)
            if self.raise_errors:
                raise ConnectionError(self.error)
            return PaymentIntentResponse(success=False, error=self.error)

        session = uuid.uuid4().hex[:12]
        url = f"{CHECKOUT_BASE_URL}/{booking_id}?session={session}"
        logger.info("Mock payment intent created for %s (%.2f %s)", booking_id, amount, currency)
        return PaymentIntentResponse(success=True, checkout_url=url)

    def reset(self) -> None:
        self.calls.clear()
