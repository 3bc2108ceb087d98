from carebook.payments.intent_gate import CheckoutOutcome, PaymentIntentGate
from carebook.payments.state_machine import (
    InvalidTransitionError,
    PaymentEvent,
    PaymentIntentState,
    PaymentStatus,
    apply_event,
)

__all__ = [
    "CheckoutOutcome",
    "InvalidTransitionError",
    "PaymentEvent",
    "PaymentIntentGate",
    "PaymentIntentState",
    "PaymentStatus",
    "apply_event",
]
