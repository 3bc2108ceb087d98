"""
Reason codes and their canonical user-facing messages.

Every blocking or advisory outcome of the booking core carries one
ReasonCode. Each code has exactly one message template here; call sites
render through ``message_for`` and never write their own copy.
"""

from enum import Enum
from typing import Any, Optional


class ReasonCode(str, Enum):
    """Outcome codes surfaced to callers."""
    PAST = "past"
    TODAY = "today"
    TOMORROW_AFTER_CUTOFF = "tomorrow_after_cutoff"
    TOO_SHORT = "too_short"
    TOO_LONG = "too_long"
    INVALID_DURATION = "invalid_duration"
    CONFLICT = "conflict"
    DUPLICATE = "duplicate"
    INSUFFICIENT_HOURS = "insufficient_hours"
    OUTSIDE_PACKAGE_VALIDITY = "outside_package_validity"
    NO_TRAINER_MATCH = "no_trainer_match"
    MODE_SUGGESTION = "mode_suggestion"


MESSAGE_TEMPLATES: dict[ReasonCode, str] = {
    ReasonCode.PAST: "You cannot book sessions for past dates. Please select a future date.",
    ReasonCode.TODAY: (
        "Same-day bookings are not allowed. Please select tomorrow or a future date."
    ),
    ReasonCode.TOMORROW_AFTER_CUTOFF: (
        "Booking for tomorrow is only available until {cutoff} today. "
        "Please select the next day or later."
    ),
    ReasonCode.TOO_SHORT: (
        "Session is too short by {delta}. Sessions must be at least {minimum}."
    ),
    ReasonCode.TOO_LONG: (
        "Session is too long by {delta}. The longest session you can book from "
        "this start time is {maximum}."
    ),
    ReasonCode.INVALID_DURATION: (
        "The session end time must be after its start time on the same day."
    ),
    ReasonCode.CONFLICT: (
        "This session overlaps with another session on {date} ({other}). "
        "Please choose a different time."
    ),
    ReasonCode.DUPLICATE: "You have already booked this session on {date} ({other}).",
    ReasonCode.INSUFFICIENT_HOURS: (
        "You need {shortfall} more to book these sessions. "
        "You have {remaining} remaining in your package."
    ),
    ReasonCode.OUTSIDE_PACKAGE_VALIDITY: (
        "This session date is outside your package's validity period. "
        "Your package expires on {expires}."
    ),
    ReasonCode.NO_TRAINER_MATCH: "No trainer matches {subject}. {next_step}",
    ReasonCode.MODE_SUGGESTION: (
        '"{mode}" mode is coming soon. For now, "sessions" mode is recommended.'
    ),
}


def message_for(code: ReasonCode, **context: Any) -> str:
    """Render the canonical message for ``code`` with its placeholders filled."""
    return MESSAGE_TEMPLATES[code].format(**context)


def parent_friendly_payment_error(error: Optional[str]) -> str:
    """Hide configuration details (secret key names, .env) from parents."""
    if not error:
        return "Something went wrong. Please try again."
    lower = error.lower()
    if "secret_key" in lower or ".env" in lower or "not configured" in lower:
        return "Payment is temporarily unavailable. Please try again later or contact us."
    return error
