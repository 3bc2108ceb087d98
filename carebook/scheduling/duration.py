"""
Session duration legality.

A session must last at least ``DurationPolicy.min_hours`` and at most the
lesser of ``DurationPolicy.max_hours`` and the time left until the latest
end time (23:59) on the session's day. Sessions never cross midnight, so an
end time at or before the start time is a non-positive duration and is
rejected. Any NaN or non-positive duration fails closed.
"""

import logging
from dataclasses import dataclass
from datetime import time
from typing import Optional

from carebook.config import DurationPolicy, settings
from carebook.messages import ReasonCode, message_for
from carebook.utils import format_hours, hours_between, is_finite_number, parse_clock_time

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DurationCheck:
    """Outcome of a duration check.

    ``delta_hours`` is the correction the caller should suggest: hours to
    add when too short, hours to remove when too long, 0.0 otherwise.
    """
    valid: bool
    duration_hours: float
    max_hours: float
    reason: Optional[ReasonCode] = None
    delta_hours: float = 0.0
    message: str = ""


def max_hours_for_start(
    start_time: Optional[time],
    max_until_midnight: bool = True,
    policy: Optional[DurationPolicy] = None,
) -> float:
    """Longest legal session starting at ``start_time``."""
    policy = policy or settings.duration
    if start_time is None or not max_until_midnight:
        return policy.max_hours
    latest_end = parse_clock_time(policy.latest_end_time)
    return max(0.0, min(policy.max_hours, hours_between(start_time, latest_end)))


def validate_hours(
    duration_hours: float,
    start_time: Optional[time] = None,
    max_until_midnight: bool = True,
    policy: Optional[DurationPolicy] = None,
) -> DurationCheck:
    """Validate a duration given directly in hours.

    When ``start_time`` is known the until-midnight maximum applies,
    otherwise only the absolute maximum does.
    """
    policy = policy or settings.duration
    max_hours = max_hours_for_start(start_time, max_until_midnight, policy)

    if not is_finite_number(duration_hours) or duration_hours <= 0:
        return DurationCheck(
            valid=False,
            duration_hours=duration_hours,
            max_hours=max_hours,
            reason=ReasonCode.INVALID_DURATION,
            message=message_for(ReasonCode.INVALID_DURATION),
        )

    if duration_hours < policy.min_hours:
        delta = policy.min_hours - duration_hours
        return DurationCheck(
            valid=False,
            duration_hours=duration_hours,
            max_hours=max_hours,
            reason=ReasonCode.TOO_SHORT,
            delta_hours=delta,
            message=message_for(
                ReasonCode.TOO_SHORT,
                delta=format_hours(delta),
                minimum=format_hours(policy.min_hours),
            ),
        )

    if duration_hours > max_hours:
        delta = duration_hours - max_hours
        return DurationCheck(
            valid=False,
            duration_hours=duration_hours,
            max_hours=max_hours,
            reason=ReasonCode.TOO_LONG,
            delta_hours=delta,
            message=message_for(
                ReasonCode.TOO_LONG,
                delta=format_hours(delta),
                maximum=format_hours(max_hours),
            ),
        )

    return DurationCheck(valid=True, duration_hours=duration_hours, max_hours=max_hours)


def validate(
    start_time: time,
    end_time: time,
    max_until_midnight: bool = True,
    policy: Optional[DurationPolicy] = None,
) -> DurationCheck:
    """Validate the session running from ``start_time`` to ``end_time`` on one day."""
    duration = hours_between(start_time, end_time)
    result = validate_hours(duration, start_time, max_until_midnight, policy)
    if not result.valid:
        logger.debug(
            "Duration %s-%s rejected: %s", start_time, end_time, result.reason.value
        )
    return result


def get_hours_needed_for_minimum(
    current_hours: float, policy: Optional[DurationPolicy] = None
) -> float:
    """Hours to add to reach the minimum, rounded to one decimal; 0 if already met."""
    policy = policy or settings.duration
    if current_hours >= policy.min_hours:
        return 0.0
    return round(policy.min_hours - current_hours, 1)
