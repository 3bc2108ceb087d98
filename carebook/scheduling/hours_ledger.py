"""Hours balance enforcement against a purchased package."""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Optional

from carebook.config import HoursConfig, settings
from carebook.schemas.booking_schema import Package

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BalanceCheck:
    """``shortfall`` is the exact number of extra hours needed, 0.0 when sufficient."""
    sufficient: bool
    remaining: float
    shortfall: float = 0.0


def check_balance(
    pkg: Package, proposed_hours: float, config: Optional[HoursConfig] = None
) -> BalanceCheck:
    """Decide whether ``pkg`` has enough hours left for ``proposed_hours``."""
    config = config or settings.hours
    remaining = pkg.total_hours - pkg.used_hours
    if proposed_hours <= remaining + config.epsilon:
        return BalanceCheck(sufficient=True, remaining=remaining)

    shortfall = proposed_hours - remaining
    logger.debug(
        "Package %s short by %.6f hours (remaining %.2f, proposed %.2f)",
        pkg.id, shortfall, remaining, proposed_hours,
    )
    return BalanceCheck(sufficient=False, remaining=remaining, shortfall=shortfall)


def is_within_validity(pkg: Package, day: date) -> bool:
    """Packages without an expiry date are valid for any day."""
    return pkg.expires_on is None or day <= pkg.expires_on
