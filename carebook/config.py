"""
Centralized configuration with environment variable overrides.

All booking policy constants (cutoff hour, session length limits, hour
tolerances, payment retry cap) are configurable here. Nothing is hardcoded
in rule or gate logic.
"""

import logging
import os
from dataclasses import dataclass, field
from datetime import datetime
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv

from carebook.logging_context import LOG_FORMAT, install_booking_filter

load_dotenv()

logger = logging.getLogger(__name__)


def _safe_int(env_var: str, default: str) -> int:
    """Parse an integer from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return int(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid integer for {env_var}: {raw!r}"
        ) from None


def _safe_float(env_var: str, default: str) -> float:
    """Parse a float from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return float(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid float for {env_var}: {raw!r}"
        ) from None


@dataclass(frozen=True)
class CutoffConfig:
    """Which calendar dates are bookable relative to "now"."""

    timezone: str = os.getenv("BOOKING_TIMEZONE", "Europe/London")
    cutoff_hour: int = _safe_int("BOOKING_CUTOFF_HOUR", "18")

    @property
    def zone(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)


@dataclass(frozen=True)
class DurationPolicy:
    """Session length limits."""

    min_hours: float = _safe_float("MIN_SESSION_HOURS", "3.0")
    max_hours: float = _safe_float("MAX_SESSION_HOURS", "24.0")
    latest_end_time: str = os.getenv("LATEST_END_TIME", "23:59")


@dataclass(frozen=True)
class HoursConfig:
    """Floating-point tolerance for package hour arithmetic."""

    epsilon: float = _safe_float("HOURS_EPSILON", "1e-9")


@dataclass(frozen=True)
class GeoConfig:
    """Trainer matching settings."""

    earth_radius_km: float = _safe_float("EARTH_RADIUS_KM", "6371.0")


@dataclass(frozen=True)
class PaymentConfig:
    """Payment intent gate settings."""

    max_attempts: int = _safe_int("PAYMENT_MAX_ATTEMPTS", "3")
    currency: str = os.getenv("PAYMENT_CURRENCY", "GBP")
    method: str = os.getenv("PAYMENT_METHOD", "stripe")


@dataclass(frozen=True)
class AppConfig:
    """Root configuration aggregating all sub-configs."""

    cutoff: CutoffConfig = field(default_factory=CutoffConfig)
    duration: DurationPolicy = field(default_factory=DurationPolicy)
    hours: HoursConfig = field(default_factory=HoursConfig)
    geo: GeoConfig = field(default_factory=GeoConfig)
    payment: PaymentConfig = field(default_factory=PaymentConfig)
    log_level: str = os.getenv("LOG_LEVEL", "INFO")


def _validate_config(config: AppConfig) -> None:
    """Validate configuration values are within acceptable ranges."""
    try:
        ZoneInfo(config.cutoff.timezone)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValueError(
            f"BOOKING_TIMEZONE is not a known time zone: {config.cutoff.timezone!r}"
        ) from None
    if not 0 <= config.cutoff.cutoff_hour <= 23:
        raise ValueError(
            f"BOOKING_CUTOFF_HOUR must be between 0 and 23, got {config.cutoff.cutoff_hour}"
        )
    if config.duration.min_hours <= 0:
        raise ValueError(
            f"MIN_SESSION_HOURS must be > 0, got {config.duration.min_hours}"
        )
    if not config.duration.min_hours <= config.duration.max_hours <= 24.0:
        raise ValueError(
            "MAX_SESSION_HOURS must be between MIN_SESSION_HOURS and 24, "
            f"got {config.duration.max_hours}"
        )
    try:
        datetime.strptime(config.duration.latest_end_time, "%H:%M")
    except ValueError:
        raise ValueError(
            f"LATEST_END_TIME must be HH:MM, got {config.duration.latest_end_time!r}"
        ) from None
    if not 0 <= config.hours.epsilon < 0.01:
        raise ValueError(
            f"HOURS_EPSILON must be between 0 and 0.01, got {config.hours.epsilon}"
        )
    if config.geo.earth_radius_km <= 0:
        raise ValueError(
            f"EARTH_RADIUS_KM must be > 0, got {config.geo.earth_radius_km}"
        )
    if config.payment.max_attempts < 1:
        raise ValueError(
            f"PAYMENT_MAX_ATTEMPTS must be >= 1, got {config.payment.max_attempts}"
        )


def load_config() -> AppConfig:
    """Load and validate application configuration."""
    config = AppConfig()
    _validate_config(config)
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    install_booking_filter(logging.getLogger().handlers)
    logger.info("Configuration loaded (timezone=%s)", config.cutoff.timezone)
    return config


# Singleton instance
settings = load_config()
