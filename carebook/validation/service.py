"""
Booking validation orchestrator.

Composes the cutoff, duration, conflict, hours and trainer-matching rules
into one pass over a booking request. Every failure is collected (no short
circuit) so the parent sees every problem with a submission at once. The
only shared input between rules is ``now``, captured once per pass.

Usage:
    service = BookingValidationService(bookings, roster, packages)
    result = await service.validate_request(request, family_location)
    if not result.valid:
        for issue in result.errors:
            show(issue.message)
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional, Sequence

from carebook.config import AppConfig, settings
from carebook.matching.geo_matcher import match_trainers
from carebook.messages import ReasonCode, message_for
from carebook.scheduling import conflicts, cutoff_rules, duration, hours_ledger
from carebook.scheduling.cutoff_rules import format_long_date
from carebook.schemas.booking_schema import BookingRequest, ExistingBooking, Package, SessionSlot
from carebook.schemas.trainer_schema import CapabilityTag, FamilyLocation, Trainer
from carebook.tools.contracts import (
    BookingRepository,
    PackageRepository,
    RepositoryError,
    TrainerRoster,
)
from carebook.utils import format_hours
from carebook.validation.result import ValidationResult

logger = logging.getLogger(__name__)

SUPPORTED_MODES = frozenset({"sessions"})
UNAVAILABLE_MESSAGE = "We couldn't check your booking right now. Please try again in a moment."


class ValidationUnavailableError(Exception):
    """A collaborator failed, so the request could not be checked.

    Distinct from an invalid booking: the parent should be told to retry,
    not that their booking is illegal.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


@dataclass(frozen=True)
class ValidationContext:
    """Everything one validation pass reads, fetched before the pass starts.

    ``unavailable`` holds (trainer_id, date) pairs the roster reported as
    unavailable.
    """
    now: datetime
    package: Package
    existing_bookings: Sequence[ExistingBooking] = ()
    trainers: Sequence[Trainer] = ()
    family_location: Optional[FamilyLocation] = None
    required_capability: Optional[CapabilityTag] = None
    unavailable: frozenset[tuple[str, date]] = field(default_factory=frozenset)
    max_until_midnight: bool = True


def _time_range(start, end) -> str:
    return f"{start:%H:%M}-{end:%H:%M}"


def _capability_label(capability: CapabilityTag) -> str:
    return capability.value.replace("_", " ")


class BookingValidationService:
    """Validates booking requests; optionally fetches context through collaborators."""

    def __init__(
        self,
        bookings: Optional[BookingRepository] = None,
        roster: Optional[TrainerRoster] = None,
        packages: Optional[PackageRepository] = None,
        config: Optional[AppConfig] = None,
    ) -> None:
        self.bookings = bookings
        self.roster = roster
        self.packages = packages
        self.config = config or settings

    # ------------------------------------------------------------------
    # Pure validation pass
    # ------------------------------------------------------------------

    def validate(self, request: BookingRequest, context: ValidationContext) -> ValidationResult:
        """Run every rule against ``request`` and collect all failures.

        Returns:
            ValidationResult; ``valid`` is True iff there are no errors.
        """
        result = ValidationResult()
        for index, slot in enumerate(request.slots):
            self._check_date(result, index, slot, context)
            self._check_duration(result, index, slot, context)
            self._check_package_validity(result, index, slot, context)
        self._check_conflicts(result, request, context)
        self._check_hours(result, request, context)
        self._check_mode(result, request)
        self._check_trainers(result, request, context)

        logger.info(
            "Validated booking for child %s: %d slots, %d errors, %d warnings",
            request.child_id, len(request.slots), len(result.errors), len(result.warnings),
        )
        return result

    def _check_date(
        self, result: ValidationResult, index: int, slot: SessionSlot, context: ValidationContext
    ) -> None:
        status = cutoff_rules.classify(slot.date, context.now, self.config.cutoff)
        if not status.bookable:
            message = cutoff_rules.message_for_status(status, context.now, self.config.cutoff)
            result.add_error(status.reason, message, "date", index)

    def _check_duration(
        self, result: ValidationResult, index: int, slot: SessionSlot, context: ValidationContext
    ) -> None:
        check = duration.validate(
            slot.start_time, slot.end_time, context.max_until_midnight, self.config.duration
        )
        if not check.valid:
            result.add_error(check.reason, check.message, "duration", index)

    def _check_package_validity(
        self, result: ValidationResult, index: int, slot: SessionSlot, context: ValidationContext
    ) -> None:
        if not hours_ledger.is_within_validity(context.package, slot.date):
            result.add_error(
                ReasonCode.OUTSIDE_PACKAGE_VALIDITY,
                message_for(
                    ReasonCode.OUTSIDE_PACKAGE_VALIDITY,
                    expires=format_long_date(context.package.expires_on),
                ),
                "date",
                index,
            )

    def _check_conflicts(
        self, result: ValidationResult, request: BookingRequest, context: ValidationContext
    ) -> None:
        report = conflicts.check(context.existing_bookings, request.slots, request.child_id)
        for dup in report.duplicates:
            result.add_error(
                ReasonCode.DUPLICATE,
                message_for(
                    ReasonCode.DUPLICATE,
                    date=format_long_date(dup.slot.date),
                    other=_time_range(dup.existing.start_time, dup.existing.end_time),
                ),
                "schedules",
                dup.proposed_index,
            )
        for conflict in report.conflicts:
            result.add_error(
                ReasonCode.CONFLICT,
                message_for(
                    ReasonCode.CONFLICT,
                    date=format_long_date(conflict.slot.date),
                    other=_time_range(conflict.other.start_time, conflict.other.end_time),
                ),
                "schedules",
                conflict.proposed_index,
            )

    def _check_hours(
        self, result: ValidationResult, request: BookingRequest, context: ValidationContext
    ) -> None:
        proposed = request.total_hours
        if proposed <= 0:
            return
        balance = hours_ledger.check_balance(context.package, proposed, self.config.hours)
        if not balance.sufficient:
            result.add_error(
                ReasonCode.INSUFFICIENT_HOURS,
                message_for(
                    ReasonCode.INSUFFICIENT_HOURS,
                    shortfall=format_hours(balance.shortfall),
                    remaining=format_hours(max(balance.remaining, 0.0)),
                ),
                "package",
            )

    def _check_mode(
        self, result: ValidationResult, request: BookingRequest
    ) -> None:
        if request.mode_key and request.mode_key not in SUPPORTED_MODES:
            result.add_warning(
                ReasonCode.MODE_SUGGESTION,
                message_for(ReasonCode.MODE_SUGGESTION, mode=request.mode_key),
                "mode",
            )

    def _check_trainers(
        self, result: ValidationResult, request: BookingRequest, context: ValidationContext
    ) -> None:
        roster = {t.id: t for t in context.trainers}
        capability = context.required_capability

        for index, slot in enumerate(request.slots):
            if slot.trainer_id is None:
                continue
            trainer = roster.get(slot.trainer_id)
            if trainer is None or (slot.trainer_id, slot.date) in context.unavailable:
                result.add_error(
                    ReasonCode.NO_TRAINER_MATCH,
                    message_for(
                        ReasonCode.NO_TRAINER_MATCH,
                        subject=f"your selection for {format_long_date(slot.date)}",
                        next_step=(
                            "The chosen trainer is not available that day. "
                            "Please pick another trainer or let us assign one."
                        ),
                    ),
                    "trainer",
                    index,
                )
            elif capability is not None and capability not in trainer.capabilities:
                result.add_error(
                    ReasonCode.NO_TRAINER_MATCH,
                    message_for(
                        ReasonCode.NO_TRAINER_MATCH,
                        subject=f"the {_capability_label(capability)} service",
                        next_step=(
                            f"{trainer.name or 'The chosen trainer'} does not offer it. "
                            "Please pick another trainer or let us assign one."
                        ),
                    ),
                    "trainer",
                    index,
                )

        unpinned = [slot for slot in request.slots if slot.trainer_id is None]
        if not unpinned or context.family_location is None:
            return

        dates = {slot.date for slot in unpinned}
        candidates = [
            t for t in context.trainers
            if not any((t.id, day) in context.unavailable for day in dates)
        ]
        match = match_trainers(
            context.family_location, candidates, capability, config=self.config.geo
        )
        result.trainer_match = match
        if match.matched:
            return

        subject = "your area"
        if capability is not None:
            subject = f"{_capability_label(capability)} in your area"
        if match.fallback:
            result.add_warning(
                ReasonCode.NO_TRAINER_MATCH,
                message_for(
                    ReasonCode.NO_TRAINER_MATCH,
                    subject=subject,
                    next_step="Here are trainers who can usually help.",
                ),
                "trainer",
            )
        else:
            result.add_error(
                ReasonCode.NO_TRAINER_MATCH,
                message_for(
                    ReasonCode.NO_TRAINER_MATCH,
                    subject=subject,
                    next_step="Please contact us and we will find someone for you.",
                ),
                "trainer",
            )

    # ------------------------------------------------------------------
    # Context fetching
    # ------------------------------------------------------------------

    async def build_context(
        self,
        request: BookingRequest,
        family_location: Optional[FamilyLocation],
        now: datetime,
        required_capability: Optional[CapabilityTag] = None,
    ) -> ValidationContext:
        """Fetch the package, existing bookings and roster for ``request``.

        Raises:
            ValidationUnavailableError: If any collaborator fails.
        """
        if self.bookings is None or self.roster is None or self.packages is None:
            raise RuntimeError("BookingValidationService was created without collaborators")

        try:
            package = await self.packages.get_package(request.package_id)
            existing = await self.bookings.list_bookings_for_child(request.child_id)
            trainers = await self.roster.list_available_trainers()
            dates = sorted({slot.date for slot in request.slots})
            unavailable = set()
            for trainer in trainers:
                for day in dates:
                    if not await self.roster.is_available(trainer.id, day):
                        unavailable.add((trainer.id, day))
        except RepositoryError as exc:
            logger.warning("Collaborator failure while validating: %s", exc.message)
            raise ValidationUnavailableError(exc.message) from exc
        except (OSError, asyncio.TimeoutError) as exc:
            logger.warning("Collaborator unreachable while validating: %s", exc)
            raise ValidationUnavailableError(UNAVAILABLE_MESSAGE) from exc

        return ValidationContext(
            now=now,
            package=package,
            existing_bookings=existing,
            trainers=trainers,
            family_location=family_location,
            required_capability=required_capability,
            unavailable=frozenset(unavailable),
        )

    async def validate_request(
        self,
        request: BookingRequest,
        family_location: Optional[FamilyLocation] = None,
        now: Optional[datetime] = None,
        required_capability: Optional[CapabilityTag] = None,
    ) -> ValidationResult:
        """Fetch context through the collaborators, then validate.

        ``now`` is captured once, before any fetch, and used for every rule.

        Raises:
            ValidationUnavailableError: If the request could not be checked.
        """
        now = now or datetime.now(self.config.cutoff.zone)
        context = await self.build_context(request, family_location, now, required_capability)
        return self.validate(request, context)
