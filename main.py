"""
Console demo of the booking core.

Validates a sample booking request against in-memory collaborators and,
if it is valid, obtains a checkout URL through the payment gate.

Usage:
    Demo booking:       python main.py demo [--postcode "AL10 1AA"] [--days-ahead 3]
    Earliest bookable:  python main.py earliest
"""

import argparse
import asyncio
import logging
import sys
from datetime import datetime, timedelta

from carebook.config import settings
from carebook.payments import PaymentIntentGate
from carebook.scheduling.cutoff_rules import earliest_bookable_date, format_long_date
from carebook.schemas.booking_schema import BookingRequest, ExistingBooking, Package, SessionSlot
from carebook.schemas.trainer_schema import CapabilityTag, Coordinates, FamilyLocation, Trainer
from carebook.tools import (
    InMemoryBookingRepository,
    InMemoryPackageRepository,
    InMemoryTrainerRoster,
    MockPaymentProvider,
)
from carebook.validation import BookingValidationService, ValidationUnavailableError

logger = logging.getLogger(__name__)

SAMPLE_TRAINERS = [
    Trainer(
        id="T1",
        name="John Doe",
        home_location=Coordinates(latitude=51.7520, longitude=-0.2400),
        service_postcode_prefixes=["AL", "WD", "SG", "HP"],
        service_regions=["Hertfordshire", "Greater London"],
        service_radius_km=20,
        capabilities={CapabilityTag.SEN_SUPPORT, CapabilityTag.SCHOOL_RUN},
    ),
    Trainer(
        id="T2",
        name="Sarah Williams",
        home_location=Coordinates(latitude=53.4808, longitude=-2.2426),
        service_postcode_prefixes=["M", "OL", "BL", "L"],
        service_regions=["Greater Manchester", "Lancashire"],
        service_radius_km=35,
        capabilities={CapabilityTag.RESPITE},
    ),
]


async def run_demo(postcode: str, days_ahead: int) -> int:
    now = datetime.now(settings.cutoff.zone)
    session_day = now.date() + timedelta(days=days_ahead)

    service = BookingValidationService(
        bookings=InMemoryBookingRepository([
            ExistingBooking(
                booking_id="BK-0001", child_id="C1", date=session_day,
                start_time="09:00", end_time="12:00",
            ),
        ]),
        roster=InMemoryTrainerRoster(SAMPLE_TRAINERS),
        packages=InMemoryPackageRepository([Package(id="P1", total_hours=20, used_hours=6, price=300)]),
    )
    request = BookingRequest(
        child_id="C1",
        package_id="P1",
        mode_key="sessions",
        slots=[SessionSlot(date=session_day, start_time="13:00", end_time="17:00")],
    )

    try:
        result = await service.validate_request(
            request, FamilyLocation(postcode=postcode), now=now,
            required_capability=CapabilityTag.SEN_SUPPORT,
        )
    except ValidationUnavailableError as exc:
        print(f"Unable to validate: {exc.message}")
        return 2

    for issue in result.errors:
        print(f"ERROR   [{issue.code.value}] {issue.message}")
    for issue in result.warnings:
        print(f"WARNING [{issue.code.value}] {issue.message}")
    if result.trainer_match is not None:
        names = ", ".join(t.name for t in result.trainer_match.options) or "none"
        print(f"Trainers offered: {names}")
    logger.info(
        "Demo validation finished: %d errors, %d warnings",
        len(result.errors), len(result.warnings),
    )
    if not result.valid:
        return 1

    gate = PaymentIntentGate(MockPaymentProvider())
    outcome = await gate.ensure_checkout("BK-DEMO", 60.0)
    if outcome.succeeded:
        print(f"Checkout ready: {outcome.checkout_url}")
        return 0
    print(f"Payment failed: {outcome.message}")
    return 1


def main(argv: list[str]) -> int:
    parser = argparse.ArgumentParser(description="Booking core console demo")
    sub = parser.add_subparsers(dest="command", required=True)
    demo = sub.add_parser("demo", help="Validate and pay for a sample booking")
    demo.add_argument("--postcode", default="AL10 1AA")
    demo.add_argument("--days-ahead", type=int, default=3)
    sub.add_parser("earliest", help="Print the earliest bookable date")
    args = parser.parse_args(argv)

    if args.command == "earliest":
        earliest = earliest_bookable_date(datetime.now(settings.cutoff.zone))
        print(f"The earliest you can book is {format_long_date(earliest)}.")
        return 0
    return asyncio.run(run_demo(args.postcode, args.days_ahead))


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
