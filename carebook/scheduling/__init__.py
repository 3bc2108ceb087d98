from carebook.scheduling.conflicts import Conflict, ConflictReport, Duplicate
from carebook.scheduling.cutoff_rules import DateStatus, classify, earliest_bookable_date
from carebook.scheduling.duration import DurationCheck, get_hours_needed_for_minimum
from carebook.scheduling.hours_ledger import BalanceCheck, check_balance

__all__ = [
    "BalanceCheck",
    "Conflict",
    "ConflictReport",
    "DateStatus",
    "Duplicate",
    "DurationCheck",
    "check_balance",
    "classify",
    "earliest_bookable_date",
    "get_hours_needed_for_minimum",
]
