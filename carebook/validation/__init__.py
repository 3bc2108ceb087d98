from carebook.validation.result import ValidationIssue, ValidationResult
from carebook.validation.service import (
    UNAVAILABLE_MESSAGE,
    BookingValidationService,
    ValidationContext,
    ValidationUnavailableError,
)

__all__ = [
    "BookingValidationService",
    "UNAVAILABLE_MESSAGE",
    "ValidationContext",
    "ValidationIssue",
    "ValidationResult",
    "ValidationUnavailableError",
]
