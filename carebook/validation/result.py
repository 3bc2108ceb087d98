"""Structured outcome of one validation pass."""

from dataclasses import dataclass, field
from typing import Optional

from carebook.matching.geo_matcher import TrainerMatch
from carebook.messages import ReasonCode


@dataclass(frozen=True)
class ValidationIssue:
    """One problem with a submission. ``slot_index`` is None for request-wide issues."""
    code: ReasonCode
    message: str
    field: str
    slot_index: Optional[int] = None


@dataclass
class ValidationResult:
    """Errors block submission; warnings never do."""
    errors: list[ValidationIssue] = field(default_factory=list)
    warnings: list[ValidationIssue] = field(default_factory=list)
    trainer_match: Optional[TrainerMatch] = None

    @property
    def valid(self) -> bool:
        return not self.errors

    def add_error(
        self, code: ReasonCode, message: str, field: str, slot_index: Optional[int] = None
    ) -> None:
        self.errors.append(ValidationIssue(code, message, field, slot_index))

    def add_warning(
        self, code: ReasonCode, message: str, field: str, slot_index: Optional[int] = None
    ) -> None:
        self.warnings.append(ValidationIssue(code, message, field, slot_index))

    def error_codes(self) -> list[ReasonCode]:
        return [issue.code for issue in self.errors]

    def warning_codes(self) -> list[ReasonCode]:
        return [issue.code for issue in self.warnings]

    def errors_for_slot(self, slot_index: int) -> list[ValidationIssue]:
        return [issue for issue in self.errors if issue.slot_index == slot_index]
