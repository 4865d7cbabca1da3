"""Validation issue taxonomy and package exceptions."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """Category of a user-input problem. All are recoverable."""

    MISSING_REQUIRED_FIELD = "MISSING_REQUIRED_FIELD"
    NON_POSITIVE_VALUE = "NON_POSITIVE_VALUE"
    DIRECTIONAL_INCONSISTENCY = "DIRECTIONAL_INCONSISTENCY"
    UNKNOWN_MARKET = "UNKNOWN_MARKET"
    AMBIGUOUS_DIRECTION = "AMBIGUOUS_DIRECTION"


@dataclass(frozen=True, slots=True)
class ValidationIssue:
    """One problem found in trade input.

    Non-blocking issues (``blocking=False``) are warnings: they are reported
    but do not make a result invalid.
    """

    kind: ErrorKind
    field: str
    message: str
    blocking: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "field": self.field,
            "message": self.message,
            "blocking": self.blocking,
        }


class TradeJournalError(Exception):
    """Base error for the package."""


class ContractViolationError(TradeJournalError, TypeError):
    """Raised when a caller breaks the calculator's argument contract."""


class WizardError(TradeJournalError):
    """Base trade entry wizard error."""


class WizardNavigationError(WizardError):
    """Raised when a wizard transition is not allowed."""

    def __init__(self, message: str, errors: list[str] | None = None) -> None:
        super().__init__(message)
        self.errors = list(errors or [])
