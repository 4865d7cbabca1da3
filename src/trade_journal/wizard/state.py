"""Guided multi-step trade entry.

A linear wizard: forward moves need the current step to be valid, backward
moves are always allowed, and only risk management can be skipped. Nothing
is persisted; abandoning the wizard drops everything entered so far.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from enum import Enum
from typing import Any, Callable

from trade_journal.calc.engine import calculate_trade
from trade_journal.calc.errors import WizardNavigationError
from trade_journal.config import get_settings
from trade_journal.forms.parsing import parse_direction, parse_number
from trade_journal.markets.catalog import get_market_specification
from trade_journal.risk.sizing import generate_trade_defaults
from trade_journal.types import Direction, TradeCalculationResult, TradeInput
from trade_journal.utils.logging import get_logger, log_validation_failure, log_wizard_transition


class WizardStep(str, Enum):
    """Wizard steps in order."""

    MARKET_SELECTION = "market"
    BASIC_INFO = "basic"
    POSITION_SIZING = "sizing"
    RISK_MANAGEMENT = "risk"
    REVIEW_SUBMIT = "review"


@dataclass(slots=True)
class WizardData:
    """Fields accumulated across steps."""

    symbol: str | None = None
    direction: Direction | None = None
    entry_price: float | None = None
    quantity: float | None = None
    risk_amount: float | None = None
    stop_loss: float | None = None
    take_profit: float | None = None
    exit_price: float | None = None
    notes: str | None = None

    def to_trade_input(self) -> TradeInput:
        return TradeInput(
            entry_price=self.entry_price,
            quantity=self.quantity,
            exit_price=self.exit_price,
            direction=self.direction,
            stop_loss=self.stop_loss,
            take_profit=self.take_profit,
        )


@dataclass(slots=True)
class TradeSubmission:
    """What the wizard hands to the trade-creation collaborator."""

    symbol: str
    trade: TradeInput
    result: TradeCalculationResult
    risk_amount: float | None = None
    notes: str | None = None


def _positive(value: float | None) -> bool:
    return value is not None and value > 0


def _market_errors(data: WizardData) -> list[str]:
    if get_market_specification(data.symbol) is None:
        return ["Please select a market to continue"]
    return []


def _basic_errors(data: WizardData) -> list[str]:
    errors: list[str] = []
    if data.direction is None:
        errors.append("Direction is required")
    if not _positive(data.entry_price):
        errors.append("Valid entry price is required")
    return errors


def _sizing_errors(data: WizardData) -> list[str]:
    errors: list[str] = []
    if not _positive(data.risk_amount):
        errors.append("Risk amount must be greater than 0")
    if not _positive(data.quantity):
        errors.append("Position size must be greater than 0")
    return errors


def _risk_errors(data: WizardData) -> list[str]:
    if not _positive(data.stop_loss):
        return ["Stop loss is required"]
    return []


def _review_errors(data: WizardData) -> list[str]:
    return []


@dataclass(frozen=True, slots=True)
class StepDefinition:
    step: WizardStep
    title: str
    check: Callable[[WizardData], list[str]]
    can_skip: bool = False

    def is_valid(self, data: WizardData) -> bool:
        return not self.check(data)


STEPS: tuple[StepDefinition, ...] = (
    StepDefinition(WizardStep.MARKET_SELECTION, "Select Market", _market_errors),
    StepDefinition(WizardStep.BASIC_INFO, "Trade Details", _basic_errors),
    StepDefinition(WizardStep.POSITION_SIZING, "Position Size", _sizing_errors),
    StepDefinition(WizardStep.RISK_MANAGEMENT, "Risk Management", _risk_errors, can_skip=True),
    StepDefinition(WizardStep.REVIEW_SUBMIT, "Review & Submit", _review_errors),
)

_FIELD_NAMES = frozenset(f.name for f in fields(WizardData))
_NUMERIC_FIELDS = frozenset(
    {"entry_price", "quantity", "risk_amount", "stop_loss", "take_profit", "exit_price"}
)


def _coerce_number(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return parse_number(str(value))
    if isinstance(value, str):
        return parse_number(value)
    return None


def _coerce_direction(value: Any) -> Direction | None:
    if isinstance(value, Direction):
        return value
    if isinstance(value, str):
        return parse_direction(value)
    return None


class TradeEntryWizard:
    """State machine for guided trade entry."""

    def __init__(
        self,
        submitter: Callable[[TradeSubmission], Any],
        *,
        account_balance: float | None = None,
    ) -> None:
        self._submitter = submitter
        self._account_balance = (
            get_settings().default_account_balance if account_balance is None else account_balance
        )
        self._logger = get_logger("trade_journal.wizard.state")
        self._index = 0
        self._data = WizardData()
        self._submitted = False

    @property
    def current_step(self) -> WizardStep:
        return STEPS[self._index].step

    @property
    def step_index(self) -> int:
        return self._index

    @property
    def data(self) -> WizardData:
        """Snapshot of the accumulated fields."""
        return replace(self._data)

    @property
    def is_submitted(self) -> bool:
        return self._submitted

    @property
    def progress_pct(self) -> float:
        return (self._index + 1) / len(STEPS) * 100.0

    def update(self, **values: Any) -> None:
        """Merge field values into the accumulated data.

        Values arrive as the UI holds them. Prices and sizes may be strings and
        direction may be any case or a buy/sell alias; anything that does not
        parse is stored as None and shows up as an error on its step.
        """
        self._ensure_active()
        unknown = set(values) - _FIELD_NAMES
        if unknown:
            raise WizardNavigationError(f"unknown_wizard_fields: {','.join(sorted(unknown))}")
        if "direction" in values and values["direction"] is not None:
            values["direction"] = _coerce_direction(values["direction"])
        for name in _NUMERIC_FIELDS.intersection(values):
            if values[name] is not None:
                values[name] = _coerce_number(values[name])
        if "symbol" in values and values["symbol"] is not None:
            values["symbol"] = str(values["symbol"]).strip().upper()
        for name, value in values.items():
            setattr(self._data, name, value)
        if "symbol" in values:
            self._apply_market_defaults()

    def step_errors(self) -> list[str]:
        return STEPS[self._index].check(self._data)

    def can_proceed(self) -> bool:
        return not self._submitted and STEPS[self._index].is_valid(self._data)

    def next(self) -> WizardStep:
        """Advance one step if the current step is valid."""
        self._ensure_active()
        errors = self.step_errors()
        if errors:
            log_validation_failure(
                self._logger,
                source="wizard",
                errors=errors,
                step=self.current_step.value,
            )
            raise WizardNavigationError(f"step_invalid: {self.current_step.value}", errors)
        if self._index < len(STEPS) - 1:
            self._move(self._index + 1, "next")
        return self.current_step

    def back(self) -> WizardStep:
        """Go back one step. No-op on the first step."""
        self._ensure_active()
        if self._index > 0:
            self._move(self._index - 1, "back")
        return self.current_step

    def skip(self) -> WizardStep:
        """Skip the current step when it is skippable."""
        self._ensure_active()
        definition = STEPS[self._index]
        if not definition.can_skip:
            raise WizardNavigationError(f"step_not_skippable: {definition.step.value}")
        self._move(self._index + 1, "skip")
        return self.current_step

    def go_to(self, index: int) -> WizardStep:
        """Jump to any earlier step, or to the next one if the current step is valid."""
        self._ensure_active()
        if index < 0 or index >= len(STEPS):
            raise WizardNavigationError(f"step_index_out_of_range: {index}")
        if index <= self._index:
            self._move(index, "jump")
        elif index == self._index + 1:
            self.next()
        else:
            raise WizardNavigationError(f"cannot_jump_ahead: {index}")
        return self.current_step

    def submit(self) -> TradeSubmission:
        """Validate the full trade once more and hand it to the submitter."""
        self._ensure_active()
        if self.current_step is not WizardStep.REVIEW_SUBMIT:
            raise WizardNavigationError(f"submit_not_allowed_from: {self.current_step.value}")

        spec = get_market_specification(self._data.symbol)
        trade = self._data.to_trade_input()
        result = calculate_trade(trade, spec, symbol=self._data.symbol)
        if not result.is_valid:
            log_validation_failure(
                self._logger,
                source="wizard_submit",
                errors=result.errors,
                symbol=self._data.symbol,
            )
            raise WizardNavigationError("trade_invalid", result.errors)

        submission = TradeSubmission(
            symbol=spec.symbol,
            trade=trade,
            result=result,
            risk_amount=self._data.risk_amount,
            notes=self._data.notes,
        )
        self._submitter(submission)
        self._submitted = True
        log_wizard_transition(
            self._logger,
            action="submit",
            from_step=WizardStep.REVIEW_SUBMIT.value,
            to_step="submitted",
            symbol=submission.symbol,
        )
        return submission

    def abandon(self) -> None:
        """Discard all accumulated data and return to the first step."""
        self._logger.debug("wizard_abandoned", step=self.current_step.value)
        self._index = 0
        self._data = WizardData()
        self._submitted = False

    def _move(self, index: int, action: str) -> None:
        previous = self.current_step
        self._index = index
        log_wizard_transition(
            self._logger,
            action=action,
            from_step=previous.value,
            to_step=self.current_step.value,
        )

    def _apply_market_defaults(self) -> None:
        spec = get_market_specification(self._data.symbol)
        if spec is None or self._data.risk_amount is not None:
            return
        defaults = generate_trade_defaults(
            spec,
            self._account_balance,
            self._data.entry_price,
            self._data.direction or Direction.LONG,
        )
        self._data.risk_amount = defaults.risk_amount

    def _ensure_active(self) -> None:
        if self._submitted:
            raise WizardNavigationError("wizard_already_submitted")
