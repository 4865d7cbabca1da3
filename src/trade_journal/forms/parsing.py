"""Typed boundary between raw form strings and the calculator."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, field_validator

from trade_journal.calc.engine import FIELD_MESSAGES, calculate_trade, issue_sort_key
from trade_journal.calc.errors import ErrorKind, ValidationIssue
from trade_journal.markets.catalog import extract_base_symbol, get_market_specification
from trade_journal.types import (
    Direction,
    MarketSpecification,
    TradeCalculationResult,
    TradeInput,
)
from trade_journal.utils.logging import get_logger, log_validation_failure

_logger = get_logger("trade_journal.forms.parsing")

_DIRECTION_ALIASES = {
    "long": Direction.LONG,
    "buy": Direction.LONG,
    "short": Direction.SHORT,
    "sell": Direction.SHORT,
}

_PRICE_FIELDS: dict[str, str] = {
    "entry_price": "Entry price",
    "exit_price": "Exit price",
    "quantity": "Quantity",
    "stop_loss": "Stop loss",
    "take_profit": "Take profit",
    "max_favorable_price": "Max favorable price",
    "max_adverse_price": "Max adverse price",
}


class TradeForm(BaseModel):
    """Raw trade form fields as typed by the user."""

    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    symbol: str | None = None
    direction: str | None = None
    entry_price: str | None = None
    exit_price: str | None = None
    quantity: str | None = None
    stop_loss: str | None = None
    take_profit: str | None = None
    max_favorable_price: str | None = None
    max_adverse_price: str | None = None

    @field_validator("*", mode="before")
    @classmethod
    def blank_to_none(cls, v: Any) -> str | None:
        """Numbers are accepted as-is; empty strings mean 'not entered'."""
        if v is None:
            return None
        text = str(v).strip()
        return text or None


@dataclass(slots=True)
class ParsedTradeForm:
    """Result of parsing one form."""

    trade: TradeInput
    spec: MarketSpecification | None
    symbol: str | None
    issues: list[ValidationIssue] = field(default_factory=list)


def parse_number(text: str | None) -> float | None:
    """Parse a user-entered number. Returns None when it is not a finite number."""
    if text is None:
        return None
    cleaned = text.replace(",", "").replace("$", "").replace("_", "").strip()
    if not cleaned:
        return None
    try:
        value = float(cleaned)
    except ValueError:
        return None
    if not math.isfinite(value):
        return None
    return value


def parse_direction(text: str | None) -> Direction | None:
    if text is None:
        return None
    return _DIRECTION_ALIASES.get(text.strip().lower())


def parse_trade_form(raw: Mapping[str, Any]) -> ParsedTradeForm:
    """Convert raw form values into a strictly typed ``TradeInput``.

    Unparseable values become MISSING_REQUIRED_FIELD issues worded the way the
    calculator words that field, and are treated as absent. Values at or below
    zero pass through for the calculator to reject; only the excursion prices,
    which the calculator ignores when non-positive, are flagged here.
    """
    form = TradeForm.model_validate(dict(raw))
    issues: list[ValidationIssue] = []

    numbers: dict[str, float | None] = {}
    for name, label in _PRICE_FIELDS.items():
        text = getattr(form, name)
        value = parse_number(text)
        message = FIELD_MESSAGES.get(name, f"{label} must be a positive number")
        if text is not None and value is None:
            issues.append(ValidationIssue(ErrorKind.MISSING_REQUIRED_FIELD, name, message))
        elif name not in FIELD_MESSAGES and value is not None and value <= 0:
            issues.append(ValidationIssue(ErrorKind.NON_POSITIVE_VALUE, name, message))
        numbers[name] = value

    direction = parse_direction(form.direction)
    if form.direction is not None and direction is None:
        issues.append(
            ValidationIssue(
                ErrorKind.MISSING_REQUIRED_FIELD,
                "direction",
                "Direction must be LONG or SHORT",
            )
        )

    symbol = extract_base_symbol(form.symbol) if form.symbol else None
    spec = get_market_specification(symbol)

    trade = TradeInput(
        entry_price=numbers["entry_price"],
        quantity=numbers["quantity"],
        exit_price=numbers["exit_price"],
        direction=direction,
        stop_loss=numbers["stop_loss"],
        take_profit=numbers["take_profit"],
        max_favorable_price=numbers["max_favorable_price"],
        max_adverse_price=numbers["max_adverse_price"],
    )
    return ParsedTradeForm(trade=trade, spec=spec, symbol=symbol, issues=issues)


def calculate_from_form(raw: Mapping[str, Any]) -> TradeCalculationResult:
    """Parse a raw form and run the calculator on it.

    Each field is reported once; a parse issue wins over the calculator's
    issue for the same field. The merged issues follow the calculator's order.
    """
    parsed = parse_trade_form(raw)
    result = calculate_trade(parsed.trade, parsed.spec, symbol=parsed.symbol)

    reported = {issue.field for issue in parsed.issues if issue.blocking}
    merged = list(parsed.issues)
    merged.extend(
        issue for issue in result.issues if not (issue.blocking and issue.field in reported)
    )
    merged.sort(key=issue_sort_key)
    result.issues = merged
    result.errors = [issue.message for issue in merged if issue.blocking]
    result.is_valid = not result.errors

    if not result.is_valid:
        log_validation_failure(
            _logger,
            source="trade_form",
            errors=result.errors,
            symbol=parsed.symbol,
        )
    return result
