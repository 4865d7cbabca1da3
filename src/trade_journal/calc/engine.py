"""Point-based P&L and risk calculator.

Every call is a pure function of the trade fields and the market
specification. Arithmetic runs at full float precision; values are rounded
only when the result object is built.
"""

from __future__ import annotations

import math

from trade_journal.calc.errors import ContractViolationError, ErrorKind, ValidationIssue
from trade_journal.config import get_settings
from trade_journal.types import (
    CommissionKind,
    Direction,
    DirectionSource,
    MarketSpecification,
    ResolvedDirection,
    TradeCalculationResult,
    TradeInput,
)
from trade_journal.utils.logging import get_logger, log_trade_calculation

_logger = get_logger("trade_journal.calc.engine")

FIELD_MESSAGES: dict[str, str] = {
    "entry_price": "Entry price must be a positive number",
    "exit_price": "Exit price must be a positive number",
    "quantity": "Quantity must be greater than zero",
    "stop_loss": "Stop loss must be a positive number",
    "take_profit": "Take profit must be a positive number",
}

# Field checks run in this order; directional and advisory issues follow.
_FIELD_ORDER = ("symbol", "entry_price", "exit_price", "quantity", "stop_loss", "take_profit")
_KIND_ORDER = {
    ErrorKind.DIRECTIONAL_INCONSISTENCY: 1,
    ErrorKind.AMBIGUOUS_DIRECTION: 2,
}


def issue_sort_key(issue: ValidationIssue) -> tuple[int, int]:
    """Sort key that reproduces the calculator's reporting order."""
    group = _KIND_ORDER.get(issue.kind, 0)
    if group == 0 and issue.field in _FIELD_ORDER:
        return group, _FIELD_ORDER.index(issue.field)
    return group, len(_FIELD_ORDER)


def resolve_direction(
    entry_price: float | None,
    exit_price: float | None,
    explicit: Direction | None = None,
) -> ResolvedDirection | None:
    """Resolve trade direction.

    An explicit direction always wins. Otherwise direction is inferred from
    price movement (exit above entry is LONG, anything else SHORT) and tagged
    INFERRED, since a losing long and a winning short look the same here.
    Returns None when there is nothing to infer from.
    """
    if explicit is not None:
        return ResolvedDirection(Direction(explicit), DirectionSource.EXPLICIT)
    if not _is_positive(entry_price) or not _is_positive(exit_price):
        return None
    value = Direction.LONG if exit_price > entry_price else Direction.SHORT
    return ResolvedDirection(value, DirectionSource.INFERRED)


def compute_commission(
    spec: MarketSpecification,
    quantity: float,
    pnl_gross_usd: float = 0.0,
) -> float:
    """Commission for a trade using the market's default structure.

    PER_SHARE uses ``quantity`` exactly like PER_CONTRACT; there is no
    separate share count.
    """
    commission = spec.default_commission
    if commission.kind is CommissionKind.PERCENTAGE:
        return commission.amount / 100.0 * abs(pnl_gross_usd)
    return commission.amount * quantity


def calculate_trade(
    trade: TradeInput,
    spec: MarketSpecification | None,
    *,
    symbol: str | None = None,
) -> TradeCalculationResult:
    """Compute P&L, risk/reward and efficiency for one trade.

    Bad user input never raises: problems are collected into ``errors`` and
    as much of the result as the valid fields allow is still filled in.
    """
    if not isinstance(trade, TradeInput):
        raise ContractViolationError(
            f"calculate_trade expects TradeInput, got {type(trade).__name__}"
        )
    if spec is not None and not isinstance(spec, MarketSpecification):
        raise ContractViolationError(
            f"calculate_trade expects MarketSpecification, got {type(spec).__name__}"
        )

    settings = get_settings()
    issues = _validate_fields(trade, spec)

    entry_ok = _is_positive(trade.entry_price)
    exit_ok = _is_positive(trade.exit_price)
    quantity_ok = _is_positive(trade.quantity)
    stop_ok = _is_positive(trade.stop_loss)
    target_ok = _is_positive(trade.take_profit)

    result = TradeCalculationResult()
    resolved = resolve_direction(
        trade.entry_price,
        trade.exit_price if exit_ok else None,
        trade.direction,
    )
    result.direction = resolved

    if entry_ok and resolved is not None:
        issues.extend(_directional_issues(trade, resolved.value, stop_ok, target_ok))
        if resolved.is_inferred:
            issues.append(
                ValidationIssue(
                    ErrorKind.AMBIGUOUS_DIRECTION,
                    "direction",
                    f"Direction inferred as {resolved.value.value} from price movement",
                    blocking=False,
                )
            )

    point_digits = spec.precision if spec is not None else settings.default_precision
    money_digits = settings.money_decimals
    ratio_digits = settings.ratio_decimals

    if entry_ok and resolved is not None:
        sign = resolved.value.sign
        entry = float(trade.entry_price)

        risk_points: float | None = None
        if stop_ok:
            risk_points = sign * (entry - float(trade.stop_loss))
            result.risk_points = round(risk_points, point_digits)
        if target_ok:
            reward_points = sign * (float(trade.take_profit) - entry)
            result.reward_points = round(reward_points, point_digits)
            if risk_points is not None and risk_points > 0:
                result.risk_reward_ratio = round(reward_points / risk_points, ratio_digits)

        if _is_positive(trade.max_adverse_price):
            result.adverse_excursion_points = round(
                sign * (entry - float(trade.max_adverse_price)), point_digits
            )

        if exit_ok and quantity_ok:
            pnl_points = sign * (float(trade.exit_price) - entry)
            result.pnl_points = round(pnl_points, point_digits)
            result.pnl_percent = round(pnl_points / entry * 100.0, ratio_digits)
            if risk_points is not None and risk_points > 0:
                result.r_multiple = round(pnl_points / risk_points, ratio_digits)
            else:
                result.r_multiple = 0.0
            result.efficiency_percent = round(
                _efficiency(entry, pnl_points, trade.max_favorable_price, sign),
                settings.efficiency_decimals,
            )

            if spec is not None:
                quantity = float(trade.quantity)
                gross = pnl_points * spec.point_value * quantity
                commission = compute_commission(spec, quantity, gross)
                result.pnl_gross_usd = round(gross, money_digits)
                result.commission = round(commission, money_digits)
                result.pnl_net_usd = round(gross - commission, money_digits)

    result.issues = issues
    result.errors = [issue.message for issue in issues if issue.blocking]
    result.is_valid = not result.errors

    log_trade_calculation(
        _logger,
        symbol=symbol or (spec.symbol if spec is not None else None),
        direction=resolved.value.value if resolved is not None else None,
        is_valid=result.is_valid,
        direction_source=resolved.source.value if resolved is not None else None,
        error_count=len(result.errors),
    )
    return result


def _validate_fields(
    trade: TradeInput,
    spec: MarketSpecification | None,
) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []

    if spec is None:
        issues.append(ValidationIssue(ErrorKind.UNKNOWN_MARKET, "symbol", "Unknown market"))

    if not _is_positive(trade.entry_price):
        issues.append(
            ValidationIssue(
                _kind_for(trade.entry_price),
                "entry_price",
                FIELD_MESSAGES["entry_price"],
            )
        )

    if trade.exit_price is not None and not _is_positive(trade.exit_price):
        issues.append(
            ValidationIssue(
                _kind_for(trade.exit_price),
                "exit_price",
                FIELD_MESSAGES["exit_price"],
            )
        )

    if not _is_positive(trade.quantity):
        issues.append(
            ValidationIssue(
                _kind_for(trade.quantity),
                "quantity",
                FIELD_MESSAGES["quantity"],
            )
        )

    for field_name in ("stop_loss", "take_profit"):
        value = getattr(trade, field_name)
        if value is not None and not _is_positive(value):
            issues.append(
                ValidationIssue(
                    _kind_for(value),
                    field_name,
                    FIELD_MESSAGES[field_name],
                )
            )
    return issues


def _directional_issues(
    trade: TradeInput,
    direction: Direction,
    stop_ok: bool,
    target_ok: bool,
) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []
    entry = float(trade.entry_price)
    label = "long" if direction is Direction.LONG else "short"

    if stop_ok:
        stop = float(trade.stop_loss)
        misplaced = stop >= entry if direction is Direction.LONG else stop <= entry
        if misplaced:
            side = "below" if direction is Direction.LONG else "above"
            issues.append(
                ValidationIssue(
                    ErrorKind.DIRECTIONAL_INCONSISTENCY,
                    "stop_loss",
                    f"Stop loss must be {side} entry for {label} trades",
                )
            )
    if target_ok:
        target = float(trade.take_profit)
        misplaced = target <= entry if direction is Direction.LONG else target >= entry
        if misplaced:
            side = "above" if direction is Direction.LONG else "below"
            issues.append(
                ValidationIssue(
                    ErrorKind.DIRECTIONAL_INCONSISTENCY,
                    "take_profit",
                    f"Take profit must be {side} entry for {label} trades",
                )
            )
    return issues


def _efficiency(
    entry: float,
    pnl_points: float,
    max_favorable_price: float | None,
    sign: int,
) -> float:
    """Share of the best available move captured, clamped to [0, 100]."""
    if not _is_positive(max_favorable_price):
        return 0.0
    max_move = sign * (float(max_favorable_price) - entry)
    if max_move <= 0:
        return 0.0
    return min(100.0, max(0.0, pnl_points / max_move * 100.0))


def _is_positive(value: float | None) -> bool:
    if value is None or isinstance(value, bool):
        return False
    try:
        number = float(value)
    except (TypeError, ValueError):
        return False
    return math.isfinite(number) and number > 0


def _kind_for(value: float | None) -> ErrorKind:
    if value is None:
        return ErrorKind.MISSING_REQUIRED_FIELD
    try:
        number = float(value)
    except (TypeError, ValueError):
        return ErrorKind.MISSING_REQUIRED_FIELD
    if not math.isfinite(number):
        return ErrorKind.MISSING_REQUIRED_FIELD
    return ErrorKind.NON_POSITIVE_VALUE
