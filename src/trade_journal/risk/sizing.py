"""Risk-based position sizing and per-market trade defaults."""

from __future__ import annotations

import math
from dataclasses import dataclass

from trade_journal.types import Direction, MarketSpecification


@dataclass(slots=True)
class TradeDefaults:
    """Suggested values for a new trade in one market. Advisory only."""

    symbol: str
    risk_pct: float
    risk_amount: float
    max_position_size: int
    stop_loss_pct: float
    take_profit_pct: float
    commission: float
    suggested_quantity: int | None = None
    suggested_stop_loss: float | None = None
    suggested_take_profit: float | None = None


def compute_position_size(
    risk_amount: float,
    entry_price: float,
    stop_price: float,
    spec: MarketSpecification,
) -> int:
    """Whole contracts that keep the stop-out loss within ``risk_amount``.

    Capped at the market's advisory maximum position size.
    """
    if risk_amount <= 0 or entry_price <= 0 or stop_price <= 0:
        return 0
    per_contract_risk = abs(entry_price - stop_price) * spec.point_value
    if per_contract_risk <= 0:
        return 0
    qty = math.floor(risk_amount / per_contract_risk)
    return max(0, min(qty, spec.risk_defaults.max_position_size))


def compute_contract_value(
    price: float,
    spec: MarketSpecification,
    quantity: float = 1,
) -> float:
    """Notional value of a position: price x point value x quantity."""
    return price * spec.point_value * quantity


def compute_margin_requirement(
    contracts: float,
    spec: MarketSpecification,
    day_trade: bool = False,
) -> float | None:
    """Exchange margin for ``contracts`` contracts.

    Day trades use the intraday margin when the market has one and fall back
    to initial margin otherwise. Returns None when no margin is known.
    """
    per_contract = spec.initial_margin
    if day_trade and spec.day_trading_margin is not None:
        per_contract = spec.day_trading_margin
    if per_contract is None:
        return None
    return per_contract * contracts


def generate_trade_defaults(
    spec: MarketSpecification,
    account_balance: float,
    entry_price: float | None = None,
    direction: Direction = Direction.LONG,
) -> TradeDefaults:
    """Build suggested risk amount, stop, target and size for a market."""
    risk = spec.risk_defaults
    risk_amount = account_balance * risk.risk_per_trade_pct / 100.0
    defaults = TradeDefaults(
        symbol=spec.symbol,
        risk_pct=risk.risk_per_trade_pct,
        risk_amount=round(risk_amount, 2),
        max_position_size=risk.max_position_size,
        stop_loss_pct=risk.default_stop_loss_pct,
        take_profit_pct=risk.default_take_profit_pct,
        commission=spec.default_commission.amount,
    )

    if entry_price is None or entry_price <= 0 or risk.default_stop_loss_pct <= 0:
        return defaults

    sign = direction.sign
    stop = entry_price * (1 - sign * risk.default_stop_loss_pct / 100.0)
    target = entry_price * (1 + sign * risk.default_take_profit_pct / 100.0)
    defaults.suggested_stop_loss = round(stop, spec.precision)
    defaults.suggested_take_profit = round(target, spec.precision)
    defaults.suggested_quantity = compute_position_size(risk_amount, entry_price, stop, spec)
    return defaults
