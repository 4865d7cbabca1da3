"""Shared domain types for the trade calculation engine."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any

from trade_journal.calc.errors import ValidationIssue


class Direction(str, Enum):
    """Position direction."""

    LONG = "LONG"
    SHORT = "SHORT"

    @property
    def sign(self) -> int:
        return 1 if self is Direction.LONG else -1


class DirectionSource(str, Enum):
    """Whether a direction was entered by the user or derived from prices."""

    EXPLICIT = "EXPLICIT"
    INFERRED = "INFERRED"


class CommissionKind(str, Enum):
    """How a market's default commission scales."""

    PER_CONTRACT = "PER_CONTRACT"
    PER_SHARE = "PER_SHARE"
    PERCENTAGE = "PERCENTAGE"


@dataclass(frozen=True, slots=True)
class ResolvedDirection:
    """Direction tagged with where it came from."""

    value: Direction
    source: DirectionSource

    @property
    def is_inferred(self) -> bool:
        return self.source is DirectionSource.INFERRED


@dataclass(frozen=True, slots=True)
class CommissionStructure:
    """Default commission for a market."""

    amount: float
    kind: CommissionKind = CommissionKind.PER_CONTRACT


@dataclass(frozen=True, slots=True)
class RiskDefaults:
    """Advisory risk settings for a market. Never enforced as hard limits."""

    risk_per_trade_pct: float = 1.0
    default_stop_loss_pct: float = 1.0
    default_take_profit_pct: float = 2.0
    max_position_size: int = 10


@dataclass(frozen=True, slots=True)
class MarketSpecification:
    """Contract constants for one tradable symbol."""

    symbol: str
    name: str
    tick_size: float
    point_value: float
    default_commission: CommissionStructure
    precision: int = 2
    risk_defaults: RiskDefaults = field(default_factory=RiskDefaults)
    initial_margin: float | None = None
    day_trading_margin: float | None = None

    def __post_init__(self) -> None:
        if not self.symbol or self.symbol != self.symbol.upper():
            raise ValueError(f"market_symbol_must_be_uppercase: {self.symbol!r}")
        if self.tick_size <= 0:
            raise ValueError(f"tick_size_must_be_positive: {self.symbol}")
        if self.point_value <= 0:
            raise ValueError(f"point_value_must_be_positive: {self.symbol}")
        if self.precision < 0:
            raise ValueError(f"precision_must_be_non_negative: {self.symbol}")

    @property
    def tick_value(self) -> float:
        """Dollar value of one tick per contract."""
        return self.tick_size * self.point_value


@dataclass(slots=True)
class TradeInput:
    """Strictly typed trade fields for one calculation call."""

    entry_price: float | None
    quantity: float | None
    exit_price: float | None = None
    direction: Direction | None = None
    stop_loss: float | None = None
    take_profit: float | None = None
    max_favorable_price: float | None = None
    max_adverse_price: float | None = None

    @property
    def is_open(self) -> bool:
        return self.exit_price is None


@dataclass(slots=True)
class TradeCalculationResult:
    """Derived, always-recomputable projection of a trade.

    Fields that could not be computed are None. ``risk_reward_ratio`` and
    ``efficiency_percent`` are always finite numbers.
    """

    direction: ResolvedDirection | None = None
    pnl_points: float | None = None
    pnl_gross_usd: float | None = None
    commission: float | None = None
    pnl_net_usd: float | None = None
    pnl_percent: float | None = None
    risk_points: float | None = None
    reward_points: float | None = None
    risk_reward_ratio: float = 0.0
    r_multiple: float | None = None
    efficiency_percent: float = 0.0
    adverse_excursion_points: float | None = None
    is_valid: bool = False
    errors: list[str] = field(default_factory=list)
    issues: list[ValidationIssue] = field(default_factory=list)

    @property
    def direction_inferred(self) -> bool:
        return self.direction is not None and self.direction.is_inferred

    def to_dict(self) -> dict[str, Any]:
        """JSON-friendly representation."""
        payload = asdict(self)
        if self.direction is not None:
            payload["direction"] = self.direction.value.value
            payload["direction_source"] = self.direction.source.value
        else:
            payload["direction_source"] = None
        payload["issues"] = [issue.to_dict() for issue in self.issues]
        return payload
