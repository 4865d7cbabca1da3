"""Static market specification table and symbol lookup."""

from __future__ import annotations

import re

from trade_journal.types import (
    CommissionKind,
    CommissionStructure,
    MarketSpecification,
    RiskDefaults,
)

# One side per contract; a round trip costs twice this.
_FULL_SIZE_COMMISSION = CommissionStructure(amount=2.10, kind=CommissionKind.PER_CONTRACT)
_MICRO_COMMISSION = CommissionStructure(amount=0.60, kind=CommissionKind.PER_CONTRACT)

_INDEX_RISK = RiskDefaults(
    risk_per_trade_pct=1.0,
    default_stop_loss_pct=1.0,
    default_take_profit_pct=2.0,
    max_position_size=10,
)
_VOLATILE_INDEX_RISK = RiskDefaults(
    risk_per_trade_pct=1.5,
    default_stop_loss_pct=1.2,
    default_take_profit_pct=2.4,
    max_position_size=8,
)
_COMMODITY_RISK = RiskDefaults(
    risk_per_trade_pct=1.0,
    default_stop_loss_pct=1.5,
    default_take_profit_pct=3.0,
    max_position_size=5,
)
_MICRO_RISK = RiskDefaults(
    risk_per_trade_pct=1.0,
    default_stop_loss_pct=1.0,
    default_take_profit_pct=2.0,
    max_position_size=50,
)

_MARKETS: tuple[MarketSpecification, ...] = (
    MarketSpecification(
        symbol="ES",
        name="E-mini S&P 500",
        tick_size=0.25,
        point_value=50.0,
        default_commission=_FULL_SIZE_COMMISSION,
        precision=2,
        risk_defaults=_INDEX_RISK,
        initial_margin=13_200.0,
        day_trading_margin=6_600.0,
    ),
    MarketSpecification(
        symbol="MES",
        name="Micro E-mini S&P 500",
        tick_size=0.25,
        point_value=5.0,
        default_commission=_MICRO_COMMISSION,
        precision=2,
        risk_defaults=_MICRO_RISK,
        initial_margin=1_320.0,
        day_trading_margin=660.0,
    ),
    MarketSpecification(
        symbol="NQ",
        name="E-mini NASDAQ-100",
        tick_size=0.25,
        point_value=20.0,
        default_commission=_FULL_SIZE_COMMISSION,
        precision=2,
        risk_defaults=_VOLATILE_INDEX_RISK,
        initial_margin=19_800.0,
        day_trading_margin=9_900.0,
    ),
    MarketSpecification(
        symbol="MNQ",
        name="Micro E-mini NASDAQ-100",
        tick_size=0.25,
        point_value=2.0,
        default_commission=_MICRO_COMMISSION,
        precision=2,
        risk_defaults=_MICRO_RISK,
        initial_margin=1_980.0,
        day_trading_margin=990.0,
    ),
    MarketSpecification(
        symbol="YM",
        name="E-mini Dow",
        tick_size=1.0,
        point_value=5.0,
        default_commission=_FULL_SIZE_COMMISSION,
        precision=0,
        risk_defaults=_INDEX_RISK,
    ),
    MarketSpecification(
        symbol="MYM",
        name="Micro E-mini Dow",
        tick_size=1.0,
        point_value=0.5,
        default_commission=_MICRO_COMMISSION,
        precision=0,
        risk_defaults=_MICRO_RISK,
    ),
    MarketSpecification(
        symbol="RTY",
        name="E-mini Russell 2000",
        tick_size=0.1,
        point_value=50.0,
        default_commission=_FULL_SIZE_COMMISSION,
        precision=1,
        risk_defaults=_INDEX_RISK,
    ),
    MarketSpecification(
        symbol="M2K",
        name="Micro E-mini Russell 2000",
        tick_size=0.1,
        point_value=5.0,
        default_commission=_MICRO_COMMISSION,
        precision=1,
        risk_defaults=_MICRO_RISK,
    ),
    MarketSpecification(
        symbol="CL",
        name="Crude Oil",
        tick_size=0.01,
        point_value=1_000.0,
        default_commission=_FULL_SIZE_COMMISSION,
        precision=2,
        risk_defaults=_COMMODITY_RISK,
    ),
    MarketSpecification(
        symbol="MCL",
        name="Micro Crude Oil",
        tick_size=0.01,
        point_value=100.0,
        default_commission=_MICRO_COMMISSION,
        precision=2,
        risk_defaults=_MICRO_RISK,
    ),
    MarketSpecification(
        symbol="GC",
        name="Gold",
        tick_size=0.1,
        point_value=100.0,
        default_commission=_FULL_SIZE_COMMISSION,
        precision=1,
        risk_defaults=_COMMODITY_RISK,
    ),
    MarketSpecification(
        symbol="MGC",
        name="Micro Gold",
        tick_size=0.1,
        point_value=10.0,
        default_commission=_MICRO_COMMISSION,
        precision=1,
        risk_defaults=_MICRO_RISK,
    ),
    MarketSpecification(
        symbol="SI",
        name="Silver",
        tick_size=0.005,
        point_value=5_000.0,
        default_commission=_FULL_SIZE_COMMISSION,
        precision=3,
        risk_defaults=_COMMODITY_RISK,
    ),
)

_BY_SYMBOL: dict[str, MarketSpecification] = {spec.symbol: spec for spec in _MARKETS}

# Futures month codes used in compact contract names such as "NQZ4".
_MONTH_CODE_SUFFIX = re.compile(r"^([A-Z0-9]+?)[FGHJKMNQUVXZ]\d{1,2}$")


def get_market_specification(symbol: str | None) -> MarketSpecification | None:
    """Look up a market by symbol, case-insensitively. Returns None if unknown."""
    if not symbol:
        return None
    return _BY_SYMBOL.get(symbol.strip().upper())


def list_market_specifications() -> list[MarketSpecification]:
    """All markets in table order."""
    return list(_MARKETS)


def extract_base_symbol(symbol: str) -> str:
    """Strip contract month details from a platform symbol.

    ``"ES 12-24"`` -> ``"ES"``, ``"NQZ4"`` -> ``"NQ"``, ``"mes"`` -> ``"MES"``.
    Symbols already in the table are returned unchanged.
    """
    cleaned = symbol.strip().upper()
    if not cleaned:
        return cleaned
    head = cleaned.split()[0]
    if head in _BY_SYMBOL:
        return head
    match = _MONTH_CODE_SUFFIX.match(head)
    if match and match.group(1) in _BY_SYMBOL:
        return match.group(1)
    return head
