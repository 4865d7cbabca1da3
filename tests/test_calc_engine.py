from __future__ import annotations

import math

import pytest

from trade_journal.calc.engine import calculate_trade, compute_commission, resolve_direction
from trade_journal.calc.errors import ContractViolationError, ErrorKind
from trade_journal.markets.catalog import get_market_specification
from trade_journal.types import (
    CommissionKind,
    CommissionStructure,
    Direction,
    DirectionSource,
    MarketSpecification,
    TradeInput,
)


def _spec(symbol: str) -> MarketSpecification:
    spec = get_market_specification(symbol)
    assert spec is not None
    return spec


def _custom_spec(kind: CommissionKind, amount: float) -> MarketSpecification:
    return MarketSpecification(
        symbol="TEST",
        name="Test market",
        tick_size=0.01,
        point_value=10.0,
        default_commission=CommissionStructure(amount=amount, kind=kind),
    )


def test_long_es_trade_nets_commission() -> None:
    trade = TradeInput(entry_price=4500.0, exit_price=4510.0, quantity=2, direction=Direction.LONG)
    result = calculate_trade(trade, _spec("ES"))
    assert result.is_valid
    assert result.errors == []
    assert result.pnl_points == 10.0
    assert result.pnl_gross_usd == 1000.0
    assert result.commission == 4.2
    assert result.pnl_net_usd == 995.8


def test_short_nq_trade_losing() -> None:
    trade = TradeInput(
        entry_price=15000.0,
        exit_price=15020.0,
        quantity=1,
        direction=Direction.SHORT,
    )
    result = calculate_trade(trade, _spec("NQ"))
    assert result.direction is not None
    assert result.direction.value is Direction.SHORT
    assert result.direction.source is DirectionSource.EXPLICIT
    assert result.pnl_points == -20.0
    assert result.pnl_gross_usd == -400.0
    assert result.pnl_net_usd == pytest.approx(-402.1)


def test_risk_reward_for_open_long() -> None:
    trade = TradeInput(
        entry_price=100.0,
        quantity=1,
        direction=Direction.LONG,
        stop_loss=95.0,
        take_profit=115.0,
    )
    result = calculate_trade(trade, _spec("ES"))
    assert result.is_valid
    assert result.risk_points == 5.0
    assert result.reward_points == 15.0
    assert result.risk_reward_ratio == 3.0
    assert result.pnl_points is None
    assert result.pnl_gross_usd is None
    assert result.pnl_net_usd is None


def test_stop_on_wrong_side_for_long() -> None:
    trade = TradeInput(
        entry_price=100.0,
        exit_price=104.0,
        quantity=1,
        direction=Direction.LONG,
        stop_loss=105.0,
    )
    result = calculate_trade(trade, _spec("ES"))
    assert not result.is_valid
    assert any(e.lower() == "stop loss must be below entry for long trades" for e in result.errors)
    # P&L fields that do not depend on the stop are still filled in
    assert result.pnl_points == 4.0
    assert result.pnl_gross_usd == 200.0
    assert result.risk_points == -5.0
    assert result.risk_reward_ratio == 0.0


def test_short_directional_messages() -> None:
    trade = TradeInput(
        entry_price=100.0,
        quantity=1,
        direction=Direction.SHORT,
        stop_loss=95.0,
        take_profit=110.0,
    )
    result = calculate_trade(trade, _spec("ES"))
    assert result.errors == [
        "Stop loss must be above entry for short trades",
        "Take profit must be below entry for short trades",
    ]
    kinds = {issue.kind for issue in result.issues}
    assert kinds == {ErrorKind.DIRECTIONAL_INCONSISTENCY}


def test_efficiency_long() -> None:
    trade = TradeInput(
        entry_price=100.0,
        exit_price=108.0,
        quantity=1,
        direction=Direction.LONG,
        max_favorable_price=112.0,
    )
    result = calculate_trade(trade, _spec("ES"))
    assert result.efficiency_percent == 66.7


def test_efficiency_short_uses_favorable_price() -> None:
    trade = TradeInput(
        entry_price=100.0,
        exit_price=94.0,
        quantity=1,
        direction=Direction.SHORT,
        max_favorable_price=90.0,
    )
    result = calculate_trade(trade, _spec("ES"))
    assert result.efficiency_percent == 60.0


@pytest.mark.parametrize(
    ("exit_price", "mfe"),
    [
        (120.0, 110.0),  # exit beyond the recorded best price
        (95.0, 110.0),  # losing trade
        (108.0, 90.0),  # favorable price on the wrong side of entry
        (108.0, None),
    ],
)
def test_efficiency_is_clamped(exit_price: float, mfe: float | None) -> None:
    trade = TradeInput(
        entry_price=100.0,
        exit_price=exit_price,
        quantity=1,
        direction=Direction.LONG,
        max_favorable_price=mfe,
    )
    result = calculate_trade(trade, _spec("ES"))
    assert 0.0 <= result.efficiency_percent <= 100.0


def test_efficiency_over_full_move_caps_at_100() -> None:
    trade = TradeInput(
        entry_price=100.0,
        exit_price=120.0,
        quantity=1,
        direction=Direction.LONG,
        max_favorable_price=110.0,
    )
    assert calculate_trade(trade, _spec("ES")).efficiency_percent == 100.0


@pytest.mark.parametrize("quantity", [0, None, -1])
def test_invalid_quantity(quantity: float | None) -> None:
    trade = TradeInput(
        entry_price=100.0, exit_price=101.0, quantity=quantity, direction=Direction.LONG
    )
    result = calculate_trade(trade, _spec("ES"))
    assert not result.is_valid
    assert "Quantity must be greater than zero" in result.errors
    assert result.pnl_gross_usd is None
    assert result.pnl_points is None
    assert result.pnl_percent is None
    assert result.efficiency_percent == 0.0


def test_missing_entry_price() -> None:
    trade = TradeInput(entry_price=None, exit_price=101.0, quantity=1)
    result = calculate_trade(trade, _spec("ES"))
    assert not result.is_valid
    assert result.errors == ["Entry price must be a positive number"]
    assert result.issues[0].kind is ErrorKind.MISSING_REQUIRED_FIELD
    assert result.pnl_points is None
    assert result.direction is None


def test_non_finite_entry_is_missing() -> None:
    trade = TradeInput(entry_price=float("nan"), exit_price=101.0, quantity=1)
    result = calculate_trade(trade, _spec("ES"))
    assert result.issues[0].kind is ErrorKind.MISSING_REQUIRED_FIELD
    assert result.pnl_points is None


def test_errors_are_collected_in_order() -> None:
    trade = TradeInput(entry_price=0.0, exit_price=-5.0, quantity=0, stop_loss=-1.0)
    result = calculate_trade(trade, None)
    assert result.errors == [
        "Unknown market",
        "Entry price must be a positive number",
        "Exit price must be a positive number",
        "Quantity must be greater than zero",
        "Stop loss must be a positive number",
    ]
    assert result.issues[1].kind is ErrorKind.NON_POSITIVE_VALUE


def test_unknown_market_keeps_points_only() -> None:
    trade = TradeInput(entry_price=100.0, exit_price=103.0, quantity=1, direction=Direction.LONG)
    result = calculate_trade(trade, None)
    assert not result.is_valid
    assert result.errors == ["Unknown market"]
    assert result.pnl_points == 3.0
    assert result.pnl_gross_usd is None
    assert result.pnl_net_usd is None


def test_inferred_direction_is_flagged_not_blocking() -> None:
    trade = TradeInput(entry_price=100.0, exit_price=95.0, quantity=1)
    result = calculate_trade(trade, _spec("ES"))
    assert result.is_valid
    assert result.direction_inferred
    assert result.direction is not None
    assert result.direction.value is Direction.SHORT
    assert result.pnl_points == 5.0
    ambiguous = [i for i in result.issues if i.kind is ErrorKind.AMBIGUOUS_DIRECTION]
    assert len(ambiguous) == 1
    assert not ambiguous[0].blocking


def test_resolve_direction_explicit_wins() -> None:
    resolved = resolve_direction(100.0, 90.0, Direction.LONG)
    assert resolved is not None
    assert resolved.value is Direction.LONG
    assert not resolved.is_inferred


def test_resolve_direction_without_exit() -> None:
    assert resolve_direction(100.0, None) is None


def test_zero_risk_gives_zero_ratio() -> None:
    trade = TradeInput(
        entry_price=100.0,
        exit_price=110.0,
        quantity=1,
        direction=Direction.LONG,
        stop_loss=100.0,
        take_profit=120.0,
    )
    result = calculate_trade(trade, _spec("ES"))
    assert result.risk_points == 0.0
    assert result.risk_reward_ratio == 0.0
    assert result.r_multiple == 0.0
    assert math.isfinite(result.risk_reward_ratio)


def test_r_multiple_and_percent() -> None:
    trade = TradeInput(
        entry_price=100.0,
        exit_price=110.0,
        quantity=1,
        direction=Direction.LONG,
        stop_loss=95.0,
    )
    result = calculate_trade(trade, _spec("ES"))
    assert result.r_multiple == 2.0
    assert result.pnl_percent == 10.0


def test_adverse_excursion_points() -> None:
    trade = TradeInput(
        entry_price=100.0,
        exit_price=102.0,
        quantity=1,
        direction=Direction.SHORT,
        max_adverse_price=104.5,
    )
    result = calculate_trade(trade, _spec("ES"))
    assert result.adverse_excursion_points == 4.5


def test_point_rounding_follows_market_precision() -> None:
    trade = TradeInput(entry_price=34000.0, exit_price=34012.0, quantity=1, direction=Direction.LONG)
    result = calculate_trade(trade, _spec("YM"))
    assert result.pnl_points == 12.0
    assert result.pnl_gross_usd == 60.0


def test_percentage_commission_uses_absolute_gross() -> None:
    spec = _custom_spec(CommissionKind.PERCENTAGE, 0.5)
    trade = TradeInput(entry_price=100.0, exit_price=90.0, quantity=10, direction=Direction.LONG)
    result = calculate_trade(trade, spec)
    assert result.pnl_gross_usd == -1000.0
    assert result.commission == 5.0
    assert result.pnl_net_usd == -1005.0


def test_per_share_commission_scales_with_quantity() -> None:
    spec = _custom_spec(CommissionKind.PER_SHARE, 0.01)
    assert compute_commission(spec, 300) == pytest.approx(3.0)


@pytest.mark.parametrize("kind", list(CommissionKind))
def test_net_equals_gross_minus_commission(kind: CommissionKind) -> None:
    spec = _custom_spec(kind, 1.25)
    trade = TradeInput(entry_price=50.0, exit_price=52.5, quantity=3, direction=Direction.LONG)
    result = calculate_trade(trade, spec)
    assert result.pnl_net_usd == pytest.approx(result.pnl_gross_usd - result.commission)


def test_calculation_is_idempotent() -> None:
    trade = TradeInput(
        entry_price=4500.25,
        exit_price=4493.75,
        quantity=3,
        direction=Direction.SHORT,
        stop_loss=4510.0,
        take_profit=4480.0,
        max_favorable_price=4490.0,
    )
    spec = _spec("ES")
    assert calculate_trade(trade, spec) == calculate_trade(trade, spec)


@pytest.mark.parametrize("direction", list(Direction))
def test_implied_exit_round_trips(direction: Direction) -> None:
    trade = TradeInput(entry_price=2034.5, exit_price=2041.3, quantity=1, direction=direction)
    spec = _spec("GC")
    result = calculate_trade(trade, spec)
    implied_exit = trade.entry_price + direction.sign * result.pnl_points
    assert implied_exit == pytest.approx(trade.exit_price, abs=10 ** -spec.precision)


def test_non_trade_input_is_contract_violation() -> None:
    with pytest.raises(ContractViolationError):
        calculate_trade({"entry_price": 1.0}, _spec("ES"))  # type: ignore[arg-type]
    with pytest.raises(TypeError):
        calculate_trade(TradeInput(entry_price=1.0, quantity=1), "ES")  # type: ignore[arg-type]


def test_to_dict_is_json_friendly() -> None:
    trade = TradeInput(entry_price=100.0, exit_price=95.0, quantity=1)
    payload = calculate_trade(trade, _spec("ES")).to_dict()
    assert payload["direction"] == "SHORT"
    assert payload["direction_source"] == "INFERRED"
    assert payload["issues"][0]["kind"] == "AMBIGUOUS_DIRECTION"
