"""Tick-grid helpers for prices."""

from __future__ import annotations

from trade_journal.config import get_settings
from trade_journal.types import MarketSpecification


def is_valid_price_increment(
    price: float,
    spec: MarketSpecification,
    tolerance: float | None = None,
) -> bool:
    """Check whether a price sits on the market's tick grid."""
    tol = get_settings().price_tick_tolerance if tolerance is None else tolerance
    remainder = price % spec.tick_size
    return abs(remainder) < tol or abs(remainder - spec.tick_size) < tol


def round_to_tick(price: float, spec: MarketSpecification) -> float:
    """Round a price to the nearest valid tick."""
    ticks = round(price / spec.tick_size)
    return round(ticks * spec.tick_size, spec.precision)


def format_price(price: float, spec: MarketSpecification) -> str:
    return f"{price:.{spec.precision}f}"
