"""Aggregate P&L statistics over a set of journal trades."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Sequence

import pandas as pd  # type: ignore[import-untyped]

from trade_journal.types import TradeCalculationResult, TradeInput

_REQUIRED_COLUMNS = ["entry_price", "pnl"]
_FRAME_RESULT_COLUMNS = ["pnl", "commission", "r_multiple", "efficiency"]
_NUMERIC_COLUMNS = [
    "entry_price",
    "exit_price",
    "quantity",
    "pnl",
    "commission",
    "r_multiple",
    "efficiency",
]
_DATE_COLUMNS = ["entry_date", "exit_date"]


def load_trades_csv(path: Path) -> pd.DataFrame:
    """Load exported trades from CSV and normalize schema."""
    df = pd.read_csv(path)
    return normalize_trades(df)


def normalize_trades(df: pd.DataFrame) -> pd.DataFrame:
    """Validate/normalize a trade frame to the expected columns and dtypes."""
    missing = [col for col in _REQUIRED_COLUMNS if col not in df.columns]
    if missing:
        raise ValueError(f"missing_trade_columns: {','.join(missing)}")

    normalized = df.copy()
    for col in _NUMERIC_COLUMNS:
        if col not in normalized.columns:
            normalized[col] = float("nan")
        normalized[col] = pd.to_numeric(normalized[col], errors="coerce")
    for col in _DATE_COLUMNS:
        if col not in normalized.columns:
            normalized[col] = pd.NaT
        normalized[col] = pd.to_datetime(normalized[col], utc=True, errors="coerce")

    return normalized.dropna(subset=["entry_price"]).reset_index(drop=True)


def build_trade_frame(
    trades: Sequence[TradeInput],
    results: Sequence[TradeCalculationResult],
) -> pd.DataFrame:
    """Frame of calculated trades in the shape ``compute_trade_stats`` expects.

    Gross dollar P&L is used when the market resolved, points otherwise.
    """
    if len(trades) != len(results):
        raise ValueError("trades_and_results_length_mismatch")
    rows = []
    for trade, result in zip(trades, results):
        pnl = result.pnl_gross_usd if result.pnl_gross_usd is not None else result.pnl_points
        rows.append(
            {
                "entry_price": trade.entry_price,
                "exit_price": trade.exit_price,
                "quantity": trade.quantity,
                "pnl": pnl,
                "commission": result.commission or 0.0,
                "r_multiple": result.r_multiple or 0.0,
                "efficiency": result.efficiency_percent,
            }
        )
    columns = ["entry_price", "exit_price", "quantity", *_FRAME_RESULT_COLUMNS]
    return normalize_trades(pd.DataFrame(rows, columns=columns))


def calculate_streaks(pnls: Iterable[float]) -> dict[str, int]:
    """Win/loss streaks over P&Ls in chronological order.

    A breakeven trade resets both streaks.
    """
    win_run = 0
    loss_run = 0
    max_win = 0
    max_loss = 0
    for pnl in pnls:
        if pnl > 0:
            win_run += 1
            loss_run = 0
            max_win = max(max_win, win_run)
        elif pnl < 0:
            loss_run += 1
            win_run = 0
            max_loss = max(max_loss, loss_run)
        else:
            win_run = 0
            loss_run = 0
    return {
        "current_win_streak": win_run,
        "current_loss_streak": loss_run,
        "max_win_streak": max_win,
        "max_loss_streak": max_loss,
    }


def compute_trade_stats(trades: pd.DataFrame) -> dict[str, float | int | None]:
    """Compute journal statistics over closed trades.

    ``pnl`` is taken as gross of the ``commission`` column; ``net_pnl``
    subtracts it. ``profit_factor`` is None when there are wins but no losses.
    """
    frame = normalize_trades(trades)
    closed = frame[frame["exit_price"].notna() & (frame["exit_price"] > 0)].copy()
    if closed.empty:
        return _empty_stats()

    closed["pnl"] = closed["pnl"].fillna(0.0)
    closed["commission"] = closed["commission"].fillna(0.0)

    wins = closed[closed["pnl"] > 0]
    losses = closed[closed["pnl"] < 0]
    breakevens = closed[closed["pnl"] == 0]

    gross_wins = float(wins["pnl"].sum())
    gross_losses = float(abs(losses["pnl"].sum()))
    if gross_losses > 0:
        profit_factor: float | None = gross_wins / gross_losses
    elif gross_wins > 0:
        profit_factor = None
    else:
        profit_factor = 0.0

    total_pnl = float(closed["pnl"].sum())
    total_commission = float(closed["commission"].sum())

    order_key = closed["exit_date"].fillna(closed["entry_date"])
    ordered = closed.assign(_order=order_key).sort_values(
        "_order", kind="stable", na_position="first"
    )
    streaks = calculate_streaks(float(p) for p in ordered["pnl"])

    return {
        "total_trades": int(len(closed)),
        "win_trades": int(len(wins)),
        "loss_trades": int(len(losses)),
        "breakeven_trades": int(len(breakevens)),
        "win_rate_pct": float(len(wins) / len(closed) * 100.0),
        "total_pnl": round(total_pnl, 2),
        "avg_win": round(float(wins["pnl"].mean()), 2) if not wins.empty else 0.0,
        "avg_loss": round(float(abs(losses["pnl"].mean())), 2) if not losses.empty else 0.0,
        "profit_factor": round(profit_factor, 2) if profit_factor is not None else None,
        "max_win": round(float(wins["pnl"].max()), 2) if not wins.empty else 0.0,
        "max_loss": round(float(losses["pnl"].min()), 2) if not losses.empty else 0.0,
        "avg_r_multiple": round(float(closed["r_multiple"].fillna(0.0).mean()), 2),
        "avg_efficiency": round(float(closed["efficiency"].fillna(0.0).mean()), 1),
        "total_commission": round(total_commission, 2),
        "net_pnl": round(total_pnl - total_commission, 2),
        **streaks,
    }


def _empty_stats() -> dict[str, float | int | None]:
    return {
        "total_trades": 0,
        "win_trades": 0,
        "loss_trades": 0,
        "breakeven_trades": 0,
        "win_rate_pct": 0.0,
        "total_pnl": 0.0,
        "avg_win": 0.0,
        "avg_loss": 0.0,
        "profit_factor": 0.0,
        "max_win": 0.0,
        "max_loss": 0.0,
        "avg_r_multiple": 0.0,
        "avg_efficiency": 0.0,
        "total_commission": 0.0,
        "net_pnl": 0.0,
        "current_win_streak": 0,
        "current_loss_streak": 0,
        "max_win_streak": 0,
        "max_loss_streak": 0,
    }
