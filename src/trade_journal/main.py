"""Command line interface for the trade journal calculator."""

import json
import sys
from pathlib import Path

import click

from trade_journal import __version__
from trade_journal.analytics.stats import compute_trade_stats, load_trades_csv
from trade_journal.config import get_settings
from trade_journal.forms.parsing import calculate_from_form
from trade_journal.markets.catalog import list_market_specifications
from trade_journal.risk.sizing import compute_margin_requirement
from trade_journal.types import TradeCalculationResult
from trade_journal.utils.logging import get_logger, setup_logging


@click.group(invoke_without_command=True)
@click.option("--version", "-v", is_flag=True, help="Show version")
@click.pass_context
def cli(ctx: click.Context, version: bool) -> None:
    """Trade journal - P&L, risk/reward and efficiency for futures trades."""
    if version:
        click.echo(f"trade-journal version {__version__}")
        return

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


@cli.command()
def markets() -> None:
    """List supported markets."""
    setup_logging()
    click.echo(
        f"{'SYMBOL':<7}{'NAME':<28}{'TICK':>8}{'POINT $':>10}{'COMM':>8}{'MARGIN':>10}"
    )
    for spec in list_market_specifications():
        margin = compute_margin_requirement(1, spec)
        margin_text = f"{margin:>10,.0f}" if margin is not None else f"{'-':>10}"
        click.echo(
            f"{spec.symbol:<7}{spec.name:<28}{spec.tick_size:>8g}"
            f"{spec.point_value:>10g}{spec.default_commission.amount:>8.2f}{margin_text}"
        )


@cli.command()
@click.option("--symbol", "-s", required=True, help="Market symbol, e.g. ES or 'ES 12-24'")
@click.option("--entry", "entry_price", required=True, help="Entry price")
@click.option("--exit", "exit_price", default=None, help="Exit price (omit for open trades)")
@click.option("--qty", "quantity", default="1", show_default=True, help="Contracts")
@click.option(
    "--direction",
    "-d",
    type=click.Choice(["long", "short"], case_sensitive=False),
    default=None,
    help="Trade direction (inferred from prices when omitted)",
)
@click.option("--stop", "stop_loss", default=None, help="Stop loss price")
@click.option("--target", "take_profit", default=None, help="Take profit price")
@click.option("--mfe", "max_favorable_price", default=None, help="Best price reached")
@click.option("--mae", "max_adverse_price", default=None, help="Worst price reached")
@click.option("--json", "as_json", is_flag=True, default=False, help="Print JSON")
def calc(as_json: bool, **form: str | None) -> None:
    """Calculate P&L and risk metrics for one trade."""
    setup_logging()
    logger = get_logger("trade_journal.main")

    result = calculate_from_form(form)
    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
    else:
        _echo_result(result)

    logger.info("calc_completed", symbol=form.get("symbol"), is_valid=result.is_valid)
    if not result.is_valid:
        sys.exit(1)


@cli.command()
@click.argument("csv_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--json", "as_json", is_flag=True, default=False, help="Print JSON")
def stats(csv_path: Path, as_json: bool) -> None:
    """Aggregate statistics for trades exported to CSV."""
    setup_logging()
    logger = get_logger("trade_journal.main")

    try:
        trades = load_trades_csv(csv_path)
    except ValueError as e:
        logger.error("trades_csv_invalid", path=str(csv_path), error=str(e))
        sys.exit(1)

    summary = compute_trade_stats(trades)
    if as_json:
        click.echo(json.dumps(summary, indent=2))
        return
    for key, value in summary.items():
        click.echo(f"{key:<22}{'n/a' if value is None else value}")


@cli.command()
def status() -> None:
    """Show the configuration summary."""
    setup_logging()
    settings = get_settings()

    click.echo("=" * 50)
    click.echo("Trade Journal - Status")
    click.echo("=" * 50)
    click.echo()

    click.echo("[Markets]")
    click.echo(f"   Loaded: {len(list_market_specifications())}")
    click.echo()

    click.echo("[Rounding]")
    click.echo(f"   Money decimals: {settings.money_decimals}")
    click.echo(f"   Ratio decimals: {settings.ratio_decimals}")
    click.echo(f"   Efficiency decimals: {settings.efficiency_decimals}")
    click.echo(f"   Default point precision: {settings.default_precision}")
    click.echo()

    click.echo("[Sizing]")
    click.echo(f"   Default account balance: {settings.default_account_balance:,.2f}")
    click.echo()

    click.echo("[Logging]")
    click.echo(f"   Log level: {settings.log_level}")
    click.echo(f"   Log format: {settings.log_format.value}")
    click.echo()
    click.echo("=" * 50)


def _echo_result(result: TradeCalculationResult) -> None:
    if result.direction is not None:
        marker = " (inferred)" if result.direction.is_inferred else ""
        click.echo(f"Direction:      {result.direction.value.value}{marker}")
    rows = [
        ("P&L points", result.pnl_points),
        ("P&L gross $", result.pnl_gross_usd),
        ("Commission $", result.commission),
        ("P&L net $", result.pnl_net_usd),
        ("P&L %", result.pnl_percent),
        ("Risk points", result.risk_points),
        ("Reward points", result.reward_points),
        ("Risk:reward", result.risk_reward_ratio),
        ("R multiple", result.r_multiple),
        ("Efficiency %", result.efficiency_percent),
        ("MAE points", result.adverse_excursion_points),
    ]
    for label, value in rows:
        if value is not None:
            click.echo(f"{label + ':':<16}{value}")

    if result.errors:
        click.echo()
        click.echo("[ERROR] Incomplete trade:")
        for error in result.errors:
            click.echo(f"   - {error}")
    warnings = [issue.message for issue in result.issues if not issue.blocking]
    for warning in warnings:
        click.echo(f"[WARN] {warning}")


# Support python -m trade_journal.main
if __name__ == "__main__":
    cli()
