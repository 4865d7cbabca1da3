from pathlib import Path

from click.testing import CliRunner

from trade_journal import __version__
from trade_journal.main import cli


def test_cli_version() -> None:
    result = CliRunner().invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_cli_markets_lists_table() -> None:
    result = CliRunner().invoke(cli, ["markets"])
    assert result.exit_code == 0
    assert "ES" in result.output
    assert "E-mini NASDAQ-100" in result.output
    assert "MARGIN" in result.output
    assert "13,200" in result.output


def test_cli_calc_smoke() -> None:
    runner = CliRunner()
    result = runner.invoke(
        cli,
        ["calc", "-s", "ES", "--entry", "4500", "--exit", "4510", "--qty", "2", "-d", "long"],
    )
    assert result.exit_code == 0
    assert "995.8" in result.output


def test_cli_calc_json() -> None:
    runner = CliRunner()
    result = runner.invoke(
        cli,
        ["calc", "-s", "NQ", "--entry", "15000", "--exit", "15020", "--json"],
    )
    assert result.exit_code == 0
    assert '"direction": "LONG"' in result.output
    assert '"direction_source": "INFERRED"' in result.output


def test_cli_calc_invalid_exits_nonzero() -> None:
    result = CliRunner().invoke(cli, ["calc", "-s", "ZZZ", "--entry", "100", "--qty", "0"])
    assert result.exit_code == 1
    assert "Unknown market" in result.output


def test_cli_stats(tmp_path: Path) -> None:
    path = tmp_path / "trades.csv"
    path.write_text(
        "entry_price,exit_price,pnl,commission\n4500,4510,1000,4.2\n4500,4495,-500,4.2\n",
        encoding="utf-8",
    )
    result = CliRunner().invoke(cli, ["stats", str(path), "--json"])
    assert result.exit_code == 0
    assert '"total_trades": 2' in result.output


def test_cli_status() -> None:
    result = CliRunner().invoke(cli, ["status"])
    assert result.exit_code == 0
    assert "Trade Journal - Status" in result.output
