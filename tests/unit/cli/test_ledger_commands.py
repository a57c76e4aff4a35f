"""
Unit tests for folio.cli ledger commands.

Tests cover:
- portfolios / position / cash output for the sample ledger
- Portfolio selection by name and --user
- Bound parsing and error handling
- The main group's --config and --log-level options
"""

from pathlib import Path

import pytest
from click.testing import CliRunner

from folio.cli.commands.ledger import cash_command, portfolios_command, position_command
from folio.cli.main import main
from folio.system import LoggerFactory
from folio.system.config import reload_system_config

SHIPPED_CONFIG = Path(__file__).parents[3] / "config" / "folio.yaml"


@pytest.fixture
def cli_runner():
    """Fixture providing Click CLI test runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def shipped_config(monkeypatch):
    """Pin the system config to the repository's config file."""
    monkeypatch.setenv("FOLIO_CONFIG", str(SHIPPED_CONFIG))
    reload_system_config()
    yield
    monkeypatch.delenv("FOLIO_CONFIG")
    reload_system_config()
    LoggerFactory.reset()


class TestPortfoliosCommand:
    """Test the portfolios command."""

    def test_lists_all(self, cli_runner, sample_ledger_path):
        result = cli_runner.invoke(portfolios_command, [str(sample_ledger_path)])

        assert result.exit_code == 0
        assert "Mainland Shares" in result.output
        assert "Hongkong Shares" in result.output
        assert "HTM" in result.output

    def test_filter_by_user(self, cli_runner, sample_ledger_path):
        result = cli_runner.invoke(portfolios_command, [str(sample_ledger_path), "--user", "2"])

        assert result.exit_code == 0
        assert "Hongkong Shares" not in result.output
        assert "HTM" in result.output

    def test_no_portfolios(self, cli_runner, sample_ledger_path):
        result = cli_runner.invoke(portfolios_command, [str(sample_ledger_path), "--user", "99"])

        assert result.exit_code == 0
        assert "No portfolios found" in result.output

    def test_malformed_ledger(self, cli_runner, tmp_path):
        ledger = tmp_path / "bad.yaml"
        ledger.write_text("- not\n- a mapping\n")

        result = cli_runner.invoke(portfolios_command, [str(ledger)])

        assert result.exit_code == 1
        assert "Failed to load ledger" in result.output

    def test_missing_file(self, cli_runner, tmp_path):
        result = cli_runner.invoke(portfolios_command, [str(tmp_path / "missing.yaml")])

        assert result.exit_code == 2


class TestPositionCommand:
    """Test the position command."""

    def test_moving_average(self, cli_runner, sample_ledger_path):
        result = cli_runner.invoke(
            position_command,
            [str(sample_ledger_path), "-p", "Hongkong Shares", "--till", "2012-3-7 24:00:00"],
        )

        assert result.exit_code == 0
        assert "hk:00883" in result.output
        assert "25.6317" in result.output
        assert "hk:03968" not in result.output

    def test_ambiguous_name_needs_user(self, cli_runner, sample_ledger_path):
        result = cli_runner.invoke(position_command, [str(sample_ledger_path), "-p", "Mainland Shares"])

        assert result.exit_code == 1
        assert "ambiguous" in result.output

    def test_with_user(self, cli_runner, sample_ledger_path):
        result = cli_runner.invoke(
            position_command,
            [str(sample_ledger_path), "-p", "mainland shares", "-u", "1", "--till", "2012-3-5 24:00:00"],
        )

        assert result.exit_code == 0
        assert "sh:600036" in result.output
        assert "sz:000651" in result.output
        assert "20.2150" in result.output

    def test_empty_window(self, cli_runner, sample_ledger_path):
        result = cli_runner.invoke(
            position_command,
            [str(sample_ledger_path), "-p", "Hongkong Shares", "--from", "2012-3-6", "--till", "2012-3-6"],
        )

        assert result.exit_code == 0
        assert "No positions in Hongkong Shares" in result.output

    def test_unknown_portfolio(self, cli_runner, sample_ledger_path):
        result = cli_runner.invoke(position_command, [str(sample_ledger_path), "-p", "Nope"])

        assert result.exit_code == 1
        assert "No portfolio named 'Nope'" in result.output

    def test_bad_bound(self, cli_runner, sample_ledger_path):
        result = cli_runner.invoke(
            position_command,
            [str(sample_ledger_path), "-p", "Hongkong Shares", "--till", "someday"],
        )

        assert result.exit_code == 2
        assert "someday" in result.output


class TestCashCommand:
    """Test the cash command."""

    def test_cash_as_of(self, cli_runner, sample_ledger_path):
        result = cli_runner.invoke(
            cash_command,
            [str(sample_ledger_path), "-p", "Mainland Shares", "-u", "1", "--as-of", "2012-3-6 24:00:00"],
        )

        assert result.exit_code == 0
        assert "95,000.0000" in result.output
        assert "2012-03-07 00:00:00" in result.output

    def test_cash_now(self, cli_runner, sample_ledger_path):
        result = cli_runner.invoke(cash_command, [str(sample_ledger_path), "-p", "Mainland Shares", "-u", "2"])

        assert result.exit_code == 0
        assert "2,500.5000" in result.output
        assert "as of now" in result.output


class TestMainGroup:
    """Test the folio command group."""

    def test_help_lists_commands(self, cli_runner):
        result = cli_runner.invoke(main, ["--help"])

        assert result.exit_code == 0
        for command in ("portfolios", "position", "cash"):
            assert command in result.output

    def test_config_option(self, cli_runner, sample_ledger_path, tmp_path):
        config_file = tmp_path / "folio.yaml"
        config_file.write_text("accounting:\n  display_decimals: 2\nlogging:\n  level: WARNING\n")

        result = cli_runner.invoke(
            main,
            ["-c", str(config_file), "cash", str(sample_ledger_path), "-p", "Hongkong Shares"],
        )

        assert result.exit_code == 0
        assert "50,000.00" in result.output
        assert "50,000.0000" not in result.output

    def test_log_level_option(self, cli_runner, sample_ledger_path):
        result = cli_runner.invoke(
            main,
            ["--log-level", "error", "portfolios", str(sample_ledger_path)],
        )

        assert result.exit_code == 0
        assert LoggerFactory.get_config().level == "ERROR"
