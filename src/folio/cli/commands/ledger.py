"""Ledger query commands - load a YAML ledger and run accounting queries."""

import sys
from pathlib import Path

import click
from rich.console import Console

from folio.cli.ui.formatters import (
    add_portfolio_row,
    add_position_row,
    create_portfolio_table,
    create_position_table,
)
from folio.services.accounting.instants import to_instant
from folio.services.portfolio.loader import load_ledger_yaml
from folio.services.portfolio.models import Portfolio
from folio.services.portfolio.service import PortfolioService
from folio.services.portfolio.validation import normalize_name
from folio.system.config import SystemConfig, get_system_config

console = Console()

LEDGER_ARGUMENT = click.argument("ledger_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))


def _load(ledger_file: Path) -> tuple[PortfolioService, SystemConfig]:
    config = get_system_config()
    service = PortfolioService(config=config.accounting)
    load_ledger_yaml(ledger_file, service)
    return service, config


def _select_portfolio(service: PortfolioService, name: str, user_id: int | None) -> Portfolio:
    if user_id is not None:
        portfolio = service.find_portfolio(user_id, name)
        if portfolio is None:
            raise click.ClickException(f"No portfolio named '{name}' for user {user_id}")
        return portfolio

    key = normalize_name(name)
    matches = [p for p in service.list_portfolios() if normalize_name(p.name) == key]
    if not matches:
        raise click.ClickException(f"No portfolio named '{name}'")
    if len(matches) > 1:
        raise click.ClickException(f"Portfolio name '{name}' is ambiguous; pass --user")
    return matches[0]


def _parse_bound(ctx: click.Context, param: click.Parameter, value: str | None):
    if value is None:
        return None
    instant = to_instant(value)
    if instant is None:
        raise click.BadParameter(f"'{value}' is not a date or date-time (e.g. 2012-3-7 or '2012-3-7 24:00:00')")
    return instant


@click.command("portfolios")
@LEDGER_ARGUMENT
@click.option("--user", "-u", "user_id", type=int, help="Only list this user's portfolios")
def portfolios_command(ledger_file: Path, user_id: int | None):
    """
    List portfolios in a ledger file.

    \b
    Example:
        folio portfolios ledger.yaml
        folio portfolios ledger.yaml --user 1
    """
    try:
        service, _ = _load(ledger_file)
    except Exception as e:
        console.print(f"[bold red]✗ Failed to load ledger:[/bold red] {e}")
        sys.exit(1)

    portfolios = service.list_portfolios(user_id=user_id)
    if not portfolios:
        console.print("[yellow]No portfolios found[/yellow]")
        return

    table = create_portfolio_table()
    for portfolio in portfolios:
        add_portfolio_row(table, portfolio)
    console.print(table)


@click.command("position")
@LEDGER_ARGUMENT
@click.option("--portfolio", "-p", "portfolio_name", required=True, help="Portfolio name")
@click.option("--user", "-u", "user_id", type=int, help="Owning user id (required if the name is ambiguous)")
@click.option("--from", "from_", callback=_parse_bound, help="Inclusive window start")
@click.option("--till", callback=_parse_bound, help="Inclusive window end ('2012-3-7 24:00:00' = end of that day)")
def position_command(ledger_file: Path, portfolio_name: str, user_id: int | None, from_, till):
    """
    Show positions and moving-average cost over a time window.

    \b
    Example:
        folio position ledger.yaml -p "Mainland Shares" --till "2012-3-7 24:00:00"
    """
    try:
        service, config = _load(ledger_file)
    except Exception as e:
        console.print(f"[bold red]✗ Failed to load ledger:[/bold red] {e}")
        sys.exit(1)

    portfolio = _select_portfolio(service, portfolio_name, user_id)
    positions = service.position(portfolio.portfolio_id, from_=from_, till=till)

    if not positions:
        console.print(f"[yellow]No positions in {portfolio.name} for this window[/yellow]")
        return

    table = create_position_table(portfolio, from_, till)
    for summary in positions.values():
        add_position_row(table, summary, decimals=config.accounting.display_decimals)
    console.print(table)


@click.command("cash")
@LEDGER_ARGUMENT
@click.option("--portfolio", "-p", "portfolio_name", required=True, help="Portfolio name")
@click.option("--user", "-u", "user_id", type=int, help="Owning user id (required if the name is ambiguous)")
@click.option("--as-of", "as_of", callback=_parse_bound, help="Include cash entries up to this instant")
def cash_command(ledger_file: Path, portfolio_name: str, user_id: int | None, as_of):
    """
    Show the cash balance of a portfolio.

    \b
    Example:
        folio cash ledger.yaml -p "Mainland Shares" --as-of 2012-3-7
    """
    try:
        service, config = _load(ledger_file)
    except Exception as e:
        console.print(f"[bold red]✗ Failed to load ledger:[/bold red] {e}")
        sys.exit(1)

    portfolio = _select_portfolio(service, portfolio_name, user_id)
    balance = service.cash(portfolio.portfolio_id, as_of)

    label = as_of.strftime("%Y-%m-%d %H:%M:%S") if as_of is not None else "now"
    decimals = config.accounting.display_decimals
    console.print(f"[cyan]{portfolio.name}[/cyan] cash as of {label}: [bold]{round(balance, decimals):,.{decimals}f}[/bold]")
