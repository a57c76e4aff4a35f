"""Rich table formatters for CLI output."""

from datetime import datetime
from decimal import Decimal

from rich.table import Table

from folio.services.accounting.models import PositionSummary
from folio.services.portfolio.models import Portfolio


def create_portfolio_table() -> Table:
    """
    Create a Rich table listing portfolios.

    Returns:
        Configured Rich Table with columns
    """
    table = Table(title="Portfolios", show_header=True, header_style="bold cyan")
    table.add_column("User", style="magenta", justify="right")
    table.add_column("Name", style="green", no_wrap=True)
    table.add_column("Classification", style="yellow")
    return table


def add_portfolio_row(table: Table, portfolio: Portfolio) -> None:
    table.add_row(str(portfolio.user_id), portfolio.name, portfolio.classification.value)


def create_position_table(portfolio: Portfolio, start: datetime | None, end: datetime | None) -> Table:
    """
    Create a Rich table for a position query.

    Args:
        portfolio: Queried portfolio
        start: Inclusive window start (None = beginning of history)
        end: Inclusive window end (None = unbounded)

    Returns:
        Configured Rich Table with columns
    """
    window = f"{_format_bound(start, 'start')} → {_format_bound(end, 'now')}"
    table = Table(title=f"{portfolio.name} positions ({window})", show_header=True, header_style="bold cyan")
    table.add_column("Security", style="cyan", no_wrap=True)
    table.add_column("Name", style="white")
    table.add_column("Position", style="magenta", justify="right")
    table.add_column("Cost", style="yellow", justify="right")
    table.add_column("Total Cost", style="green", justify="right")
    return table


def add_position_row(table: Table, summary: PositionSummary, decimals: int = 4) -> None:
    """
    Add one position row.

    Args:
        table: Table from create_position_table()
        summary: Position to display
        decimals: Places shown for cost figures
    """
    table.add_row(
        str(summary.security),
        summary.security.name,
        _format_decimal(summary.position),
        f"{summary.rounded_cost(decimals):,.{decimals}f}",
        f"{round(summary.total_cost, decimals):,.{decimals}f}",
    )


def _format_decimal(value: Decimal) -> str:
    if value == value.to_integral_value():
        return f"{value:,.0f}"
    return f"{value.normalize():,f}"


def _format_bound(value: datetime | None, default: str) -> str:
    if value is None:
        return default
    if value.time() == datetime.min.time():
        return value.strftime("%Y-%m-%d")
    return value.strftime("%Y-%m-%d %H:%M:%S")
