"""CLI UI components - Rich table formatters."""

from folio.cli.ui.formatters import (
    add_portfolio_row,
    add_position_row,
    create_portfolio_table,
    create_position_table,
)

__all__ = [
    "add_portfolio_row",
    "add_position_row",
    "create_portfolio_table",
    "create_position_table",
]
