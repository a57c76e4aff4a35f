"""Commands __init__ - exports all commands."""

from folio.cli.commands.ledger import cash_command, portfolios_command, position_command

__all__ = ["cash_command", "portfolios_command", "position_command"]
