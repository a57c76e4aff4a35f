"""Folio CLI main entry point."""

from pathlib import Path
from typing import Optional

import click

from folio import __version__
from folio.cli.commands import cash_command, portfolios_command, position_command
from folio.system import LoggerFactory
from folio.system.config import get_system_config, reload_system_config


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--config",
    "-c",
    "config_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="System configuration file (YAML). Defaults to $FOLIO_CONFIG or config/folio.yaml",
)
@click.option(
    "--log-level",
    "-l",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Set logging level",
)
def main(config_file: Optional[Path], log_level: Optional[str]):
    """Folio - Portfolio Accounting"""
    if config_file is None and log_level is None:
        return

    system_config = reload_system_config(config_file) if config_file else get_system_config()
    if log_level:
        system_config.logging.level = log_level.upper()
    LoggerFactory.configure(system_config.logging.to_logger_config())


# Register commands
main.add_command(portfolios_command)
main.add_command(position_command)
main.add_command(cash_command)


if __name__ == "__main__":
    main()
