"""validata CLI entry point."""

import logging

import click


@click.group()
@click.option(
    "--log-level",
    default="WARNING",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Logging level for validata's loggers.",
)
def cli(log_level: str):
    """validata: rule-based filtering and validation CLI."""
    logging.basicConfig(level=log_level.upper(), format="%(levelname)s %(name)s: %(message)s")


# Register subcommands
from validata.cli.check_cmd import check  # noqa: E402
from validata.cli.rules_cmd import list_functions, rules  # noqa: E402

cli.add_command(check)
cli.add_command(rules)
cli.add_command(list_functions)
