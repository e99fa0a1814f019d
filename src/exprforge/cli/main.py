"""exprforge CLI entry point."""

import logging

import click


@click.group()
@click.option("--verbose", "-v", is_flag=True, default=False, help="Enable debug logging.")
def cli(verbose: bool):
    """exprforge — compile and evaluate expressions."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


# Register subcommands
from exprforge.cli.expression_cmd import check, eval_cmd, functions  # noqa: E402
from exprforge.cli.suite_cmd import run  # noqa: E402

cli.add_command(eval_cmd)
cli.add_command(check)
cli.add_command(functions)
cli.add_command(run)
