"""Suite CLI command — run expression suites from YAML."""

from pathlib import Path

import click

from exprforge.config import EngineConfig
from exprforge.suite import SuiteError, load_suite, run_suite


@click.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--quiet", "-q", is_flag=True, default=False, help="Only report failures.")
def run(path: Path, quiet: bool):
    """Run the expression suite in PATH."""
    try:
        suite = load_suite(path)
    except SuiteError as e:
        click.echo(click.style(f"Error: {e}", fg="red"), err=True)
        raise SystemExit(1)

    results = run_suite(suite, EngineConfig.from_env())
    failures = [r for r in results if not r.passed]

    for result in results:
        if result.passed and quiet:
            continue
        colour = "green" if result.passed else "red"
        click.echo(click.style(str(result), fg=colour))

    if failures:
        click.echo(
            click.style(
                f"\n{len(failures)} of {len(results)} case(s) failed",
                fg="red",
                bold=True,
            )
        )
        raise SystemExit(1)

    click.echo(click.style(f"\nAll {len(results)} case(s) passed.", fg="green", bold=True))
