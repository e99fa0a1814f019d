"""Expression CLI commands — eval, check and functions."""

import click

from exprforge.config import EngineConfig
from exprforge.domains import DOMAIN_NAMES, get_domain
from exprforge.errors import ExpressionError, ExpressionSyntaxError
from exprforge.expression import Expression
from exprforge.expressions.builtins import BUILTINS
from exprforge.expressions.functions import FunctionCategory

domain_option = click.option(
    "--domain",
    "-d",
    type=click.Choice(DOMAIN_NAMES),
    default=None,
    help="Numeric domain (default: EXPRFORGE_DOMAIN or float).",
)


def _fail(message: str) -> None:
    click.echo(click.style(f"Error: {message}", fg="red"), err=True)
    raise SystemExit(1)


def _split_assignment(assignment: str) -> tuple[str, str]:
    name, sep, value = assignment.partition("=")
    if not sep or not name.strip():
        raise click.BadParameter(
            f"expected NAME=VALUE, got {assignment!r}", param_hint="ASSIGNMENTS"
        )
    return name.strip(), value


def _show_syntax_error(text: str, error: ExpressionSyntaxError) -> None:
    lines = text.splitlines() or [""]
    line = lines[min(error.line, len(lines)) - 1]
    click.echo(f"  {line}", err=True)
    click.echo("  " + " " * (error.column - 1) + click.style("^", fg="red"), err=True)


@click.command("eval")
@click.argument("text")
@click.argument("assignments", nargs=-1)
@domain_option
def eval_cmd(text: str, assignments: tuple[str, ...], domain: str | None):
    """Evaluate TEXT with NAME=VALUE assignments.

    Variables are declared in the order the assignments are given.
    """
    try:
        config = EngineConfig.from_env()
        numeric_domain = get_domain(domain or config.domain, config)
    except ValueError as e:
        _fail(str(e))

    pairs = [_split_assignment(a) for a in assignments]
    names = [name for name, _ in pairs]

    try:
        expr = Expression(text, *names, domain=numeric_domain, config=config)
    except ExpressionSyntaxError as e:
        _show_syntax_error(text, e)
        _fail(str(e))
    except ExpressionError as e:
        _fail(str(e))

    values = {}
    for name, raw in pairs:
        try:
            values[name] = numeric_domain.parse_argument(raw)
        except (ValueError, ExpressionError) as e:
            _fail(f"Cannot parse value for '{name}': {e}")

    try:
        result = expr.invoke_named(values)
    except ExpressionError as e:
        _fail(str(e))

    click.echo(str(result).lower() if isinstance(result, bool) else str(result))


@click.command()
@click.argument("text")
@click.option("--var", "-V", "variables", multiple=True, help="Declare a variable (repeatable).")
@domain_option
def check(text: str, variables: tuple[str, ...], domain: str | None):
    """Compile TEXT without evaluating it."""
    try:
        config = EngineConfig.from_env()
        expr = Expression(text, *variables, domain=domain, config=config)
    except ExpressionSyntaxError as e:
        _show_syntax_error(text, e)
        _fail(str(e))
    except (ExpressionError, ValueError) as e:
        _fail(str(e))

    click.echo(
        click.style("OK", fg="green", bold=True)
        + f": {expr.evaluator.result_type.value} expression over "
        + f"{expr.arity} variable(s) in the {expr.domain.name} domain"
    )


@click.command()
@click.option(
    "--category",
    type=click.Choice([c.value for c in FunctionCategory]),
    default=None,
    help="Only list functions in this category.",
)
def functions(category: str | None):
    """List the builtin functions and constants."""
    if category:
        defs = BUILTINS.list_by_category(FunctionCategory(category))
    else:
        defs = BUILTINS.list_all()

    for func_def in sorted(defs, key=lambda f: (f.category.value, f.name)):
        marker = " (real)" if func_def.requires_real else ""
        click.echo(f"  {func_def.signature():<22} {func_def.description}{marker}")

    if category is None:
        click.echo("\nConstants:")
        for constant in BUILTINS.list_constants():
            click.echo(f"  {constant.name:<22} {constant.description}")
