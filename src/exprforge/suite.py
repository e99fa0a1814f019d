"""Load and run expression suites from YAML files.

A suite lists expressions together with invocation cases and their expected
outcome:

    domain: float
    expressions:
      - name: area
        text: "w * h"
        variables: [w, h]
        cases:
          - args: [2, 3]
            expect: 6
          - args: {h: 3, w: 2}
            expect: 6
          - args: {w: 2}
            error: MissingParameterError

`error` names an exception class; any base class name (e.g. BuildError)
matches too. A quoted `expect` ("0.1") is read as a literal of the
expression's domain.
"""

import logging
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from exprforge.config import EngineConfig
from exprforge.domains import NumericDomain
from exprforge.errors import ExpressionError
from exprforge.expression import Expression

logger = logging.getLogger(__name__)

_MISSING = object()


class SuiteError(ValueError):
    """Malformed suite file."""
    pass


@dataclass
class SuiteCase:
    """One invocation of a suite expression."""

    args: list[Any] | dict[str, Any] = field(default_factory=list)
    expect: Any = _MISSING
    error: str | None = None

    @property
    def has_expectation(self) -> bool:
        return self.expect is not _MISSING


@dataclass
class SuiteExpression:
    name: str
    text: str
    variables: list[str] = field(default_factory=list)
    domain: str | None = None
    cases: list[SuiteCase] = field(default_factory=list)


@dataclass
class Suite:
    path: Path | None
    expressions: list[SuiteExpression]
    domain: str | None = None


@dataclass
class CaseResult:
    """Outcome of a single suite case."""

    expression: str
    index: int
    passed: bool
    message: str
    value: Any = None

    def __str__(self) -> str:
        status = "PASS" if self.passed else "FAIL"
        return f"[{status}] {self.expression}#{self.index}: {self.message}"


# -----------------------------------------------------------------------------
# Loading
# -----------------------------------------------------------------------------


def load_suite(path: Path) -> Suite:
    """Load a suite from a YAML file.

    Raises:
        SuiteError: If the file is not a valid suite
    """
    with open(path) as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise SuiteError(f"{path}: invalid YAML: {e}") from e

    suite = parse_suite(data)
    suite.path = Path(path)
    return suite


def parse_suite(data: Any) -> Suite:
    """Build a Suite from already-loaded YAML data."""
    if not isinstance(data, dict):
        raise SuiteError("Suite must be a mapping with an 'expressions' list")

    raw_expressions = data.get("expressions")
    if not isinstance(raw_expressions, list):
        raise SuiteError("Suite must contain an 'expressions' list")

    expressions = [
        _parse_expression(entry, index) for index, entry in enumerate(raw_expressions)
    ]
    return Suite(path=None, expressions=expressions, domain=data.get("domain"))


def _parse_expression(entry: Any, index: int) -> SuiteExpression:
    if not isinstance(entry, dict):
        raise SuiteError(f"expressions[{index}] must be a mapping")
    if "text" not in entry:
        raise SuiteError(f"expressions[{index}] is missing 'text'")

    variables = entry.get("variables") or []
    if not isinstance(variables, list):
        raise SuiteError(f"expressions[{index}].variables must be a list")

    name = str(entry.get("name", f"expression{index}"))
    cases = []
    for case_index, raw_case in enumerate(entry.get("cases") or []):
        if not isinstance(raw_case, dict):
            raise SuiteError(f"{name}.cases[{case_index}] must be a mapping")
        args = raw_case.get("args", [])
        if not isinstance(args, (list, dict)):
            raise SuiteError(f"{name}.cases[{case_index}].args must be a list or mapping")
        cases.append(
            SuiteCase(
                args=args,
                expect=raw_case.get("expect", _MISSING),
                error=raw_case.get("error"),
            )
        )

    return SuiteExpression(
        name=name,
        text=str(entry["text"]),
        variables=[str(v) for v in variables],
        domain=entry.get("domain"),
        cases=cases,
    )


# -----------------------------------------------------------------------------
# Running
# -----------------------------------------------------------------------------


def _error_matches(error: Exception, expected: str) -> bool:
    return any(cls.__name__ == expected for cls in type(error).__mro__)


def _values_match(domain: NumericDomain, actual: Any, expected: Any) -> bool:
    if isinstance(actual, bool) or isinstance(expected, bool):
        return actual == expected
    # Quoted expectations are parsed like literals, so "0.1" stays exact
    if isinstance(expected, str) and not isinstance(actual, str):
        try:
            expected = domain.parse_argument(expected)
        except (ValueError, ExpressionError):
            return False
    if isinstance(actual, float) or isinstance(expected, float):
        try:
            return math.isclose(float(actual), float(expected), rel_tol=1e-9, abs_tol=1e-12)
        except (TypeError, ValueError, OverflowError):
            return False
    try:
        expected = domain.coerce(expected)
    except (TypeError, ArithmeticError):
        pass
    return actual == expected


def run_case(expr: Expression, case: SuiteCase) -> tuple[bool, str, Any]:
    """Invoke one case and compare the outcome with its expectation."""
    try:
        if isinstance(case.args, dict):
            value = expr.invoke_named(case.args)
        else:
            value = expr.invoke_positional(case.args)
    except ExpressionError as e:
        if case.error and _error_matches(e, case.error):
            return True, f"raised {type(e).__name__} as expected", None
        return False, f"unexpected {type(e).__name__}: {e}", None

    if case.error:
        return False, f"expected {case.error}, got {value!r}", value
    if case.has_expectation and not _values_match(expr.domain, value, case.expect):
        return False, f"expected {case.expect!r}, got {value!r}", value
    return True, f"= {value}", value


def run_suite(suite: Suite, config: EngineConfig | None = None) -> list[CaseResult]:
    """Build every suite expression and run its cases."""
    config = config or EngineConfig()
    results: list[CaseResult] = []

    for entry in suite.expressions:
        try:
            expr = Expression(
                entry.text,
                *entry.variables,
                domain=entry.domain or suite.domain,
                config=config,
            )
        except (ExpressionError, ValueError) as e:
            for index, case in enumerate(entry.cases or [SuiteCase()]):
                passed = bool(case.error) and _error_matches(e, case.error)
                message = (
                    f"build raised {type(e).__name__} as expected"
                    if passed
                    else f"build failed: {type(e).__name__}: {e}"
                )
                results.append(CaseResult(entry.name, index, passed, message))
            continue

        for index, case in enumerate(entry.cases):
            passed, message, value = run_case(expr, case)
            results.append(CaseResult(entry.name, index, passed, message, value))

    for result in results:
        if not result.passed:
            logger.warning("Suite case failed: %s", result)

    return results
