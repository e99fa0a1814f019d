"""The user-facing Expression handle and its argument binder."""

from __future__ import annotations

from typing import Generic, Mapping, Sequence, TypeVar

from exprforge.config import EngineConfig
from exprforge.domains import NumericDomain
from exprforge.errors import (
    ArityError,
    DomainError,
    EvaluationError,
    MissingParameterError,
    UnexpectedParametersError,
)
from exprforge.expressions.compiler import Evaluator, compile_expression
from exprforge.expressions.functions import FunctionRegistry

T = TypeVar("T")


class Expression(Generic[T]):
    """A compiled expression taking a fixed list of named arguments.

    Construction parses and compiles the text; it either succeeds with a
    ready-to-call handle or raises a BuildError.

    Usage:
        expr = Expression("a + b * 2", "a", "b")
        expr.invoke(3, 4)                    # 11.0
        expr.invoke_named({"b": 4, "a": 3})  # 11.0
        str(expr)                            # "a + b * 2"
    """

    __slots__ = ("_text", "_variables", "_evaluator")

    def __init__(
        self,
        text: str,
        *variables: str,
        domain: NumericDomain | str | None = None,
        registry: FunctionRegistry | None = None,
        config: EngineConfig | None = None,
    ):
        if not isinstance(text, str):
            raise TypeError(f"Expression text must be a string, got {type(text).__name__}")

        # Expression("x + y", ["x", "y"]) is accepted as well
        if len(variables) == 1 and isinstance(variables[0], (list, tuple)):
            variables = tuple(variables[0])

        evaluator = compile_expression(text, variables, domain, registry, config)

        self._text = text
        self._variables: tuple[str, ...] = tuple(variables)
        self._evaluator = evaluator

    def __str__(self) -> str:
        return self._text

    def __repr__(self) -> str:
        return (
            f"Expression({self._text!r}, variables={list(self._variables)}, "
            f"domain={self.domain.name!r})"
        )

    @property
    def text(self) -> str:
        return self._text

    @property
    def variables(self) -> tuple[str, ...]:
        return self._variables

    @property
    def arity(self) -> int:
        return len(self._variables)

    @property
    def domain(self) -> NumericDomain:
        return self._evaluator.domain

    @property
    def evaluator(self) -> Evaluator:
        return self._evaluator

    # -------------------------------------------------------------------------
    # Invocation
    # -------------------------------------------------------------------------

    def invoke(self, *args: T) -> T:
        """Evaluate with arguments in declared variable order.

        If the argument order is not known, use invoke_named() instead.

        Raises:
            ArityError: If the number of arguments differs from the number
                of declared variables
        """
        return self.invoke_positional(args)

    def invoke_positional(self, args: Sequence[T]) -> T:
        """Evaluate with a sequence of arguments in declared variable order."""
        if len(args) != len(self._variables):
            raise ArityError(len(self._variables), len(args))

        domain = self._evaluator.domain
        values = []
        for name, value in zip(self._variables, args):
            try:
                values.append(domain.coerce(value))
            except TypeError as e:
                raise EvaluationError(f"Argument '{name}': {e}") from None
            except ArithmeticError as e:
                raise DomainError(f"Argument '{name}': {e}") from None

        return self._evaluator.evaluate(values)

    def invoke_named(self, args: Mapping[str, T]) -> T:
        """Evaluate with arguments keyed by variable name.

        Every declared variable must be present and no other keys may be.
        The first missing name (in declared order) is reported before any
        unexpected names; unexpected names are reported all at once.
        The mapping itself is not modified.

        Raises:
            MissingParameterError: A declared variable has no entry
            UnexpectedParametersError: Entries remain for undeclared names
        """
        remaining = dict(args)
        ordered = []

        for name in self._variables:
            if name not in remaining:
                raise MissingParameterError(name)
            ordered.append(remaining.pop(name))

        if remaining:
            raise UnexpectedParametersError(list(remaining))

        return self.invoke_positional(ordered)

    def __call__(self, /, *args: T, **kwargs: T) -> T:
        if args and kwargs:
            raise TypeError("Pass arguments either positionally or by name, not both")
        if kwargs:
            return self.invoke_named(kwargs)
        return self.invoke_positional(args)
