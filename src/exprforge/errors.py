"""Error taxonomy for exprforge.

Every error raised by the library derives from ExpressionError:

- BuildError: raised while constructing an Expression (nothing usable exists)
- ArityError: positional invocation with the wrong number of arguments
- BindError: named invocation whose keys don't match the declared variables
- EvaluationError: runtime failure inside the evaluator (DomainError for
  numeric domain violations such as division by zero)
"""

from typing import Sequence


class ExpressionError(Exception):
    """Base class for all expression errors."""
    pass


# -----------------------------------------------------------------------------
# Build errors
# -----------------------------------------------------------------------------


class BuildError(ExpressionError):
    """Expression could not be built."""
    pass


class InvalidDeclarationError(BuildError):
    """A declared variable name is malformed, reserved or duplicated."""

    def __init__(self, name: object, reason: str):
        self.name = name
        self.reason = reason
        super().__init__(f"Invalid variable declaration {name!r}: {reason}")


class ExpressionSyntaxError(BuildError):
    """Malformed expression text."""

    def __init__(self, message: str, position: int, line: int = 1, column: int = 1):
        self.message = message
        self.position = position
        self.line = line
        self.column = column
        super().__init__(f"{message} at line {line}, column {column}")


class LexerError(ExpressionSyntaxError):
    """Error during lexical analysis."""
    pass


class ParseError(ExpressionSyntaxError):
    """Error during parsing."""
    pass


class UnknownIdentifierError(BuildError):
    """Identifier is neither a declared variable nor a builtin."""

    def __init__(self, name: str, position: int | None = None):
        self.name = name
        self.position = position
        where = f" at position {position}" if position is not None else ""
        super().__init__(f"Unknown identifier '{name}'{where}")


class ExpressionTypeError(BuildError):
    """Expression cannot be typed for the target domain."""

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(detail)


class LimitExceededError(BuildError):
    """Expression nesting exceeds the configured limit."""

    def __init__(self, limit: int, depth: int):
        self.limit = limit
        self.depth = depth
        super().__init__(f"Expression nesting depth {depth} exceeds limit of {limit}")


# -----------------------------------------------------------------------------
# Invocation errors
# -----------------------------------------------------------------------------


class ArityError(ExpressionError):
    """Positional invocation supplied the wrong number of arguments."""

    def __init__(self, expected: int, actual: int):
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Incorrect number of arguments given. Expected {expected}, got {actual}."
        )


class BindError(ExpressionError):
    """Named arguments don't match the declared variables."""
    pass


class MissingParameterError(BindError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"The parameter '{name}' was not supplied.")


class UnexpectedParametersError(BindError):
    def __init__(self, names: Sequence[str]):
        self.names = tuple(names)
        super().__init__(
            f"{len(self.names)} additional parameters were supplied: "
            + ", ".join(str(n) for n in self.names)
        )


class EvaluationError(ExpressionError):
    """Error during expression evaluation."""
    pass


class DomainError(EvaluationError):
    """Numeric domain violation (division by zero, sqrt of a negative, ...)."""

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(detail)
