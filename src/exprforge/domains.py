"""Numeric domains: the value type T an expression computes over.

A domain supplies everything the compiler needs to know about T:

- its static ValueType (NUMBER, BOOLEAN or ANY)
- how to turn a number literal's source text into a T
- how to coerce a caller-supplied argument into a T
- the arithmetic capability set (add, subtract, multiply, divide, modulo,
  negate, power, compare)
- whether real-valued functions (sqrt, sin, ...) are available

Division policy, shared by every domain: division or remainder by zero raises
DomainError. Errors from the underlying arithmetic (OverflowError, decimal
signals, ...) are re-raised as DomainError.
"""

from __future__ import annotations

import math
import operator
from decimal import Context, Decimal, DecimalException, localcontext
from enum import Enum
from fractions import Fraction
from typing import Any, Callable

from exprforge.config import DEFAULT_DECIMAL_PRECISION, EngineConfig
from exprforge.errors import DomainError, EvaluationError, ExpressionTypeError


class ValueType(Enum):
    """Static types used by the compiler's type checker."""

    NUMBER = "number"
    BOOLEAN = "boolean"
    ANY = "any"

    def unifies_with(self, other: ValueType) -> bool:
        return self is ValueType.ANY or other is ValueType.ANY or self is other


def _trunc_div(left: int, right: int) -> int:
    """Integer division rounding toward zero."""
    quotient = abs(left) // abs(right)
    return quotient if (left < 0) == (right < 0) else -quotient


class NumericDomain:
    """Base domain using Python's operators on a single numeric type."""

    name = "abstract"
    value_type = ValueType.NUMBER
    python_type: type | tuple[type, ...] = object
    supports_real = False

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name!r}>"

    # -------------------------------------------------------------------------
    # Values
    # -------------------------------------------------------------------------

    def parse_literal(self, text: str) -> Any:
        """Convert a number literal's source text into a domain value."""
        raise NotImplementedError

    def coerce(self, value: Any) -> Any:
        """Convert a caller-supplied argument into a domain value."""
        if isinstance(value, bool) or not isinstance(value, self.python_type):
            raise TypeError(
                f"expected {self.name}, got {type(value).__name__} {value!r}"
            )
        return value

    def parse_argument(self, text: str) -> Any:
        """Parse a command-line argument (allows a leading sign)."""
        text = text.strip()
        sign = 1
        if text[:1] in ("-", "+"):
            sign = -1 if text[0] == "-" else 1
            text = text[1:]
        value = self.parse_literal(text)
        return self.negate(value) if sign < 0 else value

    def from_float(self, value: float) -> Any:
        raise ExpressionTypeError(f"the {self.name} domain has no real values")

    def to_float(self, value: Any) -> float:
        return float(value)

    # -------------------------------------------------------------------------
    # Arithmetic
    # -------------------------------------------------------------------------

    def _apply(self, op: Callable[[Any, Any], Any], left: Any, right: Any) -> Any:
        try:
            return op(left, right)
        except ZeroDivisionError:
            raise DomainError("Division by zero") from None
        except (ArithmeticError, ValueError) as e:
            raise DomainError(str(e)) from e

    def add(self, left: Any, right: Any) -> Any:
        return self._apply(operator.add, left, right)

    def subtract(self, left: Any, right: Any) -> Any:
        return self._apply(operator.sub, left, right)

    def multiply(self, left: Any, right: Any) -> Any:
        return self._apply(operator.mul, left, right)

    def divide(self, left: Any, right: Any) -> Any:
        if right == 0:
            raise DomainError("Division by zero")
        return self._apply(operator.truediv, left, right)

    def modulo(self, left: Any, right: Any) -> Any:
        if right == 0:
            raise DomainError("Modulo by zero")
        return self._apply(operator.mod, left, right)

    def negate(self, value: Any) -> Any:
        return -value

    def power(self, base: Any, exponent: Any) -> Any:
        return self._apply(operator.pow, base, exponent)

    def compare(self, left: Any, right: Any) -> int:
        """Compare two values, returning -1, 0, or 1.

        Unordered values (NaN) raise DomainError.
        """
        if left < right:
            return -1
        if left > right:
            return 1
        if left == right:
            return 0
        raise DomainError(f"Cannot order {left!r} and {right!r}")


class IntegerDomain(NumericDomain):
    """Arbitrary-precision integers.

    ``/`` truncates toward zero and ``%`` takes the sign of the dividend, so
    ``a == (a / b) * b + a % b`` always holds.
    """

    name = "int"
    python_type = int

    def parse_literal(self, text: str) -> int:
        if not text.isdigit():
            raise ExpressionTypeError(
                f"Literal {text} is not representable in the int domain"
            )
        return int(text)

    def divide(self, left: int, right: int) -> int:
        if right == 0:
            raise DomainError("Division by zero")
        return _trunc_div(left, right)

    def modulo(self, left: int, right: int) -> int:
        if right == 0:
            raise DomainError("Modulo by zero")
        return left - right * _trunc_div(left, right)

    def power(self, base: int, exponent: int) -> int:
        if exponent < 0:
            raise DomainError(f"Negative exponent {exponent} in the int domain")
        return base ** exponent


class FloatDomain(NumericDomain):
    """IEEE 754 double precision. ``%`` follows math.fmod."""

    name = "float"
    python_type = (int, float)
    supports_real = True

    def parse_literal(self, text: str) -> float:
        return float(text)

    def coerce(self, value: Any) -> float:
        if isinstance(value, Decimal) or isinstance(value, Fraction):
            return float(value)
        return float(super().coerce(value))

    def from_float(self, value: float) -> float:
        return value

    def modulo(self, left: float, right: float) -> float:
        if right == 0:
            raise DomainError("Modulo by zero")
        return math.fmod(left, right)

    def power(self, base: float, exponent: float) -> float:
        return self._apply(math.pow, base, exponent)


class DecimalDomain(NumericDomain):
    """Base-10 arithmetic through decimal.Decimal.

    Every operation runs under a private context with the configured
    precision. Real-valued functions other than sqrt/exp/ln/log10 round-trip
    through float.
    """

    name = "decimal"
    python_type = (int, Decimal)
    supports_real = True

    def __init__(self, precision: int = DEFAULT_DECIMAL_PRECISION):
        self.precision = precision
        self.context = Context(prec=precision)

    def __repr__(self) -> str:
        return f"<DecimalDomain prec={self.precision}>"

    def parse_literal(self, text: str) -> Decimal:
        try:
            return Decimal(text)
        except DecimalException:
            raise ValueError(f"invalid decimal literal {text!r}") from None

    def coerce(self, value: Any) -> Decimal:
        if isinstance(value, float) and not isinstance(value, bool):
            return Decimal(repr(value))
        return Decimal(super().coerce(value))

    def from_float(self, value: float) -> Decimal:
        return Decimal(repr(value))

    def _apply(self, op: Callable[[Any, Any], Any], left: Any, right: Any) -> Any:
        try:
            with localcontext(self.context):
                return op(left, right)
        except (ZeroDivisionError, DecimalException, ArithmeticError) as e:
            raise DomainError(f"Decimal operation failed: {type(e).__name__}") from e

    def negate(self, value: Decimal) -> Decimal:
        try:
            with localcontext(self.context):
                return -value
        except DecimalException as e:
            raise DomainError(f"Decimal operation failed: {type(e).__name__}") from e

    def compare(self, left: Decimal, right: Decimal) -> int:
        # Ordering a NaN signals InvalidOperation instead of returning False
        if Decimal(left).is_nan() or Decimal(right).is_nan():
            raise DomainError(f"Cannot order {left!r} and {right!r}")
        return super().compare(left, right)

    def decimal_function(self, name: str, value: Decimal) -> Decimal:
        """Apply one of Decimal's own real functions (sqrt, exp, ln, log10)."""
        try:
            with localcontext(self.context):
                return getattr(value, name)()
        except (DecimalException, ArithmeticError) as e:
            raise DomainError(f"{name}({value}) is undefined") from e


class FractionDomain(NumericDomain):
    """Exact rationals through fractions.Fraction.

    ``%`` takes the sign of the dividend, as in the int domain.
    """

    name = "fraction"
    python_type = (int, Fraction)

    def parse_literal(self, text: str) -> Fraction:
        return Fraction(text)

    def coerce(self, value: Any) -> Fraction:
        if isinstance(value, str):
            try:
                return Fraction(value)
            except ValueError:
                raise TypeError(f"expected fraction, got {value!r}") from None
        return Fraction(super().coerce(value))

    def modulo(self, left: Fraction, right: Fraction) -> Fraction:
        if right == 0:
            raise DomainError("Modulo by zero")
        return left - right * math.trunc(left / right)

    def power(self, base: Fraction, exponent: Fraction) -> Fraction:
        if exponent.denominator != 1:
            raise DomainError(f"Non-integer exponent {exponent} in the fraction domain")
        return self._apply(operator.pow, base, int(exponent))


class BooleanDomain(NumericDomain):
    """Truth values; only logical, equality and conditional operators apply."""

    name = "bool"
    value_type = ValueType.BOOLEAN
    python_type = bool

    def parse_literal(self, text: str) -> Any:
        raise ExpressionTypeError(
            f"Number literal {text} is not allowed in the bool domain"
        )

    def coerce(self, value: Any) -> bool:
        if not isinstance(value, bool):
            raise TypeError(f"expected bool, got {type(value).__name__} {value!r}")
        return value

    def parse_argument(self, text: str) -> bool:
        lowered = text.strip().lower()
        if lowered not in ("true", "false"):
            raise ValueError(f"expected true or false, got {text!r}")
        return lowered == "true"


class ObjectDomain(NumericDomain):
    """Any Python value, with Python's own operator semantics.

    Typing is dynamic: operand mismatches surface as EvaluationError when the
    expression runs.
    """

    name = "object"
    value_type = ValueType.ANY
    supports_real = True

    def parse_literal(self, text: str) -> int | float:
        return int(text) if text.isdigit() else float(text)

    def coerce(self, value: Any) -> Any:
        return value

    def parse_argument(self, text: str) -> Any:
        try:
            return super().parse_argument(text)
        except ValueError:
            return text

    def from_float(self, value: float) -> float:
        return value

    def _apply(self, op: Callable[[Any, Any], Any], left: Any, right: Any) -> Any:
        try:
            return super()._apply(op, left, right)
        except TypeError as e:
            raise EvaluationError(str(e)) from e

    def divide(self, left: Any, right: Any) -> Any:
        return self._apply(operator.truediv, left, right)

    def modulo(self, left: Any, right: Any) -> Any:
        return self._apply(operator.mod, left, right)

    def negate(self, value: Any) -> Any:
        try:
            return -value
        except TypeError as e:
            raise EvaluationError(str(e)) from e

    def compare(self, left: Any, right: Any) -> int:
        try:
            return super().compare(left, right)
        except TypeError as e:
            raise EvaluationError(
                f"Cannot compare {type(left).__name__} and {type(right).__name__}"
            ) from e


_FIXED_DOMAINS: dict[str, NumericDomain] = {
    domain.name: domain
    for domain in (
        IntegerDomain(),
        FloatDomain(),
        FractionDomain(),
        BooleanDomain(),
        ObjectDomain(),
    )
}

DOMAIN_NAMES = ("int", "float", "decimal", "fraction", "bool", "object")


def get_domain(name: str, config: EngineConfig | None = None) -> NumericDomain:
    """Look up a domain by name.

    Raises:
        ValueError: If the name is not a known domain
    """
    if name == "decimal":
        precision = config.decimal_precision if config else DEFAULT_DECIMAL_PRECISION
        return DecimalDomain(precision)
    if name not in _FIXED_DOMAINS:
        raise ValueError(
            f"Unknown domain: {name!r}. Expected one of: {', '.join(DOMAIN_NAMES)}"
        )
    return _FIXED_DOMAINS[name]
