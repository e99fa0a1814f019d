"""Built-in functions and constants for the exprforge expression language.

Builds the process-wide BUILTINS registry once at import; the registry is
frozen before anything can compile against it.

Categories:
- Arithmetic: abs, min, max, sign, clamp, pow
- Rounding: floor, ceil, round
- Exponential: sqrt, exp, log, log10
- Trigonometric: sin, cos, tan, asin, acos, atan, atan2, hypot
- Constants: pi, e

Every implementation takes the numeric domain as its first argument so one
definition serves int, float, decimal, fraction and object expressions.
"""

import math
from typing import Any, Callable

from exprforge.domains import DecimalDomain, NumericDomain, ValueType
from exprforge.errors import DomainError
from exprforge.expressions.functions import (
    ConstantDefinition,
    FunctionCategory,
    FunctionDefinition,
    FunctionParameter,
    FunctionRegistry,
)

NUMBER = ValueType.NUMBER

_VALUE = FunctionParameter("x", NUMBER, "The number")


def create_builtin_registry() -> FunctionRegistry:
    """Create and freeze a registry holding every built-in."""
    registry = FunctionRegistry()
    _register_arithmetic_functions(registry)
    _register_rounding_functions(registry)
    _register_exponential_functions(registry)
    _register_trigonometric_functions(registry)
    _register_constants(registry)
    return registry.freeze()


# -----------------------------------------------------------------------------
# Arithmetic Functions
# -----------------------------------------------------------------------------


def _abs(domain: NumericDomain, value: Any) -> Any:
    """Return absolute value."""
    return value if domain.compare(value, domain.parse_literal("0")) >= 0 else domain.negate(value)


def _min_val(domain: NumericDomain, *args: Any) -> Any:
    """Return the smallest argument."""
    result = args[0]
    for value in args[1:]:
        if domain.compare(value, result) < 0:
            result = value
    return result


def _max_val(domain: NumericDomain, *args: Any) -> Any:
    """Return the largest argument."""
    result = args[0]
    for value in args[1:]:
        if domain.compare(value, result) > 0:
            result = value
    return result


def _sign(domain: NumericDomain, value: Any) -> Any:
    """Return -1, 0 or 1 in the domain's own type."""
    comparison = domain.compare(value, domain.parse_literal("0"))
    if comparison < 0:
        return domain.negate(domain.parse_literal("1"))
    return domain.parse_literal(str(comparison))


def _clamp(domain: NumericDomain, value: Any, low: Any, high: Any) -> Any:
    """Restrict value to the closed range [low, high]."""
    if domain.compare(low, high) > 0:
        raise DomainError(f"clamp() lower bound {low} exceeds upper bound {high}")
    return _min_val(domain, _max_val(domain, value, low), high)


def _pow(domain: NumericDomain, base: Any, exponent: Any) -> Any:
    return domain.power(base, exponent)


def _register_arithmetic_functions(registry: FunctionRegistry) -> None:
    registry.register(
        FunctionDefinition(
            name="abs",
            description="Returns absolute value",
            category=FunctionCategory.ARITHMETIC,
            parameters=(_VALUE,),
            return_type=NUMBER,
            examples=("abs(balance) < 1000",),
            implementation=_abs,
        )
    )

    registry.register(
        FunctionDefinition(
            name="min",
            description="Returns the smallest of its arguments",
            category=FunctionCategory.ARITHMETIC,
            parameters=(
                FunctionParameter("values", NUMBER, "Numbers to compare", variadic=True),
            ),
            return_type=NUMBER,
            examples=("min(a, b, 100)",),
            implementation=_min_val,
        )
    )

    registry.register(
        FunctionDefinition(
            name="max",
            description="Returns the largest of its arguments",
            category=FunctionCategory.ARITHMETIC,
            parameters=(
                FunctionParameter("values", NUMBER, "Numbers to compare", variadic=True),
            ),
            return_type=NUMBER,
            examples=("max(0, balance)",),
            implementation=_max_val,
        )
    )

    registry.register(
        FunctionDefinition(
            name="sign",
            description="Returns -1, 0 or 1 according to the sign of the number",
            category=FunctionCategory.ARITHMETIC,
            parameters=(_VALUE,),
            return_type=NUMBER,
            examples=("sign(delta) * step",),
            implementation=_sign,
        )
    )

    registry.register(
        FunctionDefinition(
            name="clamp",
            description="Restricts a number to a closed range",
            category=FunctionCategory.ARITHMETIC,
            parameters=(
                _VALUE,
                FunctionParameter("low", NUMBER, "Lower bound"),
                FunctionParameter("high", NUMBER, "Upper bound"),
            ),
            return_type=NUMBER,
            examples=("clamp(ratio, 0, 1)",),
            implementation=_clamp,
        )
    )

    registry.register(
        FunctionDefinition(
            name="pow",
            description="Raises a number to a power",
            category=FunctionCategory.ARITHMETIC,
            parameters=(
                FunctionParameter("base", NUMBER, "The base"),
                FunctionParameter("exponent", NUMBER, "The exponent"),
            ),
            return_type=NUMBER,
            examples=("pow(1 + rate, years)",),
            implementation=_pow,
        )
    )


# -----------------------------------------------------------------------------
# Rounding Functions
# -----------------------------------------------------------------------------


def _floor(domain: NumericDomain, value: Any) -> Any:
    """Round down to nearest integer."""
    return domain.coerce(math.floor(value))


def _ceil(domain: NumericDomain, value: Any) -> Any:
    """Round up to nearest integer."""
    return domain.coerce(math.ceil(value))


def _round_num(domain: NumericDomain, value: Any, digits: Any = 0) -> Any:
    """Round half to even at the given number of decimal places."""
    if digits != int(digits):
        raise DomainError(f"round() digits must be a whole number, got {digits}")
    return domain.coerce(round(value, int(digits)))


def _register_rounding_functions(registry: FunctionRegistry) -> None:
    registry.register(
        FunctionDefinition(
            name="floor",
            description="Rounds down to the nearest integer",
            category=FunctionCategory.ROUNDING,
            parameters=(_VALUE,),
            return_type=NUMBER,
            examples=("floor(total / size)",),
            implementation=_floor,
        )
    )

    registry.register(
        FunctionDefinition(
            name="ceil",
            description="Rounds up to the nearest integer",
            category=FunctionCategory.ROUNDING,
            parameters=(_VALUE,),
            return_type=NUMBER,
            examples=("ceil(items / perPage)",),
            implementation=_ceil,
        )
    )

    registry.register(
        FunctionDefinition(
            name="round",
            description="Rounds to specified decimal places (half to even)",
            category=FunctionCategory.ROUNDING,
            parameters=(
                _VALUE,
                FunctionParameter("digits", NUMBER, "Decimal places", required=False),
            ),
            return_type=NUMBER,
            examples=("round(price * 1.2, 2)",),
            implementation=_round_num,
        )
    )


# -----------------------------------------------------------------------------
# Real-valued Functions
# -----------------------------------------------------------------------------


def _real(math_fn: Callable[..., float], decimal_name: str | None = None) -> Callable[..., Any]:
    """Lift a float function from the math module into any real domain.

    Decimal expressions use Decimal's own method when one exists, so that
    sqrt/exp/ln/log10 keep the configured precision.
    """

    def implementation(domain: NumericDomain, *args: Any) -> Any:
        if decimal_name and isinstance(domain, DecimalDomain):
            return domain.decimal_function(decimal_name, args[0])
        return domain.from_float(math_fn(*(domain.to_float(a) for a in args)))

    implementation.__name__ = f"_{math_fn.__name__}"
    return implementation


def _log(domain: NumericDomain, value: Any, base: Any = None) -> Any:
    """Natural logarithm, or logarithm in the given base."""
    if base is None:
        if isinstance(domain, DecimalDomain):
            return domain.decimal_function("ln", value)
        return domain.from_float(math.log(domain.to_float(value)))
    return domain.from_float(math.log(domain.to_float(value), domain.to_float(base)))


def _register_exponential_functions(registry: FunctionRegistry) -> None:
    registry.register(
        FunctionDefinition(
            name="sqrt",
            description="Returns the square root",
            category=FunctionCategory.EXPONENTIAL,
            parameters=(_VALUE,),
            return_type=NUMBER,
            requires_real=True,
            examples=("sqrt(x * x + y * y)",),
            implementation=_real(math.sqrt, "sqrt"),
        )
    )

    registry.register(
        FunctionDefinition(
            name="exp",
            description="Returns e raised to the given power",
            category=FunctionCategory.EXPONENTIAL,
            parameters=(_VALUE,),
            return_type=NUMBER,
            requires_real=True,
            examples=("principal * exp(rate * t)",),
            implementation=_real(math.exp, "exp"),
        )
    )

    registry.register(
        FunctionDefinition(
            name="log",
            description="Returns the natural logarithm, or the logarithm in a base",
            category=FunctionCategory.EXPONENTIAL,
            parameters=(
                _VALUE,
                FunctionParameter("base", NUMBER, "Logarithm base", required=False),
            ),
            return_type=NUMBER,
            requires_real=True,
            examples=("log(x)", "log(n, 2)"),
            implementation=_log,
        )
    )

    registry.register(
        FunctionDefinition(
            name="log10",
            description="Returns the base-10 logarithm",
            category=FunctionCategory.EXPONENTIAL,
            parameters=(_VALUE,),
            return_type=NUMBER,
            requires_real=True,
            examples=("floor(log10(n)) + 1",),
            implementation=_real(math.log10, "log10"),
        )
    )


def _register_trigonometric_functions(registry: FunctionRegistry) -> None:
    for name, math_fn, description in (
        ("sin", math.sin, "Returns the sine of an angle in radians"),
        ("cos", math.cos, "Returns the cosine of an angle in radians"),
        ("tan", math.tan, "Returns the tangent of an angle in radians"),
        ("asin", math.asin, "Returns the arc sine, in radians"),
        ("acos", math.acos, "Returns the arc cosine, in radians"),
        ("atan", math.atan, "Returns the arc tangent, in radians"),
    ):
        registry.register(
            FunctionDefinition(
                name=name,
                description=description,
                category=FunctionCategory.TRIGONOMETRIC,
                parameters=(_VALUE,),
                return_type=NUMBER,
                requires_real=True,
                examples=(f"{name}(theta)",),
                implementation=_real(math_fn),
            )
        )

    registry.register(
        FunctionDefinition(
            name="atan2",
            description="Returns the angle of the point (x, y), in radians",
            category=FunctionCategory.TRIGONOMETRIC,
            parameters=(
                FunctionParameter("y", NUMBER, "The y coordinate"),
                FunctionParameter("x", NUMBER, "The x coordinate"),
            ),
            return_type=NUMBER,
            requires_real=True,
            examples=("atan2(dy, dx)",),
            implementation=_real(math.atan2),
        )
    )

    registry.register(
        FunctionDefinition(
            name="hypot",
            description="Returns the Euclidean distance from the origin",
            category=FunctionCategory.TRIGONOMETRIC,
            parameters=(
                FunctionParameter("x", NUMBER, "The x coordinate"),
                FunctionParameter("y", NUMBER, "The y coordinate"),
            ),
            return_type=NUMBER,
            requires_real=True,
            examples=("hypot(dx, dy) <= radius",),
            implementation=_real(math.hypot),
        )
    )


def _register_constants(registry: FunctionRegistry) -> None:
    registry.register_constant(
        ConstantDefinition("pi", math.pi, "Ratio of a circle's circumference to its diameter")
    )
    registry.register_constant(
        ConstantDefinition("e", math.e, "Base of the natural logarithm")
    )


BUILTINS = create_builtin_registry()
