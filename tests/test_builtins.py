"""Tests for the builtin function catalogue."""

import math

import pytest

from exprforge import Expression
from exprforge.domains import ValueType
from exprforge.errors import DomainError, UnknownIdentifierError
from exprforge.expressions import (
    BUILTINS,
    FunctionCategory,
    FunctionDefinition,
    FunctionParameter,
    FunctionRegistry,
    compile_expression,
)


def calc(text, domain="float"):
    return compile_expression(text, domain=domain)()


class TestArithmeticFunctions:
    def test_abs(self):
        assert calc("abs(0 - 3)") == 3.0
        assert calc("abs(4)") == 4.0

    def test_min_max(self):
        assert calc("min(3, 1, 2)") == 1.0
        assert calc("max(3, 1, 2)") == 3.0
        assert calc("max(7)") == 7.0

    def test_sign(self):
        assert calc("sign(0 - 2)") == -1.0
        assert calc("sign(0)") == 0.0
        assert calc("sign(5)") == 1.0

    def test_clamp(self):
        assert calc("clamp(5, 0, 1)") == 1.0
        assert calc("clamp(0 - 5, 0, 1)") == 0.0
        assert calc("clamp(0.5, 0, 1)") == 0.5

    def test_clamp_with_inverted_bounds(self):
        with pytest.raises(DomainError):
            calc("clamp(1, 2, 0)")

    def test_pow(self):
        assert calc("pow(2, 10)") == 1024.0

    def test_pow_overflow(self):
        with pytest.raises(DomainError):
            calc("pow(10, 400)")


class TestRoundingFunctions:
    def test_floor_ceil(self):
        assert calc("floor(2.7)") == 2.0
        assert calc("ceil(2.1)") == 3.0
        assert calc("floor(-2.5)") == -3.0

    def test_round_half_to_even(self):
        assert calc("round(2.5)") == 2.0
        assert calc("round(3.5)") == 4.0

    def test_round_digits(self):
        assert calc("round(3.14159, 2)") == 3.14

    def test_round_fractional_digits(self):
        with pytest.raises(DomainError):
            calc("round(1, 0.5)")

    def test_floor_keeps_domain_type(self):
        result = calc("floor(2.7)")
        assert isinstance(result, float)


class TestRealFunctions:
    def test_sqrt(self):
        assert calc("sqrt(16)") == 4.0

    def test_sqrt_of_negative(self):
        with pytest.raises(DomainError):
            calc("sqrt(0 - 1)")

    def test_exp_and_log(self):
        assert calc("exp(0)") == 1.0
        assert calc("log(e)") == pytest.approx(1.0)
        assert calc("log(8, 2)") == pytest.approx(3.0)
        assert calc("log10(1000)") == pytest.approx(3.0)

    def test_log_of_zero(self):
        with pytest.raises(DomainError):
            calc("log(0)")

    def test_exp_overflow(self):
        with pytest.raises(DomainError):
            calc("exp(1000)")

    def test_trigonometry(self):
        assert calc("sin(0)") == 0.0
        assert calc("cos(0)") == 1.0
        assert calc("tan(pi / 4)") == pytest.approx(1.0)
        assert calc("atan2(1, 1)") == pytest.approx(math.pi / 4)
        assert calc("hypot(3, 4)") == 5.0
        assert calc("acos(1)") == 0.0

    def test_asin_out_of_range(self):
        with pytest.raises(DomainError):
            calc("asin(2)")


class TestIntegerDomainFunctions:
    def test_results_stay_integers(self):
        assert calc("abs(0 - 3)", domain="int") == 3
        assert calc("max(1, 5)", domain="int") == 5
        assert calc("sign(0 - 5)", domain="int") == -1
        assert calc("floor(7)", domain="int") == 7

    def test_round_to_hundreds(self):
        assert calc("round(1234, 0 - 2)", domain="int") == 1200


class TestFunctionRegistry:
    def test_builtins_are_frozen(self):
        assert BUILTINS.frozen
        with pytest.raises(RuntimeError):
            BUILTINS.register(BUILTINS.get("abs"))

    def test_get_unknown(self):
        with pytest.raises(KeyError):
            BUILTINS.get("nope")

    def test_signatures(self):
        assert BUILTINS.get("abs").signature() == "abs(x)"
        assert BUILTINS.get("max").signature() == "max(values...)"
        assert BUILTINS.get("round").signature() == "round(x, [digits])"

    def test_arity_bounds(self):
        assert BUILTINS.get("max").min_args == 1
        assert BUILTINS.get("max").max_args is None
        assert BUILTINS.get("log").min_args == 1
        assert BUILTINS.get("log").max_args == 2

    def test_list_by_category(self):
        names = {f.name for f in BUILTINS.list_by_category(FunctionCategory.ROUNDING)}
        assert names == {"floor", "ceil", "round"}

    def test_export_documentation(self):
        docs = BUILTINS.export_documentation()

        assert docs["functions"]["sqrt"]["requiresReal"] is True
        assert docs["functions"]["abs"]["returnType"] == "number"
        assert "trigonometric" in docs["byCategory"]
        assert docs["constants"]["pi"]["value"] == math.pi

    def test_custom_registry(self):
        registry = FunctionRegistry()
        registry.register(
            FunctionDefinition(
                name="double",
                description="Doubles a number",
                category=FunctionCategory.ARITHMETIC,
                parameters=(FunctionParameter("x", ValueType.NUMBER, "The number"),),
                return_type=ValueType.NUMBER,
                implementation=lambda domain, x: domain.add(x, x),
            )
        )
        registry.freeze()

        expr = Expression("double(a) + 1", "a", registry=registry)
        assert expr.invoke(4) == 9.0

        with pytest.raises(UnknownIdentifierError):
            Expression("sqrt(a)", "a", registry=registry)

    def test_building_does_not_modify_catalogue(self):
        before = BUILTINS.export_documentation()
        compile_expression("sqrt(a) + max(a, 1)", ["a"])
        assert BUILTINS.export_documentation() == before
