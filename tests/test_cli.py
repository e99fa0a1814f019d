"""Tests for exprforge CLI commands."""

import pytest
from click.testing import CliRunner

from exprforge.cli.main import cli


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("EXPRFORGE_DOMAIN", "EXPRFORGE_MAX_DEPTH", "EXPRFORGE_DECIMAL_PRECISION"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def suite_file(tmp_path):
    def write(content: str):
        path = tmp_path / "suite.yaml"
        path.write_text(content)
        return path

    return write


class TestEval:
    def test_evaluates_with_assignments(self, runner):
        result = runner.invoke(cli, ["eval", "a + b * 2", "a=3", "b=4"])
        assert result.exit_code == 0
        assert result.output.strip() == "11.0"

    def test_constant_expression(self, runner):
        result = runner.invoke(cli, ["eval", "2 * pi"])
        assert result.exit_code == 0
        assert result.output.startswith("6.28")

    def test_negative_value(self, runner):
        result = runner.invoke(cli, ["eval", "a * 2", "a=-3"])
        assert result.output.strip() == "-6.0"

    def test_int_domain(self, runner):
        result = runner.invoke(cli, ["eval", "a / b", "a=7", "b=2", "--domain", "int"])
        assert result.exit_code == 0
        assert result.output.strip() == "3"

    def test_bool_domain(self, runner):
        result = runner.invoke(cli, ["eval", "a && !b", "a=true", "b=false", "-d", "bool"])
        assert result.exit_code == 0
        assert result.output.strip() == "true"

    def test_decimal_domain(self, runner):
        result = runner.invoke(cli, ["eval", "a + b", "a=0.1", "b=0.2", "-d", "decimal"])
        assert result.output.strip() == "0.3"

    def test_domain_from_env(self, runner, monkeypatch):
        monkeypatch.setenv("EXPRFORGE_DOMAIN", "int")
        result = runner.invoke(cli, ["eval", "7 / 2"])
        assert result.output.strip() == "3"

    def test_invalid_env_domain(self, runner, monkeypatch):
        monkeypatch.setenv("EXPRFORGE_DOMAIN", "complex")
        result = runner.invoke(cli, ["eval", "1"])
        assert result.exit_code == 1
        assert "Unknown domain" in result.output

    def test_unknown_identifier(self, runner):
        result = runner.invoke(cli, ["eval", "x + 1"])
        assert result.exit_code == 1
        assert "Unknown identifier 'x'" in result.output

    def test_syntax_error_shows_caret(self, runner):
        result = runner.invoke(cli, ["eval", "1 + * 2"])
        assert result.exit_code == 1
        assert "Unexpected token" in result.output
        assert "    ^" in result.output

    def test_division_by_zero(self, runner):
        result = runner.invoke(cli, ["eval", "a / 0", "a=1"])
        assert result.exit_code == 1
        assert "Division by zero" in result.output

    def test_unparseable_value(self, runner):
        result = runner.invoke(cli, ["eval", "a", "a=abc"])
        assert result.exit_code == 1
        assert "Cannot parse value for 'a'" in result.output

    def test_malformed_assignment(self, runner):
        result = runner.invoke(cli, ["eval", "a", "a"])
        assert result.exit_code == 2
        assert "NAME=VALUE" in result.output


class TestCheck:
    def test_valid_expression(self, runner):
        result = runner.invoke(cli, ["check", "a > 1 ? a : 0", "-V", "a"])
        assert result.exit_code == 0
        assert "OK: number expression over 1 variable(s) in the float domain" in result.output

    def test_type_error(self, runner):
        result = runner.invoke(cli, ["check", "a + true", "--var", "a"])
        assert result.exit_code == 1
        assert "Error:" in result.output

    def test_undeclared_variable(self, runner):
        result = runner.invoke(cli, ["check", "a + b", "-V", "a"])
        assert result.exit_code == 1
        assert "'b'" in result.output

    def test_verbose_flag(self, runner):
        result = runner.invoke(cli, ["--verbose", "check", "1 + 1"])
        assert result.exit_code == 0


class TestFunctions:
    def test_lists_functions_and_constants(self, runner):
        result = runner.invoke(cli, ["functions"])
        assert result.exit_code == 0
        assert "sqrt(x)" in result.output
        assert "max(values...)" in result.output
        assert "(real)" in result.output
        assert "Constants:" in result.output
        assert "pi" in result.output

    def test_filter_by_category(self, runner):
        result = runner.invoke(cli, ["functions", "--category", "rounding"])
        assert result.exit_code == 0
        assert "round(x, [digits])" in result.output
        assert "sqrt" not in result.output
        assert "Constants:" not in result.output


class TestRun:
    def test_passing_suite(self, runner, suite_file):
        path = suite_file(
            """
expressions:
  - name: area
    text: "w * h"
    variables: [w, h]
    cases:
      - args: [2, 3]
        expect: 6
      - args: {h: 3, w: 2}
        expect: 6
"""
        )
        result = runner.invoke(cli, ["run", str(path)])
        assert result.exit_code == 0
        assert "[PASS] area#0" in result.output
        assert "All 2 case(s) passed." in result.output

    def test_failing_suite(self, runner, suite_file):
        path = suite_file(
            """
expressions:
  - name: sum
    text: "a + b"
    variables: [a, b]
    cases:
      - args: [1, 1]
        expect: 2
      - args: [1, 1]
        expect: 3
"""
        )
        result = runner.invoke(cli, ["run", str(path)])
        assert result.exit_code == 1
        assert "[FAIL] sum#1" in result.output
        assert "1 of 2 case(s) failed" in result.output

    def test_quiet_hides_passes(self, runner, suite_file):
        path = suite_file(
            """
expressions:
  - text: "1 + 1"
    cases:
      - expect: 2
"""
        )
        result = runner.invoke(cli, ["run", "--quiet", str(path)])
        assert result.exit_code == 0
        assert "[PASS]" not in result.output

    def test_invalid_suite(self, runner, suite_file):
        path = suite_file("expressions: 5\n")
        result = runner.invoke(cli, ["run", str(path)])
        assert result.exit_code == 1
        assert "Error:" in result.output

    def test_missing_file(self, runner, tmp_path):
        result = runner.invoke(cli, ["run", str(tmp_path / "nope.yaml")])
        assert result.exit_code == 2
