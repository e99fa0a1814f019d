"""Tests for YAML expression suites."""

from decimal import Decimal

import pytest

from exprforge import EngineConfig
from exprforge.suite import SuiteCase, SuiteError, load_suite, parse_suite, run_suite


def passed(results):
    return [r.passed for r in results]


class TestParseSuite:
    def test_parses_expressions_and_cases(self):
        suite = parse_suite(
            {
                "domain": "int",
                "expressions": [
                    {
                        "name": "sum",
                        "text": "a + b",
                        "variables": ["a", "b"],
                        "cases": [{"args": [1, 2], "expect": 3}],
                    }
                ],
            }
        )

        assert suite.domain == "int"
        entry = suite.expressions[0]
        assert entry.name == "sum"
        assert entry.variables == ["a", "b"]
        assert entry.cases[0].args == [1, 2]
        assert entry.cases[0].expect == 3

    def test_default_name(self):
        suite = parse_suite({"expressions": [{"text": "1"}]})
        assert suite.expressions[0].name == "expression0"

    def test_case_without_expectation(self):
        suite = parse_suite({"expressions": [{"text": "1", "cases": [{}]}]})
        assert not suite.expressions[0].cases[0].has_expectation

    def test_null_expectation_is_kept(self):
        case = parse_suite({"expressions": [{"text": "1", "cases": [{"expect": None}]}]})
        assert case.expressions[0].cases[0].has_expectation

    @pytest.mark.parametrize(
        "data, message",
        [
            ([], "mapping"),
            ({}, "'expressions' list"),
            ({"expressions": ["a + b"]}, "expressions[0] must be a mapping"),
            ({"expressions": [{"name": "x"}]}, "missing 'text'"),
            ({"expressions": [{"text": "a", "variables": "a"}]}, "variables must be a list"),
            ({"expressions": [{"text": "1", "cases": [5]}]}, "cases[0] must be a mapping"),
            ({"expressions": [{"text": "1", "cases": [{"args": 5}]}]}, "list or mapping"),
        ],
    )
    def test_malformed(self, data, message):
        with pytest.raises(SuiteError) as exc_info:
            parse_suite(data)
        assert message in str(exc_info.value)


class TestLoadSuite:
    def test_loads_yaml(self, tmp_path):
        path = tmp_path / "suite.yaml"
        path.write_text(
            "expressions:\n"
            "  - name: double\n"
            "    text: a * 2\n"
            "    variables: [a]\n"
            "    cases:\n"
            "      - args: [4]\n"
            "        expect: 8\n"
        )

        suite = load_suite(path)

        assert suite.path == path
        assert suite.expressions[0].text == "a * 2"

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("expressions: [unclosed\n")

        with pytest.raises(SuiteError) as exc_info:
            load_suite(path)
        assert "invalid YAML" in str(exc_info.value)

    def test_suite_error_is_value_error(self):
        assert issubclass(SuiteError, ValueError)


class TestRunSuite:
    def test_positional_and_named_cases(self):
        suite = parse_suite(
            {
                "expressions": [
                    {
                        "name": "area",
                        "text": "w * h",
                        "variables": ["w", "h"],
                        "cases": [
                            {"args": [2, 3], "expect": 6},
                            {"args": {"h": 3, "w": 2}, "expect": 6},
                            {"args": [2, 3], "expect": 7},
                        ],
                    }
                ]
            }
        )

        results = run_suite(suite)

        assert passed(results) == [True, True, False]
        assert "expected 7" in results[2].message
        assert str(results[0]).startswith("[PASS] area#0")

    def test_expected_invocation_errors(self):
        suite = parse_suite(
            {
                "expressions": [
                    {
                        "text": "a / b",
                        "variables": ["a", "b"],
                        "cases": [
                            {"args": {"a": 1}, "error": "MissingParameterError"},
                            {"args": [1], "error": "ArityError"},
                            {"args": [1, 0], "error": "DomainError"},
                            {"args": [1, 0], "error": "EvaluationError"},
                            {"args": [1, 2], "error": "DomainError"},
                        ],
                    }
                ]
            }
        )

        results = run_suite(suite)

        assert passed(results) == [True, True, True, True, False]
        assert "expected DomainError" in results[4].message

    def test_unexpected_error_fails(self):
        suite = parse_suite(
            {"expressions": [{"text": "1 / a", "variables": ["a"], "cases": [{"args": [0]}]}]}
        )
        [result] = run_suite(suite)
        assert not result.passed
        assert "DomainError" in result.message

    def test_argument_out_of_range_is_reported(self):
        suite = parse_suite(
            {
                "expressions": [
                    {
                        "text": "a * 2",
                        "variables": ["a"],
                        "cases": [
                            {"args": [10**400], "expect": 1},
                            {"args": [10**400], "error": "DomainError"},
                            {"args": [1], "expect": 10**400},
                        ],
                    }
                ]
            }
        )

        results = run_suite(suite)

        assert passed(results) == [False, True, False]
        assert "DomainError" in results[0].message
        assert "'a'" in results[0].message

    def test_build_error_expected(self):
        suite = parse_suite(
            {
                "expressions": [
                    {"text": "x + 1", "cases": [{"error": "UnknownIdentifierError"}]},
                    {"text": "(1 + ", "cases": [{"error": "BuildError"}]},
                ]
            }
        )
        assert passed(run_suite(suite)) == [True, True]

    def test_build_error_without_cases_fails(self):
        suite = parse_suite({"expressions": [{"name": "broken", "text": "1 +"}]})
        [result] = run_suite(suite)
        assert not result.passed
        assert "build failed" in result.message

    def test_suite_and_expression_domains(self):
        suite = parse_suite(
            {
                "domain": "int",
                "expressions": [
                    {"text": "7 / 2", "cases": [{"expect": 3}]},
                    {"text": "7 / 2", "domain": "float", "cases": [{"expect": 3.5}]},
                    {"text": "0.1 + 0.2", "domain": "decimal", "cases": [{"expect": "0.3"}]},
                ],
            }
        )
        results = run_suite(suite)
        assert passed(results) == [True, True, True]
        assert results[2].value == Decimal("0.3")

    def test_boolean_expectations(self):
        suite = parse_suite(
            {
                "domain": "bool",
                "expressions": [
                    {
                        "text": "a || b",
                        "variables": ["a", "b"],
                        "cases": [
                            {"args": [False, True], "expect": True},
                            {"args": [False, False], "expect": True},
                        ],
                    }
                ],
            }
        )
        assert passed(run_suite(suite)) == [True, False]

    def test_config_is_applied(self):
        suite = parse_suite(
            {"expressions": [{"text": "((1))", "cases": [{"error": "LimitExceededError"}]}]}
        )
        assert passed(run_suite(suite, EngineConfig(max_depth=2))) == [True]

    def test_unknown_domain_is_build_failure(self):
        suite = parse_suite({"domain": "complex", "expressions": [{"text": "1"}]})
        [result] = run_suite(suite)
        assert not result.passed
        assert "ValueError" in result.message

    def test_case_defaults(self):
        case = SuiteCase()
        assert case.args == []
        assert case.error is None
        assert not case.has_expectation
