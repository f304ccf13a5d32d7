"""
Unit Tests for Expression Evaluator
===================================

Tests for expression evaluation, symbol resolution and template expansion.
"""

from datetime import datetime, timedelta, timezone

import pytest

from n8n_dsl.core.errors import ExpressionError
from n8n_dsl.core.generator.evaluator import ExpressionEvaluator, format_timestamp
from n8n_dsl.models.ast import (
    ArrayExpression,
    FunctionCallExpression,
    IdentifierExpression,
    LiteralExpression,
    ObjectExpression,
    ParameterDeclaration,
    ParameterType,
    TemplateExpression,
    VariableDeclaration,
)


def lit(value):
    return LiteralExpression(value=value)


class TestExpressionEvaluation:
    """Test evaluation of each expression kind."""

    @pytest.fixture
    def evaluator(self, fake_env, fixed_clock):
        """Evaluator with one parameter and one variable bound."""
        evaluator = ExpressionEvaluator(env_lookup=fake_env.get, clock=fixed_clock)
        evaluator.bind_parameters(
            [
                ParameterDeclaration(
                    name="limit", param_type=ParameterType.NUMBER, default_value=lit(25),
                    required=False,
                ),
                ParameterDeclaration(name="token", param_type=ParameterType.STRING),
            ]
        )
        evaluator.bind_variables(
            [VariableDeclaration(name="greeting", value=lit("hello"))]
        )
        return evaluator

    def test_literals_unchanged(self, evaluator):
        """Test literals evaluate to their value."""
        assert evaluator.evaluate(lit("x")) == "x"
        assert evaluator.evaluate(lit(3)) == 3
        assert evaluator.evaluate(lit(True)) is True

    def test_identifier_resolution_order(self, evaluator):
        """Test variables, then parameter defaults, then the bare name."""
        assert evaluator.evaluate(IdentifierExpression(name="greeting")) == "hello"
        assert evaluator.evaluate(IdentifierExpression(name="limit")) == 25
        assert evaluator.evaluate(IdentifierExpression(name="token")) is None
        assert evaluator.evaluate(IdentifierExpression(name="unknown")) == "unknown"

    def test_variables_shadow_parameters(self, evaluator):
        """Test a variable wins over a parameter of the same name."""
        evaluator.bind_variables([VariableDeclaration(name="limit", value=lit(99))])
        assert evaluator.evaluate(IdentifierExpression(name="limit")) == 99

    def test_containers_preserve_order(self, evaluator):
        """Test objects and arrays evaluate recursively in order."""
        expr = ObjectExpression(
            properties={
                "z": IdentifierExpression(name="limit"),
                "a": ArrayExpression(elements=[lit(1), IdentifierExpression(name="greeting")]),
            }
        )
        result = evaluator.evaluate(expr)
        assert result == {"z": 25, "a": [1, "hello"]}
        assert list(result) == ["z", "a"]

    def test_variables_may_reference_parameters(self, fake_env):
        """Test variables see already-bound parameters."""
        evaluator = ExpressionEvaluator(env_lookup=fake_env.get)
        evaluator.bind_parameters(
            [ParameterDeclaration(name="base", param_type=ParameterType.STRING,
                                  default_value=lit("https://x.io"), required=False)]
        )
        evaluator.bind_variables(
            [VariableDeclaration(name="url", value=TemplateExpression(template="${base}/v1"))]
        )
        assert evaluator.variables["url"] == "https://x.io/v1"

    def test_forward_variable_reference_is_unresolved(self):
        """Test a variable referencing a later variable gets the bare name."""
        evaluator = ExpressionEvaluator()
        evaluator.bind_variables(
            [
                VariableDeclaration(name="first", value=IdentifierExpression(name="second")),
                VariableDeclaration(name="second", value=lit("value")),
            ]
        )
        assert evaluator.variables["first"] == "second"


class TestTemplates:
    """Test ${...} template expansion."""

    @pytest.fixture
    def evaluator(self, fake_env, fixed_clock):
        evaluator = ExpressionEvaluator(env_lookup=fake_env.get, clock=fixed_clock)
        evaluator.bind_parameters(
            [ParameterDeclaration(name="count", param_type=ParameterType.NUMBER,
                                  default_value=lit(3), required=False)]
        )
        evaluator.bind_variables(
            [
                VariableDeclaration(name="name", value=lit("Ada")),
                VariableDeclaration(name="tags", value=ArrayExpression(elements=[lit("a")])),
            ]
        )
        return evaluator

    def test_variable_and_parameter_substitution(self, evaluator):
        """Test names are substituted with whitespace trimmed."""
        assert evaluator.render_template("Hi ${ name }, you have ${count}") == "Hi Ada, you have 3"

    def test_structured_values_render_as_json(self, evaluator):
        """Test arrays are rendered as JSON text."""
        assert evaluator.render_template("tags=${tags}") == 'tags=["a"]'

    def test_now_builtin(self, evaluator):
        """Test now() renders the clock as ISO UTC."""
        assert evaluator.render_template("at ${now()}") == "at 2024-01-15T09:30:00.000Z"

    def test_env_builtin(self, evaluator):
        """Test env() substitutes environment values or empty text."""
        assert evaluator.render_template("${env('API_TOKEN')}") == "secret-token"
        assert evaluator.render_template('${env("MISSING")}!') == "!"

    def test_unresolved_spans_left_verbatim(self, evaluator):
        """Test unknown references keep their delimiters."""
        text = "Total: ${$json.total} for ${name}"
        assert evaluator.render_template(text) == "Total: ${$json.total} for Ada"

    def test_template_expression(self, evaluator):
        """Test template expressions evaluate through render_template."""
        assert evaluator.evaluate(TemplateExpression(template="${name}!")) == "Ada!"


class TestFunctionCalls:
    """Test built-in function call expressions."""

    def test_now_and_env_calls(self, fake_env, fixed_clock):
        """Test now() and env() call expressions."""
        evaluator = ExpressionEvaluator(env_lookup=fake_env.get, clock=fixed_clock)
        assert evaluator.evaluate(FunctionCallExpression(name="now")) == "2024-01-15T09:30:00.000Z"
        assert evaluator.evaluate(
            FunctionCallExpression(name="env", arguments=[lit("REGION")])
        ) == "eu-west-1"
        assert evaluator.evaluate(
            FunctionCallExpression(name="env", arguments=[lit("NOPE")])
        ) == ""

    def test_file_call_uses_loader(self):
        """Test file() delegates to the injected loader."""
        evaluator = ExpressionEvaluator(file_loader=lambda path: f"contents of {path}")
        expr = FunctionCallExpression(name="file", arguments=[lit("script.js")])
        assert evaluator.evaluate(expr) == "contents of script.js"

    def test_file_call_without_loader(self):
        """Test file() fails without a loader."""
        expr = FunctionCallExpression(name="file", arguments=[lit("x")], line=4, column=2)
        with pytest.raises(ExpressionError) as exc_info:
            ExpressionEvaluator().evaluate(expr)
        assert exc_info.value.line == 4

    def test_file_loader_failure(self):
        """Test loader exceptions become positioned expression errors."""

        def missing(path):
            raise FileNotFoundError(path)

        expr = FunctionCallExpression(name="file", arguments=[lit("gone.js")], line=7, column=11)
        message = "file\\('gone.js'\\) could not be loaded"
        with pytest.raises(ExpressionError, match=message) as exc_info:
            ExpressionEvaluator(file_loader=missing).evaluate(expr)
        assert (exc_info.value.line, exc_info.value.column) == (7, 11)
        assert isinstance(exc_info.value.__cause__, FileNotFoundError)

    def test_unknown_function(self):
        """Test unknown functions are rejected."""
        with pytest.raises(ExpressionError, match="Unknown function 'upper'"):
            ExpressionEvaluator().evaluate(FunctionCallExpression(name="upper"))


class TestFormatTimestamp:
    """Test timestamp rendering."""

    def test_naive_datetime_treated_as_utc(self):
        assert format_timestamp(datetime(2024, 3, 1, 12, 0, 0)) == "2024-03-01T12:00:00.000Z"

    def test_offset_converted_to_utc(self):
        moment = datetime(2024, 3, 1, 14, 0, 0, tzinfo=timezone(timedelta(hours=2)))
        assert format_timestamp(moment) == "2024-03-01T12:00:00.000Z"
