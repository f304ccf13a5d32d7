"""
Expression Evaluator
====================

Resolves DSL expressions to JSON-compatible values against a flat symbol
table of workflow parameters and variables, and expands ``${...}`` spans in
template strings by text substitution.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, Optional
import os
import re

from n8n_dsl.config.logging import get_logger
from n8n_dsl.core.errors import ExpressionError
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
from n8n_dsl.utils.values import stringify

logger = get_logger(__name__)

TEMPLATE_SPAN = re.compile(r"\$\{([^}]+)\}")
ENV_CALL = re.compile(r"""^env\(\s*['"]([^'"]+)['"]\s*\)""")

EnvLookup = Callable[[str], Optional[str]]
Clock = Callable[[], datetime]
FileLoader = Callable[[str], str]


@dataclass(frozen=True)
class ParameterBinding:
    """Resolved workflow parameter."""
    type: ParameterType
    default_value: Any
    required: bool


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_timestamp(moment: datetime) -> str:
    """Render a timestamp as ISO-8601 UTC with millisecond precision."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class ExpressionEvaluator:
    """Evaluates expressions for one compile call."""

    def __init__(
        self,
        env_lookup: Optional[EnvLookup] = None,
        clock: Optional[Clock] = None,
        file_loader: Optional[FileLoader] = None,
    ) -> None:
        self.env_lookup: EnvLookup = env_lookup or os.environ.get
        self.clock: Clock = clock or _utc_now
        self.file_loader = file_loader
        self.variables: Dict[str, Any] = {}
        self.parameters: Dict[str, ParameterBinding] = {}
        self.logger: Any = logger.bind(component="evaluator")  # structlog.BoundLoggerBase

    # Binding

    def bind_parameters(self, declarations: Iterable[ParameterDeclaration]) -> None:
        """Resolve parameter defaults in declaration order."""
        for param in declarations:
            default = None
            if param.default_value is not None:
                default = self.evaluate(param.default_value)
            self.parameters[param.name] = ParameterBinding(
                type=param.param_type, default_value=default, required=param.required
            )

    def bind_variables(self, declarations: Iterable[VariableDeclaration]) -> None:
        """Resolve variable values in declaration order."""
        for variable in declarations:
            self.variables[variable.name] = self.evaluate(variable.value)

    # Evaluation

    def evaluate(self, expr: Any) -> Any:
        """
        Evaluate an expression to a JSON-compatible value.

        Args:
            expr: Expression node

        Returns:
            String, number, boolean, list or dict

        Raises:
            ExpressionError: For unsupported function calls or expression kinds
        """
        if isinstance(expr, LiteralExpression):
            return expr.value

        if isinstance(expr, IdentifierExpression):
            return self.resolve_identifier(expr.name)

        if isinstance(expr, TemplateExpression):
            return self.render_template(expr.template)

        if isinstance(expr, ObjectExpression):
            return {key: self.evaluate(value) for key, value in expr.properties.items()}

        if isinstance(expr, ArrayExpression):
            return [self.evaluate(element) for element in expr.elements]

        if isinstance(expr, FunctionCallExpression):
            return self._call(expr)

        raise ExpressionError(f"Unsupported expression type: {type(expr).__name__}")

    def resolve_identifier(self, name: str) -> Any:
        """Variables shadow parameters; unknown names evaluate to themselves."""
        if name in self.variables:
            return self.variables[name]
        if name in self.parameters:
            return self.parameters[name].default_value
        self.logger.debug("Unresolved identifier kept as text", identifier=name)
        return name

    def render_template(self, template: str) -> str:
        """Substitute every resolvable ``${...}`` span; leave the rest verbatim."""

        def substitute(match: "re.Match[str]") -> str:
            reference = match.group(1).strip()

            if reference in self.variables:
                return stringify(self.variables[reference])

            if reference in self.parameters:
                return stringify(self.parameters[reference].default_value)

            if reference.startswith("now("):
                return format_timestamp(self.clock())

            if reference.startswith("env("):
                env_match = ENV_CALL.match(reference)
                if not env_match:
                    return ""
                return self.env_lookup(env_match.group(1)) or ""

            return match.group(0)

        return TEMPLATE_SPAN.sub(substitute, template)

    def _call(self, expr: FunctionCallExpression) -> Any:
        name = expr.name.lower()
        arguments = [self.evaluate(argument) for argument in expr.arguments]

        if name == "now":
            return format_timestamp(self.clock())

        if name == "env":
            if not arguments:
                return ""
            return self.env_lookup(stringify(arguments[0])) or ""

        if name == "file":
            if not arguments:
                raise ExpressionError("file() requires a path argument", expr.line, expr.column)
            if self.file_loader is None:
                raise ExpressionError(
                    "file() is not available without a file loader", expr.line, expr.column
                )
            path = stringify(arguments[0])
            try:
                return self.file_loader(path)
            except Exception as e:
                raise ExpressionError(
                    f"file('{path}') could not be loaded: {e}", expr.line, expr.column
                ) from e

        raise ExpressionError(f"Unknown function '{expr.name}'", expr.line, expr.column)
