"""
Workflow Validator
==================

Two independent validation passes that collect findings instead of raising:

- the AST pass checks the parsed program for naming conflicts, dangling
  connections, unconnected nodes and parameter default problems
- the graph pass checks a generated workflow document's structure, using a
  Cerberus schema for the per-node shape
"""

from typing import Any, Dict, List, Mapping, Optional, Set, Union
import re

from cerberus import Validator

from n8n_dsl.config.logging import get_logger
from n8n_dsl.models.ast import ParameterDeclaration, Program, expression_to_python
from n8n_dsl.models.schemas import Severity, ValidationIssue
from n8n_dsl.models.workflow import WorkflowDocument
from n8n_dsl.utils.values import stringify, value_type

logger = get_logger(__name__)


class WorkflowValidator:
    """Validation for parsed programs and generated workflow documents."""

    def __init__(self) -> None:
        self.logger: Any = logger.bind(component="validator")  # structlog.BoundLoggerBase
        self._setup_schemas()

    def _setup_schemas(self) -> None:
        """Setup validation schemas."""
        # Generated node schema
        self.node_schema: Dict[str, Any] = {
            "id": {"type": "string", "required": True, "empty": False},
            "name": {"type": "string", "required": True, "empty": False},
            "type": {"type": "string", "required": True, "empty": False},
            "position": {
                "type": "list",
                "required": True,
                "minlength": 2,
                "maxlength": 2,
                "schema": {"type": "number"},
            },
            "parameters": {"type": "dict", "required": True},
            "typeVersion": {"type": "number", "required": True},
        }

    # AST pass

    def validate_program(self, program: Program) -> List[ValidationIssue]:
        """
        Validate a parsed program.

        Args:
            program: Parsed program

        Returns:
            Errors and warnings in discovery order
        """
        workflow = program.workflow
        issues: List[ValidationIssue] = []

        param_names: Set[str] = set()
        for param in workflow.parameters:
            if param.name in param_names:
                issues.append(_error(f"Duplicate parameter name: {param.name}", param))
            param_names.add(param.name)
            issues.extend(self._check_default(param))

        var_names: Set[str] = set()
        for variable in workflow.variables:
            if variable.name in var_names:
                issues.append(_error(f"Duplicate variable name: {variable.name}", variable))
            if variable.name in param_names:
                issues.append(
                    _error(f"Variable '{variable.name}' conflicts with parameter name", variable)
                )
            var_names.add(variable.name)

        node_names: Set[str] = set()
        for node in workflow.nodes:
            if node.name in node_names:
                issues.append(_error(f"Duplicate node name: {node.name}", node))
            node_names.add(node.name)

        connected: Set[str] = set()
        for connection in workflow.connections:
            if connection.source.node not in node_names:
                issues.append(
                    _error(
                        f"Connection source node '{connection.source.node}' does not exist",
                        connection,
                    )
                )
            if connection.target.node not in node_names:
                issues.append(
                    _error(
                        f"Connection target node '{connection.target.node}' does not exist",
                        connection,
                    )
                )
            connected.add(connection.source.node)
            connected.add(connection.target.node)

        for node in workflow.nodes:
            if node.name not in connected:
                issues.append(
                    _warning(f"Node '{node.name}' is not connected to any other nodes", node)
                )

        self.logger.debug(
            "Validated program",
            errors=sum(1 for issue in issues if issue.is_error),
            warnings=sum(1 for issue in issues if not issue.is_error),
        )
        return issues

    def _check_default(self, param: ParameterDeclaration) -> List[ValidationIssue]:
        """Type and constraint checks for a literal default value."""
        if param.default_value is None:
            return []
        default = expression_to_python(param.default_value)
        if default is None:
            return []

        issues: List[ValidationIssue] = []
        actual = value_type(default)
        if actual != param.param_type.value:
            issues.append(
                _warning(
                    f"Parameter '{param.name}' is declared {param.param_type.value} "
                    f"but its default is {actual}",
                    param,
                )
            )

        constraints = param.validation
        if constraints is None:
            return issues

        if actual == "number":
            if constraints.min is not None and default < constraints.min:
                issues.append(
                    _error(
                        f"Parameter '{param.name}' default {stringify(default)} "
                        f"is below minimum {stringify(constraints.min)}",
                        param,
                    )
                )
            if constraints.max is not None and default > constraints.max:
                issues.append(
                    _error(
                        f"Parameter '{param.name}' default {stringify(default)} "
                        f"is above maximum {stringify(constraints.max)}",
                        param,
                    )
                )

        if constraints.pattern is not None and isinstance(default, str):
            try:
                matched = re.search(constraints.pattern, default) is not None
            except re.error:
                issues.append(_error(f"Parameter '{param.name}' has an invalid pattern", param))
            else:
                if not matched:
                    issues.append(
                        _error(
                            f"Parameter '{param.name}' default does not match pattern "
                            f"'{constraints.pattern}'",
                            param,
                        )
                    )

        if constraints.allowed is not None and default not in constraints.allowed:
            issues.append(
                _error(
                    f"Parameter '{param.name}' default {stringify(default)} is not one of "
                    f"{stringify(constraints.allowed)}",
                    param,
                )
            )

        return issues

    # Graph pass

    def validate_workflow(
        self, workflow: Union[WorkflowDocument, Mapping[str, Any]]
    ) -> List[ValidationIssue]:
        """
        Validate a generated workflow document.

        Args:
            workflow: Workflow document or its wire-shape dictionary

        Returns:
            Errors found in the document
        """
        data = workflow.to_dict() if isinstance(workflow, WorkflowDocument) else workflow
        issues: List[ValidationIssue] = []

        nodes = data.get("nodes")
        if not isinstance(nodes, list) or not nodes:
            issues.append(_error("Workflow must have at least one node"))
            nodes = nodes if isinstance(nodes, list) else []

        node_names: Set[str] = set()
        for index, node in enumerate(nodes):
            if not isinstance(node, Mapping):
                issues.append(_error(f"Node at index {index} must be an object"))
                continue

            name = node.get("name")
            label = f"'{name}'" if isinstance(name, str) and name else f"at index {index}"
            validator = Validator(self.node_schema)  # type: ignore[misc]
            validator.allow_unknown = True  # type: ignore[attr-defined]
            if not validator.validate(dict(node)):  # type: ignore[misc]
                for message in self._format_validation_errors(validator.errors):  # type: ignore[attr-defined]
                    issues.append(_error(f"Node {label}: {message}"))

            if isinstance(name, str):
                if name in node_names:
                    issues.append(_error(f"Duplicate node name: {name}"))
                node_names.add(name)

        connections = data.get("connections")
        if not isinstance(connections, Mapping):
            issues.append(_error("Workflow must have connections object"))
            return issues

        for source, ports in connections.items():
            if source not in node_names:
                issues.append(_error(f"Connection source node '{source}' does not exist"))
            for target in _connection_targets(ports):
                if target not in node_names:
                    issues.append(_error(f"Connection target node '{target}' does not exist"))

        return issues

    def _format_validation_errors(self, errors: Any, path: str = "") -> List[str]:
        """Format Cerberus validation errors into readable messages."""
        formatted_errors: List[str] = []

        for field, error_info in errors.items():
            current_path = f"{path}.{field}" if path else str(field)

            if isinstance(error_info, list):
                for error in error_info:
                    if isinstance(error, dict):
                        formatted_errors.extend(self._format_validation_errors(error, current_path))
                    else:
                        formatted_errors.append(f"{current_path}: {error}")
            elif isinstance(error_info, dict):
                formatted_errors.extend(self._format_validation_errors(error_info, current_path))

        return formatted_errors


def _connection_targets(ports: Any) -> List[str]:
    """Target node names in one source's ``{type: [[{node, ...}]]}`` map."""
    targets: List[str] = []
    if not isinstance(ports, Mapping):
        return targets
    for outputs in ports.values():
        if not isinstance(outputs, list):
            continue
        for output in outputs:
            if not isinstance(output, list):
                continue
            for entry in output:
                if isinstance(entry, Mapping):
                    targets.append(str(entry.get("node")))
    return targets


def _issue(message: str, severity: Severity, source: Optional[Any]) -> ValidationIssue:
    return ValidationIssue(
        message=message,
        line=getattr(source, "line", None),
        column=getattr(source, "column", None),
        severity=severity,
    )


def _error(message: str, source: Optional[Any] = None) -> ValidationIssue:
    return _issue(message, Severity.ERROR, source)


def _warning(message: str, source: Optional[Any] = None) -> ValidationIssue:
    return _issue(message, Severity.WARNING, source)
