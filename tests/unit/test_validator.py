"""
Unit Tests for Workflow Validator
=================================

Tests for the AST validation pass and the generated-graph validation pass.
"""

import pytest

from n8n_dsl.core.dsl.parser import parse_source
from n8n_dsl.core.generator.generator import generate
from n8n_dsl.core.validation.validator import WorkflowValidator
from n8n_dsl.models.schemas import Severity

from tests.utils.assertions import assert_issue
from tests.utils.data_generators import DSLSourceGenerator


def errors_of(issues):
    return [issue for issue in issues if issue.severity == Severity.ERROR]


def warnings_of(issues):
    return [issue for issue in issues if issue.severity == Severity.WARNING]


class TestProgramValidation:
    """Test the AST pass."""

    @pytest.fixture
    def validator(self):
        """Create validator instance."""
        return WorkflowValidator()

    def check(self, validator, source):
        return validator.validate_program(parse_source(source))

    def test_valid_program(self, validator, sample_dsl):
        """Test a well-formed program has no findings."""
        assert self.check(validator, sample_dsl) == []

    def test_duplicate_parameter(self, validator):
        issues = self.check(validator, 'workflow "w" {\n param a string\n param a number\n}')
        issue = assert_issue(issues, "Duplicate parameter name: a")
        assert issue.line == 3

    def test_duplicate_variable(self, validator):
        issues = self.check(validator, 'workflow "w" { var v = 1 var v = 2 }')
        assert_issue(issues, "Duplicate variable name: v")

    def test_variable_parameter_collision(self, validator):
        issues = self.check(validator, 'workflow "w" { param x string var x = "y" }')
        assert_issue(issues, "Variable 'x' conflicts with parameter name")

    def test_duplicate_node(self, validator):
        """Test duplicate node names are reported once per repeat."""
        issues = self.check(validator, DSLSourceGenerator.duplicate_nodes())
        issue = assert_issue(issues, "Duplicate node name: a")
        assert issue.line == 4
        assert warnings_of(issues) == []

    def test_module_names_count_as_nodes(self, validator):
        issues = self.check(
            validator, 'workflow "w" { node m "util.noop" {} module m = "./m.dsl" {} connect m -> m }'
        )
        assert_issue(issues, "Duplicate node name: m")

    def test_dangling_connection(self, validator):
        """Test one error per unresolved endpoint."""
        issues = self.check(validator, DSLSourceGenerator.dangling_connection())
        errors = errors_of(issues)
        assert len(errors) == 2
        assert "Connection source node 'missing' does not exist" in errors[0].message
        assert "Connection target node 'alsoMissing' does not exist" in errors[1].message

    def test_unconnected_node_warning(self, validator):
        """Test isolated nodes produce exactly one warning each."""
        issues = self.check(validator, DSLSourceGenerator.unconnected_node())
        assert errors_of(issues) == []
        warnings = warnings_of(issues)
        assert len(warnings) == 1
        assert warnings[0].message == "Node 'lonely' is not connected to any other nodes"
        assert warnings[0].line == 5

    def test_default_type_mismatch_warning(self, validator):
        issues = self.check(
            validator, 'workflow "w" { param limit number = "ten" param ok boolean = true }'
        )
        assert_issue(issues, "declared number but its default is string", Severity.WARNING)
        assert len(issues) == 1

    def test_non_literal_defaults_are_not_type_checked(self, validator):
        issues = self.check(validator, 'workflow "w" { param a number = "${b}" }')
        assert issues == []

    def test_constraint_violations(self, validator):
        """Test min, max, pattern and allowed constraints on defaults."""
        issues = self.check(
            validator,
            'workflow "w" {\n'
            " param low number = 0 { min: 1 }\n"
            " param high number = 70000 { max: 65535 }\n"
            ' param code string = "abc" { pattern: "^[0-9]+$" }\n'
            ' param env string = "qa" { allowed: ["dev", "prod"] }\n'
            ' param fine number = 5 { min: 1, max: 10 }\n'
            "}",
        )
        assert_issue(issues, "Parameter 'low' default 0 is below minimum 1")
        assert_issue(issues, "Parameter 'high' default 70000 is above maximum 65535")
        assert_issue(issues, "Parameter 'code' default does not match pattern")
        assert_issue(issues, "Parameter 'env' default qa is not one of")
        assert len(errors_of(issues)) == 4

    def test_invalid_pattern(self, validator):
        issues = self.check(validator, 'workflow "w" { param p string = "x" { pattern: "[" } }')
        assert_issue(issues, "Parameter 'p' has an invalid pattern")


class TestWorkflowValidation:
    """Test the generated-graph pass."""

    @pytest.fixture
    def validator(self):
        return WorkflowValidator()

    @pytest.fixture
    def document(self, sample_dsl):
        return generate(parse_source(sample_dsl))

    def test_generated_document_is_valid(self, validator, document):
        """Test generated documents pass, as model or dictionary."""
        assert validator.validate_workflow(document) == []
        assert validator.validate_workflow(document.to_dict()) == []

    def test_no_nodes(self, validator):
        issues = validator.validate_workflow({"nodes": [], "connections": {}})
        assert_issue(issues, "Workflow must have at least one node")

    def test_missing_connections_object(self, validator, document):
        data = document.to_dict()
        del data["connections"]
        assert_issue(validator.validate_workflow(data), "Workflow must have connections object")

    def test_node_schema_violations(self, validator, document):
        """Test per-node required fields and shapes."""
        data = document.to_dict()
        data["nodes"][0]["id"] = ""
        data["nodes"][1]["position"] = [1, 2, 3]
        del data["nodes"][1]["typeVersion"]

        messages = [issue.message for issue in validator.validate_workflow(data)]
        assert any(m.startswith("Node 'start': id:") for m in messages)
        assert any(m.startswith("Node 'fetch': position:") for m in messages)
        assert any(m.startswith("Node 'fetch': typeVersion:") for m in messages)

    def test_nested_schema_errors_are_flattened(self, validator, document):
        data = document.to_dict()
        data["nodes"][0]["position"] = [0, "left"]
        messages = [issue.message for issue in validator.validate_workflow(data)]
        assert any(m.startswith("Node 'start': position.1:") for m in messages)

    def test_non_object_node(self, validator, document):
        data = document.to_dict()
        data["nodes"].append("oops")
        assert_issue(validator.validate_workflow(data), "Node at index 2 must be an object")

    def test_duplicate_names(self, validator, document):
        data = document.to_dict()
        data["nodes"][1]["name"] = "start"
        data["connections"] = {}
        assert_issue(validator.validate_workflow(data), "Duplicate node name: start")

    def test_dangling_connections(self, validator, document):
        data = document.to_dict()
        data["connections"]["ghost"] = {"main": [[{"node": "phantom", "type": "main", "index": 0}]]}
        issues = validator.validate_workflow(data)
        assert_issue(issues, "Connection source node 'ghost' does not exist")
        assert_issue(issues, "Connection target node 'phantom' does not exist")

    def test_graph_issues_have_no_position(self, validator):
        issues = validator.validate_workflow({"nodes": [], "connections": {}})
        assert issues[0].line is None and issues[0].column is None
