"""
Unit Tests for Workflow Generator
=================================

Tests for node generation, layout, connection building and fail-fast
generation errors.
"""

import pytest

from n8n_dsl.core.dsl.parser import parse_source
from n8n_dsl.core.errors import (
    UnknownConnectionEndpointError,
    UnknownNodeTypeError,
    UnsupportedModuleReferenceError,
)
from n8n_dsl.core.generator.generator import WorkflowGenerator, generate, port_index
from n8n_dsl.core.generator.node_types import (
    default_type_version,
    get_supported_node_types,
    resolve_node_type,
)
from n8n_dsl.models.schemas import GeneratorOptions

from tests.utils.assertions import assert_valid_workflow_document, connection_targets
from tests.utils.data_generators import DSLSourceGenerator


def build(source, **options):
    return generate(parse_source(source), GeneratorOptions(**options))


class TestNodeTypeTables:
    """Test the static lookup tables."""

    def test_resolve_known_tags(self):
        assert resolve_node_type("http.request") == "n8n-nodes-base.httpRequest"
        assert resolve_node_type("data.transform") == "n8n-nodes-base.code"
        assert resolve_node_type("util.note") == "n8n-nodes-base.stickyNote"

    def test_unknown_tag(self):
        assert resolve_node_type("http.graphql") is None

    def test_type_versions(self):
        assert default_type_version("n8n-nodes-base.httpRequest") == 4.2
        assert default_type_version("n8n-nodes-base.manualTrigger") == 1
        assert default_type_version("n8n-nodes-base.splitOut") == 1

    def test_supported_tags(self):
        supported = get_supported_node_types()
        assert len(supported) == 16
        assert "trigger.schedule" in supported

    def test_tables_are_read_only(self):
        from n8n_dsl.core.generator.node_types import DSL_TO_N8N_NODE_TYPES

        with pytest.raises(TypeError):
            DSL_TO_N8N_NODE_TYPES["custom.node"] = "x"  # type: ignore[index]


class TestNodeGeneration:
    """Test generated nodes."""

    def test_sample_workflow(self, sample_dsl):
        """Test the basic document shape."""
        document = build(sample_dsl, instance_id="abc")

        assert_valid_workflow_document(document)
        assert document.name == "Fetch Users"
        assert document.meta.instance_id == "abc"
        assert document.pin_data == {}

        start, fetch = document.nodes
        assert start.type == "n8n-nodes-base.manualTrigger"
        assert start.parameters == {}
        assert fetch.type == "n8n-nodes-base.httpRequest"
        assert fetch.type_version == 4.2
        assert fetch.parameters["url"] == "https://api.example.com/users"

    def test_fresh_ids(self, sample_dsl):
        """Test node ids and instance ids are unique per call."""
        first = build(sample_dsl)
        second = build(sample_dsl)
        assert first.nodes[0].id != first.nodes[1].id
        assert first.nodes[0].id != second.nodes[0].id
        assert first.meta.instance_id != second.meta.instance_id
        assert len(first.meta.instance_id) == 64

    def test_parameters_are_evaluated_before_mapping(self, parameterized_dsl, fake_env, fixed_clock):
        """Test variables, parameters and built-ins reach the node mapping."""
        generator = WorkflowGenerator(env_lookup=fake_env.get, clock=fixed_clock)
        fetch = generator.generate(parse_source(parameterized_dsl)).get_node("fetch")

        params = fetch.parameters
        assert params["method"] == "POST"
        assert params["url"] == "https://api.example.com/v1/items"
        assert params["queryParameters"]["parameters"] == [
            {"name": "limit", "value": "50"},
            {"name": "region", "value": "eu-west-1"},
        ]
        assert params["headerParameters"]["parameters"] == [
            {"name": "Authorization", "value": "Bearer secret-token"},
        ]
        assert params["bodyParameters"]["parameters"][0] == {
            "name": "requestedAt",
            "value": "2024-01-15T09:30:00.000Z",
        }
        assert params["genericAuthType"] == "httpHeaderAuth"

    def test_type_without_template_gets_raw_parameters(self):
        """Test unmapped node types pass evaluated parameters through."""
        document = build(
            'workflow "w" { node post "integration.slack" { channel: "#ops", text: "hi" } }'
        )
        assert document.nodes[0].type == "n8n-nodes-base.slack"
        assert document.nodes[0].parameters == {"channel": "#ops", "text": "hi"}

    def test_unknown_node_type(self):
        """Test unknown DSL tags fail generation."""
        with pytest.raises(UnknownNodeTypeError) as exc_info:
            build('workflow "w" {\n node x "custom.thing" {} }')
        assert exc_info.value.node_type == "custom.thing"
        assert exc_info.value.line == 2

    def test_module_fails_fast(self):
        """Test module declarations abort generation."""
        with pytest.raises(UnsupportedModuleReferenceError) as exc_info:
            build('workflow "w" { node a "util.noop" {} module m = "./m.dsl" {} }')
        assert exc_info.value.module_name == "m"


class TestLayout:
    """Test node positioning."""

    def test_linear_auto_layout(self):
        """Test left-to-right placement with the default spacing."""
        document = build(DSLSourceGenerator.linear_chain(3))
        assert [node.position for node in document.nodes] == [[0, 0], [200, 0], [400, 0]]

    def test_custom_start_and_spacing(self):
        document = build(DSLSourceGenerator.linear_chain(2), start_position=(100, 300), spacing=250)
        assert [node.position for node in document.nodes] == [[100, 300], [350, 300]]

    def test_explicit_position_does_not_advance_cursor(self):
        """Test explicit positions are used verbatim."""
        document = build(
            'workflow "w" {\n'
            ' node a "util.noop" {}\n'
            ' node b "util.noop" { position: [640, 480] }\n'
            ' node c "util.noop" {}\n'
            "}"
        )
        assert [node.position for node in document.nodes] == [[0, 0], [640, 480], [200, 0]]

    def test_auto_layout_disabled(self):
        document = build(DSLSourceGenerator.linear_chain(2), auto_layout=False)
        assert [node.position for node in document.nodes] == [[0, 0], [0, 0]]


class TestConnections:
    """Test connection map building."""

    def test_single_connection(self, sample_dsl):
        document = build(sample_dsl)
        assert list(document.connections) == ["start"]
        connection = document.connections["start"]["main"][0][0]
        assert (connection.node, connection.type, connection.index) == ("fetch", "main", 0)

    def test_fan_out_keeps_order(self):
        document = build(
            'workflow "w" { node a "util.noop" {} node b "util.noop" {} node c "util.noop" {}'
            " connect a -> b connect a -> c }"
        )
        assert connection_targets(document, "a") == ["b", "c"]

    def test_boolean_ports(self, branching_dsl):
        """Test true/false ports map to output indexes 0 and 1."""
        document = build(branching_dsl)
        assert connection_targets(document, "check", 0) == ["bigOrder"]
        assert connection_targets(document, "check", 1) == ["smallOrder"]

    def test_false_port_alone_pads_index_zero(self):
        document = build(
            'workflow "w" { node c "flow.if" {} node n "util.noop" {} connect c.false -> n }'
        )
        assert document.connections["c"]["main"][0] == []
        assert connection_targets(document, "c", 1) == ["n"]

    @pytest.mark.parametrize("port,index", [("main", 0), ("output", 0), ("true", 0), ("false", 1), ("other", 0)])
    def test_port_index(self, port, index):
        assert port_index(port) == index

    def test_missing_endpoint(self):
        """Test connections to undeclared nodes fail generation."""
        with pytest.raises(UnknownConnectionEndpointError) as exc_info:
            build('workflow "w" { node a "util.noop" {} connect a -> ghost }')
        assert exc_info.value.node_name == "ghost"
        assert exc_info.value.role == "target"


class TestSerialization:
    """Test the wire shape of generated documents."""

    def test_to_dict_uses_n8n_field_names(self, sample_dsl):
        data = build(sample_dsl, instance_id="fixed").to_dict()

        assert set(data) == {"nodes", "connections", "pinData", "meta", "name", "active", "settings"}
        assert data["meta"] == {"instanceId": "fixed"}
        assert data["settings"] == {"executionOrder": "v1"}
        assert data["nodes"][0]["typeVersion"] == 1
        assert data["nodes"][1]["position"] == [200, 0]
        assert data["connections"]["start"]["main"][0][0] == {
            "node": "fetch",
            "type": "main",
            "index": 0,
        }

    def test_to_json_is_indented(self, sample_dsl):
        text = build(sample_dsl).to_json()
        assert text.startswith('{\n  "nodes"')
