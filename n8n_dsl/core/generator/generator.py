"""
Workflow Generator
==================

Maps a parsed Program onto the n8n workflow graph: resolves node types,
lays nodes out left to right, evaluates and reshapes node parameters, and
builds the connection map.

Generation is fail-fast: an unknown node type, a module declaration or a
connection to a missing node aborts with a typed error and no partial
document.
"""

from typing import Any, Dict, List, Optional, Set, Tuple, Union
import secrets
import uuid

from n8n_dsl.config.logging import get_logger
from n8n_dsl.core.errors import (
    UnknownConnectionEndpointError,
    UnknownNodeTypeError,
    UnsupportedModuleReferenceError,
)
from n8n_dsl.core.generator.evaluator import Clock, EnvLookup, ExpressionEvaluator, FileLoader
from n8n_dsl.core.generator.node_types import default_type_version, resolve_node_type
from n8n_dsl.core.templates.registry import get_node_template
from n8n_dsl.models.ast import ConnectionDeclaration, ModuleDeclaration, NodeDeclaration, Program
from n8n_dsl.models.schemas import GeneratorOptions
from n8n_dsl.models.workflow import (
    NodeConnection,
    WorkflowConnections,
    WorkflowDocument,
    WorkflowMeta,
    WorkflowNode,
    WorkflowSettings,
)

logger = get_logger(__name__)

Number = Union[int, float]

CONNECTION_TYPE = "main"

# port name -> output index; anything else is index 0
PORT_INDEXES = {
    "main": 0,
    "output": 0,
    "true": 0,
    "false": 1,
}


def port_index(port: str) -> int:
    """Output index for a named source port."""
    return PORT_INDEXES.get(port.lower(), 0)


class WorkflowGenerator:
    """Generates n8n workflow documents from parsed programs."""

    def __init__(
        self,
        options: Optional[GeneratorOptions] = None,
        env_lookup: Optional[EnvLookup] = None,
        clock: Optional[Clock] = None,
        file_loader: Optional[FileLoader] = None,
    ) -> None:
        self.options = options or GeneratorOptions()
        self.env_lookup = env_lookup
        self.clock = clock
        self.file_loader = file_loader
        self.logger: Any = logger.bind(component="generator")  # structlog.BoundLoggerBase

    def generate(self, program: Program) -> WorkflowDocument:
        """
        Generate an n8n workflow document.

        Args:
            program: Parsed program

        Returns:
            Workflow document

        Raises:
            UnsupportedModuleReferenceError: For any module declaration
            UnknownNodeTypeError: For a DSL type tag with no n8n type
            UnknownConnectionEndpointError: For connections to missing nodes
            ExpressionError: For unsupported built-in calls
        """
        workflow = program.workflow

        # Fresh symbol table per call
        evaluator = ExpressionEvaluator(
            env_lookup=self.env_lookup, clock=self.clock, file_loader=self.file_loader
        )
        evaluator.bind_parameters(workflow.parameters)
        evaluator.bind_variables(workflow.variables)

        nodes: List[WorkflowNode] = []
        cursor_x, cursor_y = self.options.start_position

        for entry in workflow.nodes:
            if isinstance(entry, ModuleDeclaration):
                raise UnsupportedModuleReferenceError(
                    entry.name, entry.module_path, entry.line, entry.column
                )

            position, cursor_x = self._place(entry, cursor_x, cursor_y)
            nodes.append(self._generate_node(entry, position, evaluator))

        connections = self._build_connections(workflow.connections, set(workflow.node_names()))

        document = WorkflowDocument(
            nodes=nodes,
            connections=connections,
            pin_data={},
            meta=WorkflowMeta(instance_id=self.options.instance_id or secrets.token_hex(32)),
            name=workflow.name,
            active=False,
            settings=WorkflowSettings(),
        )

        self.logger.info(
            "Generated workflow",
            workflow=workflow.name,
            nodes=len(nodes),
            connections=len(workflow.connections),
        )
        return document

    def _place(
        self, node: NodeDeclaration, cursor_x: Number, cursor_y: Number
    ) -> Tuple[List[Number], Number]:
        """Position for a node and the advanced layout cursor."""
        if node.position is not None:
            return [node.position[0], node.position[1]], cursor_x
        if not self.options.auto_layout:
            return [0, 0], cursor_x
        return [cursor_x, cursor_y], cursor_x + self.options.spacing

    def _generate_node(
        self,
        node: NodeDeclaration,
        position: List[Number],
        evaluator: ExpressionEvaluator,
    ) -> WorkflowNode:
        n8n_type = resolve_node_type(node.node_type)
        if n8n_type is None:
            raise UnknownNodeTypeError(node.node_type, node.line, node.column)

        raw_params: Dict[str, Any] = {
            key: evaluator.evaluate(expr) for key, expr in node.parameters.items()
        }

        template = get_node_template(n8n_type)
        if template is None:
            self.logger.debug("No parameter template, passing raw parameters", node_type=n8n_type)
            parameters = raw_params
        else:
            parameters = template.map_parameters(raw_params)

        return WorkflowNode(
            id=str(uuid.uuid4()),
            name=node.name,
            type=n8n_type,
            position=position,
            parameters=parameters,
            type_version=default_type_version(n8n_type),
        )

    @staticmethod
    def _build_connections(
        declarations: List[ConnectionDeclaration], node_names: Set[str]
    ) -> WorkflowConnections:
        connections: WorkflowConnections = {}

        for connection in declarations:
            if connection.source.node not in node_names:
                raise UnknownConnectionEndpointError(
                    connection.source.node, "source", connection.line, connection.column
                )
            if connection.target.node not in node_names:
                raise UnknownConnectionEndpointError(
                    connection.target.node, "target", connection.line, connection.column
                )

            index = port_index(connection.source.port)
            outputs = connections.setdefault(connection.source.node, {}).setdefault(
                CONNECTION_TYPE, []
            )
            # Pad lower output indexes so the list position is the output index
            while len(outputs) <= index:
                outputs.append([])
            outputs[index].append(
                NodeConnection(node=connection.target.node, type=CONNECTION_TYPE, index=0)
            )

        return connections


def generate(program: Program, options: Optional[GeneratorOptions] = None) -> WorkflowDocument:
    """
    Generate an n8n workflow document from a Program.

    Args:
        program: Parsed program
        options: Layout and identity options

    Returns:
        Workflow document
    """
    return WorkflowGenerator(options).generate(program)
