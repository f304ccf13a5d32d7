"""
Abstract Syntax Tree
====================

Pydantic models for parsed workflow DSL source. Each node owns its children;
expressions form a tagged union discriminated by the ``kind`` field.
"""

from typing import Annotated, Any, Dict, List, Literal, Optional, Tuple, Union
from enum import Enum

from pydantic import BaseModel, Field

Number = Union[int, float]


# Enums
class ParameterType(str, Enum):
    """Declared workflow parameter types."""
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    ARRAY = "array"
    OBJECT = "object"


# Base Models
class ASTNode(BaseModel):
    """Base model carrying the source position of a syntax element."""
    line: Optional[int] = Field(None, description="1-based source line")
    column: Optional[int] = Field(None, description="1-based source column")


# Expressions
class LiteralExpression(ASTNode):
    """String, number or boolean literal."""
    kind: Literal["literal"] = "literal"
    value: Union[bool, int, float, str]


class IdentifierExpression(ASTNode):
    """Bare name resolved against variables and parameters."""
    kind: Literal["identifier"] = "identifier"
    name: str


class FunctionCallExpression(ASTNode):
    """Built-in function call such as now() or env("NAME")."""
    kind: Literal["function_call"] = "function_call"
    name: str
    arguments: List["Expression"] = Field(default_factory=list)


class TemplateExpression(ASTNode):
    """String literal containing ${...} spans, expanded at generation time."""
    kind: Literal["template"] = "template"
    template: str


class ObjectExpression(ASTNode):
    """Ordered key to expression mapping."""
    kind: Literal["object"] = "object"
    properties: Dict[str, "Expression"] = Field(default_factory=dict)


class ArrayExpression(ASTNode):
    """Ordered expression list."""
    kind: Literal["array"] = "array"
    elements: List["Expression"] = Field(default_factory=list)


Expression = Annotated[
    Union[
        LiteralExpression,
        IdentifierExpression,
        FunctionCallExpression,
        TemplateExpression,
        ObjectExpression,
        ArrayExpression,
    ],
    Field(discriminator="kind"),
]


# Declarations
class ParameterValidation(BaseModel):
    """Optional constraints on a parameter's value."""
    min: Optional[Number] = None
    max: Optional[Number] = None
    pattern: Optional[str] = None
    allowed: Optional[List[Union[bool, int, float, str]]] = None


class ParameterDeclaration(ASTNode):
    """Workflow input parameter: ``param name type (= default)?``."""
    kind: Literal["parameter"] = "parameter"
    name: str
    param_type: ParameterType
    default_value: Optional[Expression] = None
    required: bool = Field(True, description="True iff no default value was given")
    validation: Optional[ParameterValidation] = None


class VariableDeclaration(ASTNode):
    """Workflow variable: ``var name = expression``."""
    kind: Literal["variable"] = "variable"
    name: str
    value: Expression


class NodeDeclaration(ASTNode):
    """A unit of work: ``node name "type.tag" { key: expression }``."""
    kind: Literal["node"] = "node"
    name: str
    node_type: str = Field(..., description="DSL type tag, e.g. http.request")
    parameters: Dict[str, Expression] = Field(default_factory=dict)
    position: Optional[Tuple[Number, Number]] = Field(None, description="Explicit canvas position")


class ModuleDeclaration(ASTNode):
    """Placeholder for an external DSL module: ``module name = "path" { ... }``."""
    kind: Literal["module"] = "module"
    name: str
    module_path: str
    parameters: Dict[str, Expression] = Field(default_factory=dict)


NodeEntry = Annotated[Union[NodeDeclaration, ModuleDeclaration], Field(discriminator="kind")]


class ConnectionEndpoint(BaseModel):
    """One side of a connection: a node name and a port name."""
    node: str
    port: str = "main"


class ConnectionDeclaration(ASTNode):
    """Directed edge: ``connect source(.port)? -> target(.port)?``."""
    kind: Literal["connection"] = "connection"
    source: ConnectionEndpoint
    target: ConnectionEndpoint


class WorkflowDeclaration(ASTNode):
    """Complete workflow body in declaration order."""
    kind: Literal["workflow"] = "workflow"
    name: str
    parameters: List[ParameterDeclaration] = Field(default_factory=list)
    variables: List[VariableDeclaration] = Field(default_factory=list)
    nodes: List[NodeEntry] = Field(default_factory=list)
    connections: List[ConnectionDeclaration] = Field(default_factory=list)

    def node_names(self) -> List[str]:
        """Names of all node entries, modules included, in declaration order."""
        return [node.name for node in self.nodes]


class Program(ASTNode):
    """Root of the AST."""
    kind: Literal["program"] = "program"
    workflow: WorkflowDeclaration


# Update forward references
FunctionCallExpression.model_rebuild()
ObjectExpression.model_rebuild()
ArrayExpression.model_rebuild()
ParameterDeclaration.model_rebuild()
VariableDeclaration.model_rebuild()
NodeDeclaration.model_rebuild()
ModuleDeclaration.model_rebuild()


def expression_to_python(expr: Any) -> Any:
    """Convert a literal-only expression tree to plain Python values.

    Returns None when the tree contains anything that needs evaluation
    (identifiers, templates, function calls).
    """
    if isinstance(expr, LiteralExpression):
        return expr.value
    if isinstance(expr, ArrayExpression):
        values = [expression_to_python(element) for element in expr.elements]
        return None if any(value is None for value in values) else values
    if isinstance(expr, ObjectExpression):
        result: Dict[str, Any] = {}
        for key, value in expr.properties.items():
            converted = expression_to_python(value)
            if converted is None:
                return None
            result[key] = converted
        return result
    return None
