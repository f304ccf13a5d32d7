"""
Workflow Document Models
========================

Pydantic models for the generated n8n workflow JSON document: nodes,
connection maps, metadata and settings. Field aliases carry the camelCase
names n8n expects on the wire.
"""

from typing import Any, Dict, List, Literal, Union
import json

from pydantic import BaseModel, ConfigDict, Field

Number = Union[int, float]


class NodeConnection(BaseModel):
    """A single edge entry: target node name, port type and input index."""
    node: str = Field(..., description="Target node name")
    type: str = Field("main", description="Connection port type")
    index: int = Field(0, ge=0, description="Input index on the target node")


# outputType -> [outputIndex][connectionIndex]
NodeConnections = Dict[str, List[List[NodeConnection]]]

# sourceNodeName -> NodeConnections
WorkflowConnections = Dict[str, NodeConnections]


class WorkflowNode(BaseModel):
    """A generated n8n node."""
    id: str = Field(..., description="Opaque unique node identifier")
    name: str = Field(..., description="Display name, unique within the workflow")
    type: str = Field(..., description="n8n node type, e.g. n8n-nodes-base.set")
    position: List[Number] = Field(..., min_length=2, max_length=2, description="[x, y]")
    parameters: Dict[str, Any] = Field(default_factory=dict, description="Node configuration")
    type_version: Number = Field(1, alias="typeVersion", description="Node schema version")

    model_config = ConfigDict(populate_by_name=True)


class WorkflowMeta(BaseModel):
    """Workflow metadata."""
    instance_id: str = Field(..., alias="instanceId", description="Generating instance identifier")

    model_config = ConfigDict(populate_by_name=True)


class WorkflowSettings(BaseModel):
    """Workflow execution settings."""
    execution_order: Literal["v0", "v1"] = Field("v1", alias="executionOrder")

    model_config = ConfigDict(populate_by_name=True)


class WorkflowDocument(BaseModel):
    """Complete n8n workflow document."""
    nodes: List[WorkflowNode] = Field(default_factory=list, description="Workflow nodes")
    connections: WorkflowConnections = Field(
        default_factory=dict, description="Source node name to outgoing connections"
    )
    pin_data: Dict[str, Any] = Field(default_factory=dict, alias="pinData")
    meta: WorkflowMeta
    name: str = Field(..., description="Workflow name")
    active: bool = Field(False, description="Whether the workflow is active")
    settings: WorkflowSettings = Field(default_factory=WorkflowSettings)

    model_config = ConfigDict(populate_by_name=True)

    def get_node(self, name: str) -> WorkflowNode:
        """Return the node with the given display name."""
        for node in self.nodes:
            if node.name == name:
                return node
        raise KeyError(name)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the n8n wire shape."""
        return self.model_dump(by_alias=True, mode="json")

    def to_json(self, indent: int = 2) -> str:
        """Serialize to n8n workflow JSON text."""
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)
