"""
Node Type Tables
================

Read-only lookup tables mapping DSL node type tags to n8n node types and
n8n node types to their default schema versions.
"""

from types import MappingProxyType
from typing import List, Mapping, Optional, Union

# DSL tag -> n8n node type
DSL_TO_N8N_NODE_TYPES: Mapping[str, str] = MappingProxyType(
    {
        # Triggers
        "trigger.manual": "n8n-nodes-base.manualTrigger",
        "trigger.schedule": "n8n-nodes-base.scheduleTrigger",
        "trigger.webhook": "n8n-nodes-base.webhook",
        "trigger.form": "n8n-nodes-base.formTrigger",
        # Core nodes
        "data.set": "n8n-nodes-base.set",
        "data.transform": "n8n-nodes-base.code",
        "flow.if": "n8n-nodes-base.if",
        "flow.switch": "n8n-nodes-base.switch",
        "flow.splitOut": "n8n-nodes-base.splitOut",
        "flow.aggregate": "n8n-nodes-base.aggregate",
        # HTTP and integrations
        "http.request": "n8n-nodes-base.httpRequest",
        "integration.email": "n8n-nodes-base.gmail",
        "integration.slack": "n8n-nodes-base.slack",
        "integration.sheets": "n8n-nodes-base.googleSheets",
        # Utilities
        "util.note": "n8n-nodes-base.stickyNote",
        "util.noop": "n8n-nodes-base.noOp",
    }
)

# n8n node type -> default typeVersion
DEFAULT_TYPE_VERSIONS: Mapping[str, Union[int, float]] = MappingProxyType(
    {
        "n8n-nodes-base.manualTrigger": 1,
        "n8n-nodes-base.scheduleTrigger": 1.2,
        "n8n-nodes-base.webhook": 2,
        "n8n-nodes-base.formTrigger": 2.2,
        "n8n-nodes-base.set": 3.4,
        "n8n-nodes-base.code": 2,
        "n8n-nodes-base.if": 2.2,
        "n8n-nodes-base.switch": 1,
        "n8n-nodes-base.httpRequest": 4.2,
        "n8n-nodes-base.gmail": 2.1,
        "n8n-nodes-base.googleSheets": 4.6,
        "n8n-nodes-base.stickyNote": 1,
        "n8n-nodes-base.noOp": 1,
    }
)

FALLBACK_TYPE_VERSION = 1


def resolve_node_type(dsl_type: str) -> Optional[str]:
    """Return the n8n node type for a DSL tag, or None when unknown."""
    return DSL_TO_N8N_NODE_TYPES.get(dsl_type)


def default_type_version(n8n_type: str) -> Union[int, float]:
    """Return the default schema version for an n8n node type."""
    return DEFAULT_TYPE_VERSIONS.get(n8n_type, FALLBACK_TYPE_VERSION)


def get_supported_node_types() -> List[str]:
    """
    Get list of supported DSL node type tags.

    Returns:
        List of DSL type tag strings
    """
    return list(DSL_TO_N8N_NODE_TYPES)
