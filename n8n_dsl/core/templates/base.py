"""
Node Template Base
==================

Strategy interface for reshaping a node's flat, evaluated DSL parameters
into the nested parameter structure of its n8n node type.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Mapping
import uuid

from n8n_dsl.utils.values import stringify


class NodeTemplate(ABC):
    """Abstract base class for per-node-type parameter mappings.

    Implementations are pure and total: they never raise, and missing or
    malformed inputs fall back to defaults.
    """

    node_type: str = ""

    @abstractmethod
    def map_parameters(self, params: Mapping[str, Any]) -> Dict[str, Any]:
        """Map evaluated DSL parameters to n8n node parameters."""
        pass

    @staticmethod
    def new_id() -> str:
        """Fresh opaque identifier for generated sub-objects."""
        return str(uuid.uuid4())

    @staticmethod
    def name_value_pairs(values: Any) -> List[Dict[str, str]]:
        """Turn a mapping into n8n's ordered ``[{name, value}]`` parameter list."""
        if not isinstance(values, Mapping):
            return []
        return [{"name": str(name), "value": stringify(value)} for name, value in values.items()]
