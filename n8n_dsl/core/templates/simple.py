"""
Simple Node Templates
=====================

Structural reshaping for code, field-assignment and parameterless nodes.
"""

from typing import Any, Dict, List, Mapping

from n8n_dsl.utils.values import stringify, value_type
from .base import NodeTemplate

DEFAULT_JS_CODE = "return items;"


class CodeTemplate(NodeTemplate):
    """Code node: wraps user code with an execution-mode flag."""

    node_type = "n8n-nodes-base.code"

    def map_parameters(self, params: Mapping[str, Any]) -> Dict[str, Any]:
        mode = "runOnceForAllItems"
        if str(params.get("mode") or "").lower() in ("each", "runonceforeachitem"):
            mode = "runOnceForEachItem"

        code = params.get("code")
        if str(params.get("language") or "").lower() == "python":
            return {
                "mode": mode,
                "language": "python",
                "pythonCode": code if isinstance(code, str) and code else "return _input.all()",
            }

        return {
            "mode": mode,
            "jsCode": code if isinstance(code, str) and code else DEFAULT_JS_CODE,
        }


class SetTemplate(NodeTemplate):
    """Set node: flat assignment map to typed assignment list."""

    node_type = "n8n-nodes-base.set"

    def map_parameters(self, params: Mapping[str, Any]) -> Dict[str, Any]:
        assignments: List[Dict[str, Any]] = []

        values = params.get("assignments")
        if isinstance(values, Mapping):
            for name, value in values.items():
                kind = value_type(value)
                assignments.append(
                    {
                        "id": self.new_id(),
                        "name": str(name),
                        # n8n stores arrays and objects as JSON text
                        "value": stringify(value) if kind in ("array", "object") else value,
                        "type": kind,
                    }
                )

        mapped: Dict[str, Any] = {"assignments": {"assignments": assignments}}
        if isinstance(params.get("includeOtherFields"), bool):
            mapped["includeOtherFields"] = params["includeOtherFields"]
        mapped["options"] = {}
        return mapped


class ManualTriggerTemplate(NodeTemplate):
    """Manual Trigger node; takes no parameters."""

    node_type = "n8n-nodes-base.manualTrigger"

    def map_parameters(self, params: Mapping[str, Any]) -> Dict[str, Any]:
        return {}


class NoOpTemplate(NodeTemplate):
    node_type = "n8n-nodes-base.noOp"

    def map_parameters(self, params: Mapping[str, Any]) -> Dict[str, Any]:
        return {}
