"""
Value Helpers
=============

Rendering of evaluated DSL values as text and classification of their
runtime types, shared by the template evaluator and the node templates.
"""

from typing import Any
import json


def stringify(value: Any) -> str:
    """Render a JSON-compatible value the way it appears inside text."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, (list, dict)):
        return json.dumps(value, ensure_ascii=False)
    return str(value)


def value_type(value: Any) -> str:
    """Classify a host value as string, number, boolean, array or object."""
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, (list, tuple)):
        return "array"
    if isinstance(value, dict):
        return "object"
    return "string"
