"""
Conditional Branch Template
===========================

Maps ``flow.if`` nodes into n8n's filter structure. Accepts, in order of
precedence:

- ``conditions``: a list of condition objects (or an object holding one)
- ``condition``: a free-text condition string such as ``"${x} >= 10"``,
  optionally compound with ``||`` (OR) or ``&&`` (AND)
- flat ``leftValue`` / ``operator`` / ``rightValue`` fields

Operation names follow n8n's filter conventions (``equals``, ``gt``,
``gte``...); legacy spellings are accepted as synonyms.
"""

from datetime import datetime
from typing import Any, Dict, List, Mapping, Tuple
import re

from n8n_dsl.utils.values import stringify, value_type
from .base import NodeTemplate

# lower-cased spelling -> canonical operation
OPERATOR_SYNONYMS: Mapping[str, str] = {
    "==": "equals",
    "===": "equals",
    "equals": "equals",
    "equal": "equals",
    "eq": "equals",
    "!=": "notEquals",
    "!==": "notEquals",
    "notequals": "notEquals",
    "notequal": "notEquals",
    "ne": "notEquals",
    ">": "gt",
    "gt": "gt",
    "larger": "gt",
    "greaterthan": "gt",
    ">=": "gte",
    "gte": "gte",
    "largerequal": "gte",
    "greaterthanorequal": "gte",
    "<": "lt",
    "lt": "lt",
    "smaller": "lt",
    "lessthan": "lt",
    "<=": "lte",
    "lte": "lte",
    "smallerequal": "lte",
    "lessthanorequal": "lte",
    "contains": "contains",
    "includes": "contains",
    "startswith": "startsWith",
    "endswith": "endsWith",
    "regex": "regex",
    "matches": "regex",
}

STRING_OPERATIONS = {"contains", "startsWith", "endsWith", "regex"}

DATE_OPERATIONS = {
    "gt": "after",
    "lt": "before",
    "gte": "afterOrEquals",
    "lte": "beforeOrEquals",
}

SYMBOL_OPERATORS = ["===", "!==", "==", "!=", ">=", "<=", ">", "<"]

WORD_OPERATORS = sorted(
    (spelling for spelling in OPERATOR_SYNONYMS if spelling.isalpha()), key=len, reverse=True
)

SYMBOL_COMPARISON = re.compile(
    r"^(?P<left>.+?)\s*(?P<op>"
    + "|".join(re.escape(op) for op in SYMBOL_OPERATORS)
    + r")\s*(?P<right>.+)$",
    re.DOTALL,
)

WORD_COMPARISON = re.compile(
    r"^(?P<left>.+?)\s+(?P<op>" + "|".join(WORD_OPERATORS) + r")\s+(?P<right>.+)$",
    re.IGNORECASE | re.DOTALL,
)

NUMBER = re.compile(r"^-?\d+(\.\d+)?$")

COMBINATORS = {"and", "or"}


def normalize_operator(operator: Any) -> str:
    """Canonical operation name for an operator spelling; unknown ones become ``equals``."""
    if not isinstance(operator, str):
        return "equals"
    return OPERATOR_SYNONYMS.get(operator.strip().lower(), "equals")


def infer_operand(raw: str) -> Tuple[Any, str]:
    """Type an operand written as text: number, boolean, dateTime or string."""
    text = raw.strip()
    if NUMBER.match(text):
        return (float(text) if "." in text else int(text)), "number"
    if text.lower() in ("true", "false"):
        return text.lower() == "true", "boolean"
    if _is_date(text):
        return text, "dateTime"
    return text, "string"


def _is_date(text: str) -> bool:
    if len(text) < 8 or "-" not in text:
        return False
    try:
        datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        return False
    return True


def _unquote(text: str) -> str:
    text = text.strip()
    if len(text) >= 2 and text[0] == text[-1] and text[0] in ("'", '"'):
        return text[1:-1]
    return text


class IfTemplate(NodeTemplate):
    """If node parameter mapping."""

    node_type = "n8n-nodes-base.if"

    def map_parameters(self, params: Mapping[str, Any]) -> Dict[str, Any]:
        combinator = self._combinator(params.get("combinator"))
        conditions: List[Dict[str, Any]] = []

        structured = params.get("conditions")
        if isinstance(structured, Mapping):
            combinator = self._combinator(structured.get("combinator"), combinator)
            structured = structured.get("conditions")

        if isinstance(structured, list):
            for entry in structured:
                if isinstance(entry, Mapping):
                    conditions.append(self._from_fields(entry))
                elif isinstance(entry, str) and entry.strip():
                    conditions.append(self.parse_comparison(entry))
        elif isinstance(params.get("condition"), str) and params["condition"].strip():
            combinator, conditions = self.parse_condition(params["condition"])
        elif "leftValue" in params:
            conditions.append(self._from_fields(params))

        type_validation = "strict"
        if params.get("looseTypeValidation") is True or params.get("typeValidation") == "loose":
            type_validation = "loose"
        case_sensitive = params.get("caseSensitive")

        return {
            "conditions": {
                "options": {
                    "caseSensitive": case_sensitive if isinstance(case_sensitive, bool) else True,
                    "leftValue": "",
                    "typeValidation": type_validation,
                    "version": 2,
                },
                "conditions": conditions,
                "combinator": combinator,
            },
            "options": {},
        }

    def parse_condition(self, text: str) -> Tuple[str, List[Dict[str, Any]]]:
        """
        Parse a free-text condition, splitting compound ``||`` / ``&&`` forms.

        Text mixing ``||`` and ``&&`` has no single combinator and is tested
        for truthiness as a whole.

        Args:
            text: Condition text

        Returns:
            Tuple of (combinator, conditions)
        """
        if "||" in text and "&&" in text:
            return "and", [self._condition(text.strip(), True, "boolean", "equals")]
        for separator, combinator in (("||", "or"), ("&&", "and")):
            if separator in text:
                parts = [part.strip() for part in text.split(separator)]
                return combinator, [self.parse_comparison(part) for part in parts if part]
        return "and", [self.parse_comparison(text)]

    def parse_comparison(self, text: str) -> Dict[str, Any]:
        """Parse ``<left> <op> <right>``; anything else is tested for truthiness."""
        text = text.strip()
        matches = [
            match
            for match in (WORD_COMPARISON.match(text), SYMBOL_COMPARISON.match(text))
            if match
        ]
        if not matches:
            return self._condition(text, True, "boolean", "equals")

        # first operator in the text wins
        match = min(matches, key=lambda m: m.start("op"))
        operation = normalize_operator(match.group("op"))
        left = match.group("left").strip()
        right_text = _unquote(match.group("right"))

        if operation in STRING_OPERATIONS:
            return self._condition(left, right_text, "string", operation)

        right, operand_type = infer_operand(right_text)
        return self._condition(left, right, operand_type, operation)

    def _from_fields(self, entry: Mapping[str, Any]) -> Dict[str, Any]:
        left = entry.get("leftValue", "")
        right = entry.get("rightValue", "")
        operator = entry.get("operator")

        if isinstance(operator, Mapping):
            return {
                "id": entry.get("id") or self.new_id(),
                "leftValue": left,
                "rightValue": right,
                "operator": {
                    "type": str(operator.get("type") or value_type(right)),
                    "operation": str(operator.get("operation") or "equals"),
                },
            }

        operation = normalize_operator(operator if operator is not None else "==")
        if operation in STRING_OPERATIONS:
            text = right if isinstance(right, str) else stringify(right)
            return self._condition(left, text, "string", operation)
        if isinstance(right, str):
            right, operand_type = infer_operand(_unquote(right))
        else:
            operand_type = value_type(right)
        return self._condition(left, right, operand_type, operation)

    def _condition(self, left: Any, right: Any, operand_type: str, operation: str) -> Dict[str, Any]:
        if operand_type == "dateTime":
            operation = DATE_OPERATIONS.get(operation, operation)
        return {
            "id": self.new_id(),
            "leftValue": left,
            "rightValue": right,
            "operator": {"type": operand_type, "operation": operation},
        }

    @staticmethod
    def _combinator(value: Any, default: str = "and") -> str:
        if isinstance(value, str) and value.strip().lower() in COMBINATORS:
            return value.strip().lower()
        return default
