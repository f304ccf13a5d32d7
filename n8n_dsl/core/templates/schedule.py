"""
Schedule Trigger Template
=========================

Maps ``trigger.schedule`` nodes to n8n's ``rule.interval`` structure, either
from an explicit interval selector or by classifying a 5-field cron
expression. Cron shapes that are not recognized are passed through as a raw
cron rule.
"""

from typing import Any, Dict, Mapping, Optional
import re

from .base import NodeTemplate

INTERVAL_UNITS = ("seconds", "minutes", "hours", "days", "weeks", "months")

# Fields that hold the cron expression, in lookup order
CRON_KEYS = ("cron", "cronExpression", "expression")

STEP = re.compile(r"^\*/(\d+)$")

EVERY = {"*", "*/1"}


def _unit(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    unit = value.strip().lower()
    if not unit.endswith("s"):
        unit += "s"
    return unit if unit in INTERVAL_UNITS else None


def _positive_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)) and value > 0:
        return int(value)
    if isinstance(value, str):
        text = value.strip()
        if text.isascii() and text.isdigit() and int(text) > 0:
            return int(text)
    return None


def interval_rule(unit: str, amount: int = 1) -> Dict[str, Any]:
    """Single interval entry for ``unit`` every ``amount`` units."""
    return {"field": unit, f"{unit}Interval": amount}


def classify_cron(expression: str) -> Dict[str, Any]:
    """
    Classify a 5-field cron expression into an interval rule.

    Args:
        expression: Cron expression text

    Returns:
        Interval entry; unrecognized shapes become a ``cronExpression`` entry
    """
    fields = expression.split()
    if len(fields) == 5:
        minute, hour, day, month, weekday = fields
        rest = (hour, day, month, weekday)

        if all(field in EVERY for field in fields):
            return interval_rule("minutes")
        if minute == "0" and all(field == "*" for field in rest):
            return interval_rule("hours")
        if minute == "0" and hour == "0" and all(field == "*" for field in rest[1:]):
            return interval_rule("days")

        step = STEP.match(minute)
        if step and int(step.group(1)) > 0 and all(field == "*" for field in rest):
            return interval_rule("minutes", int(step.group(1)))

    return {"field": "cronExpression", "expression": expression.strip()}


class ScheduleTriggerTemplate(NodeTemplate):
    """Schedule Trigger node parameter mapping."""

    node_type = "n8n-nodes-base.scheduleTrigger"

    def map_parameters(self, params: Mapping[str, Any]) -> Dict[str, Any]:
        rule = params.get("rule")
        if isinstance(rule, Mapping) and isinstance(rule.get("interval"), list):
            return {"rule": dict(rule)}

        unit = _unit(params.get("interval"))
        if unit is not None:
            return {"rule": {"interval": [self._interval(unit, params)]}}

        for key in CRON_KEYS:
            expression = params.get(key)
            if isinstance(expression, str) and expression.strip():
                return {"rule": {"interval": [classify_cron(expression)]}}

        return {"rule": {"interval": [interval_rule("hours")]}}

    @staticmethod
    def _interval(unit: str, params: Mapping[str, Any]) -> Dict[str, Any]:
        amount = _positive_int(params.get("every"))
        if amount is None:
            amount = _positive_int(params.get(f"{unit}Interval"))
        entry = interval_rule(unit, amount or 1)

        for key in ("triggerAtHour", "triggerAtMinute"):
            value = params.get(key)
            if isinstance(value, int) and not isinstance(value, bool) and value >= 0:
                entry[key] = value
        return entry
