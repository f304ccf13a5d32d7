"""
Node templates: per-node-type parameter reshaping strategies.
"""

from .base import NodeTemplate
from .conditional import IfTemplate
from .http_request import HttpRequestTemplate
from .integrations import GmailTemplate, StickyNoteTemplate, WebhookTemplate
from .registry import NodeTemplateRegistry, get_node_template
from .schedule import ScheduleTriggerTemplate, classify_cron
from .simple import CodeTemplate, ManualTriggerTemplate, NoOpTemplate, SetTemplate

__all__ = [
    "NodeTemplate",
    "NodeTemplateRegistry",
    "get_node_template",
    "HttpRequestTemplate",
    "IfTemplate",
    "ScheduleTriggerTemplate",
    "classify_cron",
    "CodeTemplate",
    "SetTemplate",
    "ManualTriggerTemplate",
    "NoOpTemplate",
    "GmailTemplate",
    "WebhookTemplate",
    "StickyNoteTemplate",
]
