"""
Node Template Registry
======================

Dispatches an n8n node type to the template that reshapes its parameters.
"""

from typing import Dict, List, Optional, Type

from .base import NodeTemplate
from .conditional import IfTemplate
from .http_request import HttpRequestTemplate
from .integrations import GmailTemplate, StickyNoteTemplate, WebhookTemplate
from .schedule import ScheduleTriggerTemplate
from .simple import CodeTemplate, ManualTriggerTemplate, NoOpTemplate, SetTemplate


class NodeTemplateRegistry:
    """Lookup from n8n node type to template class."""

    _templates: Dict[str, Type[NodeTemplate]] = {
        template.node_type: template
        for template in (
            HttpRequestTemplate,
            GmailTemplate,
            IfTemplate,
            ScheduleTriggerTemplate,
            CodeTemplate,
            SetTemplate,
            ManualTriggerTemplate,
            WebhookTemplate,
            StickyNoteTemplate,
            NoOpTemplate,
        )
    }

    @classmethod
    def create_template(cls, node_type: str) -> Optional[NodeTemplate]:
        """
        Create the template for an n8n node type.

        Args:
            node_type: n8n node type, e.g. ``n8n-nodes-base.httpRequest``

        Returns:
            Template instance, or None when the type has no mapping
        """
        template_class = cls._templates.get(node_type)
        if template_class is None:
            return None
        return template_class()

    @classmethod
    def supported_node_types(cls) -> List[str]:
        return list(cls._templates)


def get_node_template(node_type: str) -> Optional[NodeTemplate]:
    """Convenience wrapper around :meth:`NodeTemplateRegistry.create_template`."""
    return NodeTemplateRegistry.create_template(node_type)
