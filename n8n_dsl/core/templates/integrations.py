"""
Integration Templates
=====================

Parameter mappings for the email-send, webhook-trigger and sticky-note
nodes. Unknown keys on the Gmail node are passed through so the full node
surface stays reachable from the DSL.
"""

from typing import Any, Dict, Mapping

from .base import NodeTemplate

# DSL key -> Gmail parameter
GMAIL_ALIASES = {
    "to": "sendTo",
    "body": "message",
    "bodyType": "emailType",
}

WEBHOOK_METHODS = {"GET", "POST", "PUT", "DELETE", "PATCH", "HEAD"}

RESPONSE_MODES = {"onReceived", "lastNode", "responseNode"}


def _text(value: Any, default: str = "") -> str:
    return value if isinstance(value, str) else default


class GmailTemplate(NodeTemplate):
    """Gmail send-message mapping."""

    node_type = "n8n-nodes-base.gmail"

    def map_parameters(self, params: Mapping[str, Any]) -> Dict[str, Any]:
        mapped: Dict[str, Any] = {
            "operation": "send",
            "sendTo": _text(params.get("to")),
            "subject": _text(params.get("subject")),
            "message": _text(params.get("body")),
            "emailType": _text(params.get("bodyType"), "text"),
        }
        for key, value in params.items():
            if key not in GMAIL_ALIASES:
                mapped[key] = value
        mapped.setdefault("options", {})
        return mapped


class WebhookTemplate(NodeTemplate):
    """Webhook trigger mapping."""

    node_type = "n8n-nodes-base.webhook"

    def map_parameters(self, params: Mapping[str, Any]) -> Dict[str, Any]:
        method = str(params.get("method") or params.get("httpMethod") or "GET").upper()
        if method not in WEBHOOK_METHODS:
            method = "GET"

        path = _text(params.get("path")).strip("/") or "webhook"

        mapped: Dict[str, Any] = {"httpMethod": method, "path": path}
        response_mode = params.get("responseMode")
        if response_mode in RESPONSE_MODES:
            mapped["responseMode"] = response_mode
        options = params.get("options")
        mapped["options"] = dict(options) if isinstance(options, Mapping) else {}
        return mapped


class StickyNoteTemplate(NodeTemplate):
    """Canvas sticky note."""

    node_type = "n8n-nodes-base.stickyNote"

    def map_parameters(self, params: Mapping[str, Any]) -> Dict[str, Any]:
        mapped: Dict[str, Any] = {"content": _text(params.get("content"))}
        for key in ("height", "width", "color"):
            value = params.get(key)
            if isinstance(value, (int, float)) and not isinstance(value, bool):
                mapped[key] = value
        return mapped
