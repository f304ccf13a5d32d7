"""
HTTP Request Template
=====================

Maps ``http.request`` nodes: method and URL, header/query/body maps as
ordered parameter lists, and the ``auth`` block.
"""

from typing import Any, Dict, Mapping

from .base import NodeTemplate

BODY_METHODS = {"POST", "PUT", "PATCH"}

HTTP_METHODS = {"GET", "POST", "PUT", "DELETE", "PATCH", "HEAD", "OPTIONS"}

# auth.type -> n8n generic credential type
AUTH_TYPES = {
    "basic": "httpBasicAuth",
    "header": "httpHeaderAuth",
}


class HttpRequestTemplate(NodeTemplate):
    """HTTP Request node parameter mapping."""

    node_type = "n8n-nodes-base.httpRequest"

    def map_parameters(self, params: Mapping[str, Any]) -> Dict[str, Any]:
        method = str(params.get("method") or "GET").upper()
        if method not in HTTP_METHODS:
            method = "GET"

        url = params.get("url")
        mapped: Dict[str, Any] = {
            "method": method,
            "url": url if isinstance(url, str) else "",
        }

        mapped.update(self._map_auth(params.get("auth")))

        query = params.get("query")
        if isinstance(query, Mapping) and query:
            mapped["sendQuery"] = True
            mapped["queryParameters"] = {"parameters": self.name_value_pairs(query)}

        headers = params.get("headers")
        if isinstance(headers, Mapping) and headers:
            mapped["sendHeaders"] = True
            mapped["headerParameters"] = {"parameters": self.name_value_pairs(headers)}

        body = params.get("body")
        if method in BODY_METHODS and body not in (None, "", {}):
            mapped.update(self._map_body(body))

        options: Dict[str, Any] = {}
        timeout = params.get("timeout")
        if isinstance(timeout, (int, float)) and not isinstance(timeout, bool) and timeout > 0:
            options["timeout"] = timeout
        mapped["options"] = options

        return mapped

    def _map_body(self, body: Any) -> Dict[str, Any]:
        if isinstance(body, Mapping):
            return {
                "sendBody": True,
                "contentType": "json",
                "specifyBody": "keypair",
                "bodyParameters": {"parameters": self.name_value_pairs(body)},
            }
        if isinstance(body, str):
            return {
                "sendBody": True,
                "contentType": "json",
                "specifyBody": "json",
                "jsonBody": body,
            }
        return {}

    @staticmethod
    def _map_auth(auth: Any) -> Dict[str, Any]:
        if not isinstance(auth, Mapping):
            return {}
        auth_type = str(auth.get("type") or "none").lower()
        generic_type = AUTH_TYPES.get(auth_type)
        if generic_type is None:
            return {"authentication": "none"}
        return {
            "authentication": "genericCredentialType",
            "genericAuthType": generic_type,
        }
