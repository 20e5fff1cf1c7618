"""webhook.send action: deliver context data to an external URL over HTTP."""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

import httpx
from pydantic import HttpUrl, TypeAdapter, ValidationError

from bookflow.application.interfaces.services import ITemplateRenderer
from bookflow.domain.exceptions import ActionExecutionException
from bookflow.infrastructure.actions.base import BaseAction
from bookflow.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

ALLOWED_METHODS = ("POST", "PUT", "PATCH", "GET")
DEFAULT_TIMEOUT_SECONDS = 30
MAX_TIMEOUT_SECONDS = 300

_url_adapter: TypeAdapter[HttpUrl] = TypeAdapter(HttpUrl)


def _is_http_url(value: str) -> bool:
    try:
        _url_adapter.validate_python(value)
    except ValidationError:
        return False
    return True


def _is_json(value: str) -> bool:
    try:
        json.loads(value)
    except json.JSONDecodeError:
        return False
    return True


class SendWebhookAction(BaseAction):
    """POST (or PUT/PATCH/GET) JSON to a URL; 2xx is success, anything else raises.

    headers and body are JSON strings that may contain context placeholders;
    without a body the whole context is sent.
    """

    id = "webhook.send"
    name = "Send Webhook"
    description = "Send data to an external URL via HTTP request"
    category = "integration"
    icon = "PhWebhooksLogo"
    config_schema = {
        "url": {
            "type": "url",
            "label": "Webhook URL",
            "placeholder": "https://api.example.com/webhook",
            "required": True,
            "description": "The URL to send the webhook to",
        },
        "method": {
            "type": "select",
            "label": "HTTP Method",
            "options": [
                {"label": "POST", "value": "POST"},
                {"label": "PUT", "value": "PUT"},
                {"label": "PATCH", "value": "PATCH"},
            ],
            "default": "POST",
            "required": True,
        },
        "headers": {
            "type": "textarea",
            "label": "Headers (JSON)",
            "placeholder": '{"Authorization": "Bearer YOUR_TOKEN"}',
            "description": "Custom headers in JSON format",
            "required": False,
            "rows": 3,
        },
        "body": {
            "type": "textarea",
            "label": "Body (JSON)",
            "placeholder": '{"booking_id": "{{booking.id}}", "customer": "{{booking.customer_email}}"}',
            "description": "Request body in JSON format. You can use variables like {{booking.id}}",
            "required": False,
            "rows": 8,
        },
        "timeout": {
            "type": "number",
            "label": "Timeout (seconds)",
            "default": DEFAULT_TIMEOUT_SECONDS,
            "min": 1,
            "max": MAX_TIMEOUT_SECONDS,
            "required": False,
        },
    }

    def __init__(
        self,
        http_client: httpx.AsyncClient | None = None,
        renderer: ITemplateRenderer | None = None,
        *,
        default_timeout: int = DEFAULT_TIMEOUT_SECONDS,
        max_timeout: int = MAX_TIMEOUT_SECONDS,
    ) -> None:
        super().__init__(renderer)
        self._http = http_client
        self._default_timeout = default_timeout
        self._max_timeout = max_timeout

    def validate(self, config: Mapping[str, Any]) -> list[str]:
        errors: list[str] = []
        url = config.get("url")
        if not url:
            errors.append("Webhook URL is required")
        elif not _is_http_url(str(url)):
            errors.append("Invalid webhook URL format")

        method = config.get("method")
        if method and str(method).upper() not in ALLOWED_METHODS:
            errors.append("Invalid HTTP method")

        headers = config.get("headers")
        if headers and not _is_json(str(headers)):
            errors.append("Headers must be valid JSON")

        body = config.get("body")
        if body and not _is_json(str(body)):
            errors.append("Body must be valid JSON")

        timeout = config.get("timeout")
        if timeout not in (None, ""):
            try:
                seconds = int(timeout)
            except (TypeError, ValueError):
                errors.append("Timeout must be a number")
            else:
                if not 1 <= seconds <= self._max_timeout:
                    errors.append(f"Timeout must be between 1 and {self._max_timeout} seconds")
        return errors

    async def execute(
        self, config: Mapping[str, Any], context: Mapping[str, Any]
    ) -> dict[str, Any]:
        ctx = dict(context)
        try:
            url = self.render(config.get("url"), ctx)
            if not _is_http_url(url):
                raise ValueError(f"Invalid webhook URL: {url}")

            method = str(config.get("method") or "POST").upper()
            timeout = int(config.get("timeout") or self._default_timeout)
            headers = self._parse_json(config.get("headers"), ctx, "headers") or {}
            body = self._parse_json(config.get("body"), ctx, "body")
            if body is None:
                body = ctx
            if "Content-Type" not in headers:
                headers["Content-Type"] = "application/json"

            response = await self._send(method, url, headers, body, timeout)
            if not 200 <= response.status_code < 300:
                raise ValueError(
                    f"Webhook returned status code {response.status_code}: {response.text}"
                )
        except Exception as e:
            raise ActionExecutionException(self.id, f"Failed to send webhook: {e}") from e

        logger.debug("webhook.send %s %s -> %d", method, url, response.status_code)
        return {
            "success": True,
            "url": url,
            "method": method,
            "status_code": response.status_code,
            "response": response.text,
        }

    def _parse_json(self, raw: Any, context: dict[str, Any], field: str) -> Any:
        """Render a JSON config string and decode it; None when the field is empty."""
        if not raw:
            return None
        rendered = self.render(raw, context)
        try:
            return json.loads(rendered)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in {field}: {e.msg}") from e

    async def _send(
        self,
        method: str,
        url: str,
        headers: dict[str, Any],
        body: Any,
        timeout: int,
    ) -> httpx.Response:
        if self._http is not None:
            return await self._http.request(
                method, url, headers=headers, json=body, timeout=timeout
            )
        async with httpx.AsyncClient() as client:
            return await client.request(
                method, url, headers=headers, json=body, timeout=timeout
            )
