"""SendWebhookAction: validation and delivery through httpx.MockTransport."""

import json

import httpx
import pytest

from bookflow.domain.exceptions import ActionExecutionException
from bookflow.infrastructure.actions import SendWebhookAction

CONTEXT = {"booking": {"id": "b1", "customer_email": "john@example.com"}}


def _client(status_code: int = 200, text: str = "ok"):
    """Return (client, requests) where requests collects every sent request."""
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(status_code, text=text)

    return httpx.AsyncClient(transport=httpx.MockTransport(handler)), requests


class TestValidate:
    def test_minimal_config_is_valid(self) -> None:
        assert SendWebhookAction().validate({"url": "https://hooks.example.com/x"}) == []

    def test_url_required(self) -> None:
        assert SendWebhookAction().validate({}) == ["Webhook URL is required"]

    def test_rejects_bad_values(self) -> None:
        errors = SendWebhookAction().validate(
            {
                "url": "not a url",
                "method": "DELETE",
                "headers": "{bad",
                "body": "[1,",
                "timeout": 500,
            }
        )
        assert errors == [
            "Invalid webhook URL format",
            "Invalid HTTP method",
            "Headers must be valid JSON",
            "Body must be valid JSON",
            "Timeout must be between 1 and 300 seconds",
        ]

    def test_timeout_must_be_numeric(self) -> None:
        errors = SendWebhookAction().validate({"url": "https://a.example.com", "timeout": "soon"})
        assert errors == ["Timeout must be a number"]

    def test_method_is_case_insensitive(self) -> None:
        assert SendWebhookAction().validate({"url": "https://a.example.com", "method": "put"}) == []


class TestExecute:
    async def test_posts_rendered_body(self) -> None:
        client, requests = _client(201, "created")
        action = SendWebhookAction(client)

        result = await action.execute(
            {
                "url": "https://hooks.example.com/{{booking.id}}",
                "headers": '{"Authorization": "Bearer t"}',
                "body": '{"booking_id": "{{booking.id}}"}',
            },
            CONTEXT,
        )

        (request,) = requests
        assert request.method == "POST"
        assert str(request.url) == "https://hooks.example.com/b1"
        assert request.headers["Authorization"] == "Bearer t"
        assert request.headers["Content-Type"] == "application/json"
        assert json.loads(request.content) == {"booking_id": "b1"}
        assert result == {
            "success": True,
            "url": "https://hooks.example.com/b1",
            "method": "POST",
            "status_code": 201,
            "response": "created",
        }

    async def test_context_sent_when_body_empty(self) -> None:
        client, requests = _client()
        await SendWebhookAction(client).execute(
            {"url": "https://hooks.example.com", "method": "put"}, CONTEXT
        )
        assert requests[0].method == "PUT"
        assert json.loads(requests[0].content) == CONTEXT

    async def test_non_2xx_raises(self) -> None:
        client, _ = _client(500, "server error")
        with pytest.raises(ActionExecutionException) as exc_info:
            await SendWebhookAction(client).execute({"url": "https://hooks.example.com"}, CONTEXT)
        assert exc_info.value.message == (
            "Failed to send webhook: Webhook returned status code 500: server error"
        )

    async def test_rendered_body_must_be_json(self) -> None:
        client, requests = _client()
        with pytest.raises(ActionExecutionException, match="Invalid JSON in body"):
            await SendWebhookAction(client).execute(
                {"url": "https://hooks.example.com", "body": '{"id": {{booking.id}}}'},
                CONTEXT,
            )
        assert requests == []

    async def test_transport_error_is_wrapped(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        with pytest.raises(ActionExecutionException, match="Failed to send webhook: refused"):
            await SendWebhookAction(client).execute({"url": "https://hooks.example.com"}, CONTEXT)
