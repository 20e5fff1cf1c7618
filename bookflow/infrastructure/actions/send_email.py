"""email.send action: render an email from the booking context and hand it to the notifier."""

from __future__ import annotations

import html
from collections.abc import Mapping
from typing import Any

from pydantic import EmailStr, TypeAdapter, ValidationError

from bookflow.application.interfaces.services import (
    INotificationService,
    ITemplateRenderer,
)
from bookflow.domain.exceptions import ActionExecutionException
from bookflow.infrastructure.actions.base import BaseAction
from bookflow.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

_email_adapter: TypeAdapter[str] = TypeAdapter(EmailStr)


def _html_body(body: str) -> str:
    """Escape the plain-text body and keep its line breaks in HTML."""
    return html.escape(body).replace("\n", "<br />\n")


class SendEmailAction(BaseAction):
    """Send an email to one recipient; to/subject/body may use context placeholders."""

    id = "email.send"
    name = "Send Email"
    description = "Send an email to specified recipients"
    category = "communication"
    icon = "PhEnvelope"
    config_schema = {
        "to": {
            "type": "string",
            "label": "To Email",
            "placeholder": "{{booking.customer_email}}",
            "required": True,
            "description": "Recipient email address. You can use variables like {{booking.customer_email}}",
        },
        "subject": {
            "type": "string",
            "label": "Subject",
            "placeholder": "Booking Confirmation - {{event.name}}",
            "required": True,
        },
        "body": {
            "type": "textarea",
            "label": "Email Body",
            "placeholder": "Hi {{booking.customer_name}},\n\nYour booking for {{event.name}} is confirmed...",
            "required": True,
            "rows": 10,
        },
    }

    def __init__(
        self,
        notification_service: INotificationService,
        renderer: ITemplateRenderer | None = None,
    ) -> None:
        super().__init__(renderer)
        self._notification_service = notification_service

    def validate(self, config: Mapping[str, Any]) -> list[str]:
        errors: list[str] = []
        if not config.get("to"):
            errors.append("Recipient email is required")
        if not config.get("subject"):
            errors.append("Email subject is required")
        if not config.get("body"):
            errors.append("Email body is required")
        return errors

    async def execute(
        self, config: Mapping[str, Any], context: Mapping[str, Any]
    ) -> dict[str, Any]:
        ctx = dict(context)
        try:
            to = self.render(config.get("to"), ctx).strip()
            subject = self.render(config.get("subject"), ctx)
            body = self.render(config.get("body"), ctx)
            try:
                _email_adapter.validate_python(to)
            except ValidationError:
                raise ValueError(f"Invalid email address: {to}") from None
            await self._notification_service.send([to], subject, _html_body(body))
        except Exception as e:
            raise ActionExecutionException(self.id, f"Failed to send email: {e}") from e

        logger.debug("email.send queued for %s (subject=%r)", to, subject[:80])
        return {
            "success": True,
            "email_sent_to": to,
            "subject": subject,
            "queued": True,
        }
