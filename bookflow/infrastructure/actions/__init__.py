"""Built-in workflow actions."""

from __future__ import annotations

import httpx

from bookflow.application.interfaces.actions import IAction
from bookflow.application.interfaces.services import (
    INotificationService,
    ITemplateRenderer,
)
from bookflow.infrastructure.actions.base import BaseAction
from bookflow.infrastructure.actions.send_email import SendEmailAction
from bookflow.infrastructure.actions.send_webhook import SendWebhookAction
from bookflow.infrastructure.services.template_renderer import ContextTemplateRenderer


def default_actions(
    notification_service: INotificationService,
    *,
    http_client: httpx.AsyncClient | None = None,
    renderer: ITemplateRenderer | None = None,
    webhook_default_timeout: int = 30,
    webhook_max_timeout: int = 300,
) -> list[IAction]:
    """Return every compiled-in action, sharing one renderer."""
    renderer = renderer or ContextTemplateRenderer()
    return [
        SendEmailAction(notification_service, renderer),
        SendWebhookAction(
            http_client,
            renderer,
            default_timeout=webhook_default_timeout,
            max_timeout=webhook_max_timeout,
        ),
    ]


__all__ = [
    "BaseAction",
    "SendEmailAction",
    "SendWebhookAction",
    "default_actions",
]
