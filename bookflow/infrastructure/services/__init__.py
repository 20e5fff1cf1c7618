"""Infrastructure services: template rendering and notification delivery."""

from bookflow.infrastructure.services.notification_service import (
    LogOnlyNotificationService,
)
from bookflow.infrastructure.services.template_renderer import ContextTemplateRenderer

__all__ = [
    "ContextTemplateRenderer",
    "LogOnlyNotificationService",
]
