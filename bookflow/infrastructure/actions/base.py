"""Shared plumbing for the built-in workflow actions."""

from __future__ import annotations

from typing import Any, ClassVar

from bookflow.application.interfaces.services import ITemplateRenderer
from bookflow.infrastructure.services.template_renderer import ContextTemplateRenderer


class BaseAction:
    """Catalog metadata as class attributes plus context rendering for config values.

    Subclasses implement validate() and execute() (see IAction).
    """

    id: ClassVar[str]
    name: ClassVar[str]
    description: ClassVar[str]
    category: ClassVar[str]
    icon: ClassVar[str]
    config_schema: ClassVar[dict[str, dict[str, Any]]]

    def __init__(self, renderer: ITemplateRenderer | None = None) -> None:
        self._renderer = renderer or ContextTemplateRenderer()

    def render(self, value: Any, context: dict[str, Any]) -> str:
        """Render one config value against the context ("" for missing values)."""
        if value is None:
            return ""
        return self._renderer.render(str(value), context)
